"""Клиент внешнего сервиса доставки почты."""

from typing import Any, Dict, Optional

import httpx

from core.config.settings import settings
from core.logging.logger import logger
from shared.services.contract_errors import UpstreamFailure
from shared.services.rendering_client import service_headers


class EmailDeliveryClient:
    """Отправка письма от имени почтового аккаунта сотрудника."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            url: Адрес сервиса (по умолчанию из settings)
            timeout: Таймаут запроса в секундах
            transport: Транспорт httpx (в тестах MockTransport)
        """
        self.url = url or settings.email_service_url
        self.timeout = timeout or settings.email_service_timeout
        self._transport = transport

    async def send(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Отправить письмо.

        Args:
            payload: {fromAccountId, to, subject, htmlBody, attachments[]}

        Returns:
            Ответ сервиса (подтверждение доставки)
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload, headers=service_headers())
                response.raise_for_status()
                data = response.json() if response.content else {}
        except httpx.HTTPStatusError as e:
            logger.error(
                "Email service HTTP error",
                status_code=e.response.status_code,
                response_text=e.response.text[:500],
                to_email=payload.get("to"),
            )
            raise UpstreamFailure(f"Email service returned {e.response.status_code}", cause=e) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Email service error", error=str(e), to_email=payload.get("to"))
            raise UpstreamFailure("Email service unavailable", cause=e) from e

        if isinstance(data, dict) and data.get("success") is False:
            logger.error("Email service rejected message", to_email=payload.get("to"), response=data)
            raise UpstreamFailure(data.get("error") or "Email service rejected message")

        logger.info("Email delivered", to_email=payload.get("to"), subject=payload.get("subject"))
        return data if isinstance(data, dict) else {}
