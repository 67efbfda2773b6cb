"""Клиент внешнего сервиса рендеринга PDF."""

from typing import Any, Dict, Optional

import httpx

from core.config.settings import settings
from core.logging.logger import logger
from shared.services.contract_errors import UpstreamFailure


def service_headers() -> Dict[str, str]:
    """Заголовки межсервисного вызова."""
    headers = {"Content-Type": "application/json"}
    if settings.service_api_key:
        headers["Authorization"] = f"Bearer {settings.service_api_key}"
    return headers


class RenderingServiceClient:
    """HTML → PDF. Сервис сам сохраняет файл и возвращает путь к нему."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url or settings.rendering_service_url
        self.timeout = timeout or settings.rendering_service_timeout
        self._transport = transport

    async def render_pdf(self, payload: Dict[str, Any]) -> str:
        """
        Отправить документ на рендеринг.

        Args:
            payload: {eventId, contractId, html, css, actorId}

        Returns:
            Путь к сгенерированному файлу в хранилище (artifactPath)
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload, headers=service_headers())
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Rendering service HTTP error",
                status_code=e.response.status_code,
                response_text=e.response.text[:500],
                contract_id=payload.get("contractId"),
            )
            raise UpstreamFailure(
                f"Rendering service returned {e.response.status_code}", cause=e
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Rendering service error", error=str(e), contract_id=payload.get("contractId"))
            raise UpstreamFailure("Rendering service unavailable", cause=e) from e

        artifact_path = data.get("artifactPath") if isinstance(data, dict) else None
        if not artifact_path:
            logger.error("Rendering service returned no artifact path", contract_id=payload.get("contractId"))
            raise UpstreamFailure("Rendering service returned no artifact path")
        return artifact_path
