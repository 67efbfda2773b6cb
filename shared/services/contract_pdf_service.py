"""Генерация PDF договора через внешний сервис рендеринга (HTML → PDF)."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.contract import Contract
from core.config.settings import settings
from core.logging.logger import logger
from shared.services.contract_errors import ContractNotFound, ContractValidationError, UpstreamFailure
from shared.services.contract_permission_service import Actor
from shared.services.contract_record_service import ContractRecordService
from shared.services.contract_template_renderer import document_from_stored
from shared.services.media_storage.base import ArtifactStorageClient
from shared.services.rendering_client import RenderingServiceClient


DEFAULT_CSS = """
@page { size: A4; margin: 2cm; }
body { font-family: 'DejaVu Sans', 'Liberation Sans', Arial, sans-serif; font-size: 11pt; line-height: 1.6; color: #000; }
p { text-align: justify; margin: 0.3em 0; }
table { border-collapse: collapse; }
.contract-page { page-break-after: always; }
.contract-page:last-child { page-break-after: auto; }
"""


def build_full_html(html_fragment: str, stylesheet: Optional[str] = None) -> str:
    """Самостоятельный HTML-документ для рендеринга."""
    css = stylesheet if stylesheet is not None else DEFAULT_CSS
    return f"""<!DOCTYPE html>
<html lang="pl">
<head><meta charset="utf-8"><style>{css}</style></head>
<body>
{html_fragment}
</body>
</html>"""


class ContractPdfService:
    """Генерация PDF из HTML-содержимого договора."""

    def __init__(
        self,
        session: AsyncSession,
        rendering_client: Optional[RenderingServiceClient] = None,
        storage: Optional[ArtifactStorageClient] = None,
        records: Optional[ContractRecordService] = None,
    ):
        self.session = session
        self.rendering_client = rendering_client or RenderingServiceClient()
        self.storage = storage
        self.records = records or ContractRecordService(session)

    async def generate(
        self,
        event_id: str,
        html_fragment: Optional[str],
        stylesheet: Optional[str],
        actor: Actor,
        template_id: Optional[str] = None,
    ) -> Contract:
        """
        Сгенерировать PDF текущего договора мероприятия.

        Args:
            event_id: ID мероприятия
            html_fragment: HTML договора (если не передан, берётся сохранённое содержимое)
            stylesheet: CSS для рендеринга (по умолчанию A4 со стандартными стилями)
            actor: Пользователь, запустивший генерацию
            template_id: Шаблон для договора, если его ещё нет

        Returns:
            Договор с обновлённым generated_pdf_path
        """
        contract = await self.records.get_or_create(event_id, template_id, created_by=actor.id)

        if html_fragment is None:
            document = document_from_stored(contract.content)
            if document is None:
                raise ContractValidationError(f"Contract {contract.id} has no content to render")
            html_fragment = document.to_html()

        payload = {
            "eventId": event_id,
            "contractId": contract.id,
            "html": build_full_html(html_fragment, stylesheet),
            "css": stylesheet if stylesheet is not None else DEFAULT_CSS,
            "actorId": actor.id,
        }
        # Путь и флаг меняются только после успешного рендеринга
        artifact_path = await self.rendering_client.render_pdf(payload)

        self.records.tracker.mark_generated(contract, artifact_path)
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to save generated PDF path", contract_id=contract.id, error=str(e))
            raise UpstreamFailure("Failed to save generated PDF path", cause=e) from e

        logger.info(
            "Contract PDF generated",
            contract_id=contract.id,
            event_id=event_id,
            artifact_path=artifact_path,
            actor_id=actor.id,
        )
        return contract

    async def get_download_url(self, contract: Contract, expires_in: Optional[int] = None) -> str:
        """Ограниченная по времени ссылка на сгенерированный PDF."""
        if not contract.generated_pdf_path:
            raise ContractValidationError(f"Contract {contract.id} has no generated PDF")
        if self.storage is None:
            from shared.services.media_storage import get_artifact_storage_client
            self.storage = get_artifact_storage_client()

        if not await self.storage.exists(contract.generated_pdf_path):
            logger.warning(
                "Generated PDF missing in storage",
                contract_id=contract.id,
                artifact_path=contract.generated_pdf_path,
            )
            raise ContractNotFound("Contract PDF", contract.generated_pdf_path)

        return await self.storage.get_signed_url(
            contract.generated_pdf_path,
            expires_in or settings.signed_url_expires_seconds,
        )
