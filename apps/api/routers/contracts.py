"""
API роутер договора мероприятия
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.config.settings import settings
from core.database.session import get_db_session
from domain.entities.contract import Contract
from apps.api.dependencies import (
    get_actor,
    get_artifact_storage,
    get_email_delivery_client,
    get_permission_oracle,
    get_rendering_client,
)
from apps.api.schemas import (
    ContractResponse,
    ContractStateResponse,
    ContractTemplateResponse,
    EmailDefaultsResponse,
    GeneratePdfRequest,
    PdfUrlResponse,
    RenderedDocumentResponse,
    SaveVariablesRequest,
    SendEmailRequest,
    SetStatusRequest,
    SwitchTemplateRequest,
    UpdateContentRequest,
)
from shared.services.contract_email_service import DEFAULT_MESSAGE, DEFAULT_SUBJECT, ContractEmailService
from shared.services.contract_errors import ContractNotFound, ContractPermissionDenied, MissingTemplateError
from shared.services.contract_generation_tracker import ContractGenerationTracker
from shared.services.contract_pdf_service import ContractPdfService
from shared.services.contract_permission_service import Actor, PermissionOracle
from shared.services.contract_record_service import ContractRecordService
from shared.services.contract_status_service import ContractStatusService, status_label
from shared.services.contract_template_renderer import (
    LegacyDocument,
    RenderedDocument,
    document_from_stored,
)
from shared.services.contract_variable_service import apply_variable_edits
from shared.services.media_storage import ArtifactStorageClient
from shared.services.rendering_client import RenderingServiceClient
from shared.services.senders.email_sender import EmailDeliveryClient

router = APIRouter(prefix="/events/{event_id}/contract", tags=["contracts"])


def _document_response(document: Optional[RenderedDocument]) -> Optional[RenderedDocumentResponse]:
    if document is None:
        return None
    if isinstance(document, LegacyDocument):
        return RenderedDocumentResponse(kind="legacy", html=document.html)
    return RenderedDocumentResponse(kind="paged", pages=document.pages, settings=document.settings)


def _contract_response(contract: Contract) -> ContractResponse:
    return ContractResponse(
        id=contract.id,
        event_id=contract.event_id,
        template_id=contract.template_id,
        client_id=contract.client_id,
        title=contract.title,
        status=contract.status,
        status_label=status_label(contract.status),
        created_by=contract.created_by,
        generated_pdf_path=contract.generated_pdf_path,
        generated_pdf_at=contract.generated_pdf_at,
        modified_after_generation=bool(contract.modified_after_generation),
        issued_at=contract.issued_at,
        sent_at=contract.sent_at,
        signed_by_client_at=contract.signed_by_client_at,
        signed_returned_at=contract.signed_returned_at,
        cancelled_at=contract.cancelled_at,
        created_at=contract.created_at,
        updated_at=contract.updated_at,
    )


async def _require_current(records: ContractRecordService, event_id: str) -> Contract:
    contract = await records.get_current(event_id)
    if contract is None:
        raise ContractNotFound("Contract for event", event_id)
    return contract


def _ensure_can_edit(db: AsyncSession, oracle: PermissionOracle, contract: Optional[Contract], actor: Actor) -> None:
    if not ContractStatusService(db, oracle).can_edit(contract, actor):
        raise ContractPermissionDenied(
            f"Contract in status '{contract.status}' can only be changed by a privileged user",
            actor_id=actor.id,
        )


@router.get("", response_model=ContractStateResponse)
async def get_contract_state(
    event_id: str,
    actor: Actor = Depends(get_actor),
    oracle: PermissionOracle = Depends(get_permission_oracle),
    db: AsyncSession = Depends(get_db_session)
):
    """Текущий договор мероприятия, его документ и вычисленные переменные."""
    records = ContractRecordService(db)
    status_service = ContractStatusService(db, oracle, records)

    variables = await records.variables.resolve(event_id)
    contract = await records.get_current(event_id)

    template_exists = True
    if contract is not None and contract.content is not None:
        document = document_from_stored(contract.content)
    else:
        try:
            document = await records.render_for_event(event_id, contract.template_id if contract else None)
        except MissingTemplateError:
            template_exists = False
            document = None

    return ContractStateResponse(
        event_id=event_id,
        template_exists=template_exists,
        contract=_contract_response(contract) if contract else None,
        document=_document_response(document),
        variables=variables,
        can_edit=status_service.can_edit(contract, actor),
        needs_generation=ContractGenerationTracker().needs_generation(contract),
    )


@router.get("/templates", response_model=List[ContractTemplateResponse])
async def list_contract_templates(
    event_id: str,
    db: AsyncSession = Depends(get_db_session)
):
    """Активные шаблоны для смены шаблона договора."""
    return await ContractRecordService(db).list_templates()


@router.put("/variables", response_model=ContractResponse)
async def save_contract_variables(
    event_id: str,
    data: SaveVariablesRequest,
    actor: Actor = Depends(get_actor),
    oracle: PermissionOracle = Depends(get_permission_oracle),
    db: AsyncSession = Depends(get_db_session)
):
    """Сохранить договор с отредактированными переменными."""
    records = ContractRecordService(db)
    _ensure_can_edit(db, oracle, await records.get_current(event_id), actor)
    contract = await records.save_variables(
        event_id, data.edits, actor, template_id=data.template_id
    )
    await db.commit()
    return _contract_response(contract)


@router.put("/template", response_model=ContractResponse)
async def switch_contract_template(
    event_id: str,
    data: SwitchTemplateRequest,
    actor: Actor = Depends(get_actor),
    oracle: PermissionOracle = Depends(get_permission_oracle),
    db: AsyncSession = Depends(get_db_session)
):
    """Сменить шаблон договора (только до генерации PDF)."""
    records = ContractRecordService(db)
    contract = await records.get_current(event_id)
    _ensure_can_edit(db, oracle, contract, actor)
    if contract is None:
        contract = await records.create_draft(
            event_id,
            data.template_id,
            await records.render_for_event(event_id, data.template_id, data.edits),
            created_by=actor.id,
        )
    else:
        variables = apply_variable_edits(await records.variables.resolve(event_id), data.edits)
        contract = await records.switch_template(contract.id, data.template_id, variables)
    await db.commit()
    return _contract_response(contract)


@router.put("/content", response_model=ContractResponse)
async def update_contract_content(
    event_id: str,
    data: UpdateContentRequest,
    actor: Actor = Depends(get_actor),
    oracle: PermissionOracle = Depends(get_permission_oracle),
    db: AsyncSession = Depends(get_db_session)
):
    """Сохранить изменённое содержимое договора."""
    records = ContractRecordService(db)
    contract = await _require_current(records, event_id)
    _ensure_can_edit(db, oracle, contract, actor)
    contract = await records.update_content(contract.id, data.content)
    await db.commit()
    return _contract_response(contract)


@router.post("/status", response_model=ContractResponse)
async def set_contract_status(
    event_id: str,
    data: SetStatusRequest,
    actor: Actor = Depends(get_actor),
    oracle: PermissionOracle = Depends(get_permission_oracle),
    db: AsyncSession = Depends(get_db_session)
):
    """Сменить статус договора."""
    contract = await ContractStatusService(db, oracle).set_status(
        event_id, data.status, actor, content=data.content
    )
    await db.commit()
    return _contract_response(contract)


@router.post("/pdf", response_model=ContractResponse)
async def generate_contract_pdf(
    event_id: str,
    data: GeneratePdfRequest,
    actor: Actor = Depends(get_actor),
    rendering_client: RenderingServiceClient = Depends(get_rendering_client),
    db: AsyncSession = Depends(get_db_session)
):
    """Сгенерировать PDF договора."""
    contract = await ContractPdfService(db, rendering_client).generate(
        event_id, data.html, data.css, actor, template_id=data.template_id
    )
    await db.commit()
    return _contract_response(contract)


@router.get("/pdf-url", response_model=PdfUrlResponse)
async def get_contract_pdf_url(
    event_id: str,
    storage: ArtifactStorageClient = Depends(get_artifact_storage),
    db: AsyncSession = Depends(get_db_session)
):
    """Ссылка на сгенерированный PDF (ограничена по времени)."""
    pdf_service = ContractPdfService(db, storage=storage)
    contract = await _require_current(pdf_service.records, event_id)
    url = await pdf_service.get_download_url(contract)
    return PdfUrlResponse(url=url, expires_in=settings.signed_url_expires_seconds)


@router.get("/email-defaults", response_model=EmailDefaultsResponse)
async def get_email_defaults(
    event_id: str,
    db: AsyncSession = Depends(get_db_session)
):
    """Получатель и текст письма по умолчанию."""
    hint = await ContractEmailService(db).recipient_hint(event_id)
    return EmailDefaultsResponse(
        to=hint.email,
        client_name=hint.name,
        subject=DEFAULT_SUBJECT,
        message=DEFAULT_MESSAGE,
    )


@router.post("/email", response_model=ContractResponse)
async def send_contract_email(
    event_id: str,
    data: SendEmailRequest,
    actor: Actor = Depends(get_actor),
    oracle: PermissionOracle = Depends(get_permission_oracle),
    delivery_client: EmailDeliveryClient = Depends(get_email_delivery_client),
    storage: ArtifactStorageClient = Depends(get_artifact_storage),
    db: AsyncSession = Depends(get_db_session)
):
    """Отправить договор клиенту и перевести его в статус «Wysłana»."""
    email_service = ContractEmailService(
        db, delivery_client, storage, ContractStatusService(db, oracle)
    )
    contract = await email_service.send(
        event_id,
        data.to,
        data.subject,
        data.message,
        actor,
        from_account_id=data.from_account_id,
        attach_pdf=data.attach_pdf,
    )
    await db.commit()
    return _contract_response(contract)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contract(
    event_id: str,
    actor: Actor = Depends(get_actor),
    oracle: PermissionOracle = Depends(get_permission_oracle),
    db: AsyncSession = Depends(get_db_session)
):
    """Удалить текущий договор мероприятия."""
    records = ContractRecordService(db)
    contract = await _require_current(records, event_id)
    _ensure_can_edit(db, oracle, contract, actor)
    await records.delete(contract.id)
    await db.commit()
