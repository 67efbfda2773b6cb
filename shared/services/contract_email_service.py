"""Отправка договора клиенту по почте."""

from typing import Any, Dict, List, NamedTuple, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.contract import Contract, ContractStatus
from domain.entities.employee import Employee, EmployeeEmailAccount, EmployeeSignature, EmailTemplate
from core.config.settings import settings
from core.logging.logger import logger
from shared.services.contract_errors import (
    ContractNotFound,
    ContractPermissionDenied,
    ContractValidationError,
    UpstreamFailure,
)
from shared.services.contract_pdf_service import ContractPdfService
from shared.services.contract_permission_service import Actor
from shared.services.contract_status_service import ContractStatusService
from shared.services.contract_variable_service import ContractVariableService
from shared.services.media_storage.base import ArtifactStorageClient
from shared.services.senders.email_sender import EmailDeliveryClient

DEFAULT_SUBJECT = "Umowa - Event"
DEFAULT_MESSAGE = (
    "Dzień dobry,\n\n"
    "W załączeniu przesyłam umowę na realizację wydarzenia.\n\n"
    "Proszę o zapoznanie się z treścią i odesłanie podpisanego egzemplarza.\n\n"
    "W razie pytań proszę o kontakt."
)
ATTACHMENT_FILENAME = "umowa.pdf"


class RecipientHint(NamedTuple):
    email: str
    name: str


class SignatureData(NamedTuple):
    full_name: str
    position: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    avatar_url: Optional[str] = None


def _contact_row(icon: str, value: str, href: str, color: str = "#d3bb73") -> str:
    return (
        "<tr>"
        f'<td style="padding: 3px 10px 3px 0; vertical-align: middle;"><span style="color: #d3bb73;">{icon}</span></td>'
        f'<td style="padding: 3px 0;"><a href="{href}" style="color: {color}; text-decoration: none;">{value}</a></td>'
        "</tr>"
    )


def build_signature_table(data: SignatureData) -> str:
    """HTML-подпись: аватар, имя, должность, контакты."""
    avatar = ""
    if data.avatar_url:
        avatar = (
            '<td style="width: 80px; vertical-align: top; padding-right: 20px;">'
            f'<img src="{data.avatar_url}" alt="{data.full_name}" style="width: 80px; height: 80px; '
            'border-radius: 50%; object-fit: cover; border: 3px solid #d3bb73;"></td>'
        )
    position = ""
    if data.position:
        position = f'<p style="margin: 0 0 10px 0; color: #666; font-size: 14px; font-style: italic;">{data.position}</p>'

    rows = []
    if data.email:
        rows.append(_contact_row("✉", data.email, f"mailto:{data.email}"))
    if data.phone:
        rows.append(_contact_row("📞", data.phone, f"tel:{data.phone}", color="#333"))
    if data.website:
        rows.append(_contact_row("🌐", data.website, data.website))

    return (
        '<table role="presentation" style="width: 100%; border-collapse: collapse; font-family: Arial, sans-serif; margin-top: 20px;">'
        '<tr><td style="padding: 20px; background-color: #f8f8f8; border: 1px solid #e0e0e0;">'
        '<table role="presentation" style="width: 100%; border-collapse: collapse;"><tr>'
        f"{avatar}"
        '<td style="vertical-align: top;">'
        f'<h3 style="margin: 0 0 5px 0; color: #1c1f33; font-size: 18px; font-weight: bold;">{data.full_name}</h3>'
        f"{position}"
        f'<table role="presentation" style="border-collapse: collapse; font-size: 14px; color: #333;">{"".join(rows)}</table>'
        "</td></tr></table>"
        "</td></tr></table>"
    )


def build_email_body(content_html: str, signature_html: str, template: Optional[EmailTemplate]) -> str:
    """Оборачивает текст письма в макет (общий шаблон или минимальный div)."""
    if template is not None and template.body_template:
        return (
            template.body_template
            .replace("{{LOGO_URL}}", settings.email_logo_url)
            .replace("{{CONTENT}}", content_html)
            .replace("{{SIGNATURE}}", signature_html)
        )
    return (
        '<div style="font-family: Arial, sans-serif; padding: 20px;">'
        f'<div style="white-space: pre-wrap;">{content_html}</div>'
        f"{signature_html}"
        "</div>"
    )


class ContractEmailService:
    """Отправка договора: письмо с подписью, ссылка на PDF, перевод в статус sent."""

    def __init__(
        self,
        session: AsyncSession,
        delivery_client: Optional[EmailDeliveryClient] = None,
        storage: Optional[ArtifactStorageClient] = None,
        status_service: Optional[ContractStatusService] = None,
    ):
        self.session = session
        self.delivery_client = delivery_client or EmailDeliveryClient()
        self.storage = storage
        self.status_service = status_service or ContractStatusService(session)

    async def _scalars(self, query, action: str, **context) -> List[Any]:
        try:
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to {action}", error=str(e), **context)
            raise UpstreamFailure(f"Failed to {action}", cause=e) from e

    async def recipient_hint(self, event_id: str) -> RecipientHint:
        """Адрес и имя получателя по умолчанию: контакт, иначе организация."""
        event = await ContractVariableService(self.session).get_event(event_id)
        contact, organization = event.contact, event.organization
        return RecipientHint(
            email=(contact and contact.email) or (organization and organization.email) or "",
            name=(contact and contact.full_name) or (organization and organization.name) or "",
        )

    async def get_sender_account(self, actor: Actor, from_account_id: Optional[str] = None) -> EmployeeEmailAccount:
        """Активный почтовый аккаунт отправителя (явно выбранный или по умолчанию)."""
        accounts = await self._scalars(
            select(EmployeeEmailAccount)
            .where(
                EmployeeEmailAccount.employee_id == actor.id,
                EmployeeEmailAccount.is_active.is_(True),
            )
            .order_by(EmployeeEmailAccount.is_default.desc()),
            "load email accounts",
            actor_id=actor.id,
        )
        if not accounts:
            raise ContractValidationError("Sender has no active email accounts configured")

        if from_account_id is None:
            return accounts[0]
        for account in accounts:
            if account.id == from_account_id:
                return account
        raise ContractValidationError(f"Email account {from_account_id} is not available for sender")

    async def build_signature(self, actor: Actor, account: EmployeeEmailAccount) -> str:
        """Подпись: запись подписи, затем профиль сотрудника, затем минимальная."""
        signatures = await self._scalars(
            select(EmployeeSignature).where(EmployeeSignature.employee_id == actor.id),
            "load signature",
            actor_id=actor.id,
        )
        if signatures:
            signature = signatures[0]
            if signature.use_custom_html and signature.custom_html:
                return signature.custom_html
            return build_signature_table(SignatureData(
                full_name=signature.full_name,
                position=signature.position,
                email=signature.email,
                phone=signature.phone,
                website=signature.website,
                avatar_url=signature.avatar_url,
            ))

        employees = await self._scalars(
            select(Employee).where(Employee.id == actor.id),
            "load employee",
            actor_id=actor.id,
        )
        if employees and employees[0].full_name:
            employee = employees[0]
            return build_signature_table(SignatureData(
                full_name=employee.full_name,
                position=employee.occupation,
                email=employee.email or account.email_address,
                phone=employee.phone_number,
                avatar_url=employee.avatar_url,
            ))

        name = account.from_name or actor.name or ""
        return f"<p>Pozdrawiam<br>{name}<br>{account.email_address}</p>"

    async def get_default_template(self) -> Optional[EmailTemplate]:
        templates = await self._scalars(
            select(EmailTemplate).where(EmailTemplate.is_default.is_(True)).limit(1),
            "load email template",
        )
        return templates[0] if templates else None

    async def _attachments(self, contract: Contract, attach_pdf: bool) -> List[Dict[str, str]]:
        if not attach_pdf:
            return []
        if not contract.generated_pdf_path:
            raise ContractValidationError("Contract PDF has not been generated yet")

        pdf_service = ContractPdfService(self.session, storage=self.storage, records=self.status_service.records)
        url = await pdf_service.get_download_url(contract)
        return [{"filename": ATTACHMENT_FILENAME, "url": url, "contentType": "application/pdf"}]

    async def send(
        self,
        event_id: str,
        recipient: str,
        subject: str,
        message: str,
        actor: Actor,
        from_account_id: Optional[str] = None,
        attach_pdf: bool = True,
    ) -> Contract:
        """
        Отправить договор клиенту.

        Args:
            event_id: ID мероприятия
            recipient: Email получателя
            subject: Тема письма
            message: Текст письма (переводы строк заменяются на <br>)
            actor: Отправитель
            from_account_id: Почтовый аккаунт отправителя (по умолчанию основной)
            attach_pdf: Приложить ссылку на сгенерированный PDF

        Returns:
            Договор в статусе sent
        """
        if not (recipient or "").strip():
            raise ContractValidationError("Recipient email is required")
        if not (subject or "").strip():
            raise ContractValidationError("Email subject is required")

        account = await self.get_sender_account(actor, from_account_id)
        contract = await self.status_service.records.get_current(event_id)
        if contract is None:
            raise ContractNotFound("Contract for event", event_id)
        if not self.status_service.can_send(contract, actor):
            logger.warning(
                "Contract email denied",
                contract_id=contract.id,
                created_by=contract.created_by,
                actor_id=actor.id,
            )
            raise ContractPermissionDenied(
                "Contract can only be sent by its author or a privileged user",
                actor_id=actor.id,
            )

        attachments = await self._attachments(contract, attach_pdf)
        signature_html = await self.build_signature(actor, account)
        template = await self.get_default_template()
        html_body = build_email_body((message or "").replace("\n", "<br>"), signature_html, template)

        await self.delivery_client.send({
            "fromAccountId": account.id,
            "to": recipient.strip(),
            "subject": subject.strip(),
            "htmlBody": html_body,
            "attachments": attachments,
        })

        contract = await self.status_service.apply_status(contract, ContractStatus.SENT, actor)
        logger.info(
            "Contract sent by email",
            contract_id=contract.id,
            event_id=event_id,
            to_email=recipient.strip(),
            from_account_id=account.id,
        )
        return contract
