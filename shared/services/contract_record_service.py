"""Сервис хранения договоров мероприятий."""

from typing import List, Mapping, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.contract import Contract, ContractStatus, ContractTemplate
from core.logging.logger import logger
from shared.services.contract_errors import (
    ContractNotFound,
    MissingTemplateError,
    TemplateLockedError,
    UpstreamFailure,
)
from shared.services.contract_generation_tracker import ContractGenerationTracker
from shared.services.contract_permission_service import Actor
from shared.services.contract_template_renderer import RenderedDocument, render
from shared.services.contract_variable_service import ContractVariableService, apply_variable_edits

ContractContent = Union[str, RenderedDocument]


def _as_stored(content: Optional[ContractContent]) -> Optional[str]:
    if content is None or isinstance(content, str):
        return content
    return content.to_stored()


class ContractRecordService:
    """
    Создание, чтение и изменение записей договоров.

    Текущим считается последний созданный договор мероприятия. Методы только
    делают flush, коммит остаётся за вызывающим кодом.
    """

    def __init__(self, session: AsyncSession, tracker: Optional[ContractGenerationTracker] = None):
        self.session = session
        self.tracker = tracker or ContractGenerationTracker()
        self.variables = ContractVariableService(session)

    async def _flush(self, action: str, **context) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Failed to {action}", error=str(e), **context)
            raise UpstreamFailure(f"Failed to {action}", cause=e) from e

    async def _fetch_one(self, query, action: str, **context):
        try:
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to {action}", error=str(e), **context)
            raise UpstreamFailure(f"Failed to {action}", cause=e) from e

    # --- Чтение ---

    async def get_current(self, event_id: str) -> Optional[Contract]:
        """Последний созданный договор мероприятия или None."""
        return await self._fetch_one(
            select(Contract)
            .where(Contract.event_id == event_id)
            .order_by(Contract.created_at.desc())
            .limit(1),
            "load current contract",
            event_id=event_id,
        )

    async def get_contract(self, contract_id: str) -> Contract:
        contract = await self._fetch_one(
            select(Contract).where(Contract.id == contract_id),
            "load contract",
            contract_id=contract_id,
        )
        if contract is None:
            raise ContractNotFound("Contract", contract_id)
        return contract

    async def list_templates(self) -> List[ContractTemplate]:
        """Активные шаблоны договоров по алфавиту."""
        try:
            result = await self.session.execute(
                select(ContractTemplate)
                .where(ContractTemplate.is_active.is_(True))
                .order_by(ContractTemplate.name)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Failed to list contract templates", error=str(e))
            raise UpstreamFailure("Failed to list contract templates", cause=e) from e

    async def get_template(self, template_id: str) -> ContractTemplate:
        template = await self._fetch_one(
            select(ContractTemplate).where(ContractTemplate.id == template_id),
            "load contract template",
            template_id=template_id,
        )
        if template is None:
            raise ContractNotFound("ContractTemplate", template_id)
        return template

    async def resolve_template_for_event(self, event_id: str) -> ContractTemplate:
        """Шаблон, привязанный к категории мероприятия."""
        event = await self.variables.get_event(event_id)
        template = event.category.contract_template if event.category else None
        if template is None:
            raise MissingTemplateError(event_id)
        return template

    async def _template_for(self, event_id: str, template_id: Optional[str]) -> ContractTemplate:
        if template_id:
            return await self.get_template(template_id)
        return await self.resolve_template_for_event(event_id)

    async def render_for_event(
        self,
        event_id: str,
        template_id: Optional[str] = None,
        edits: Optional[Mapping[str, str]] = None,
    ) -> RenderedDocument:
        """Вычисляет переменные и рендерит шаблон для мероприятия."""
        template = await self._template_for(event_id, template_id)
        variables = await self.variables.resolve(event_id)
        if edits:
            variables = apply_variable_edits(variables, edits)
        return render(template, variables)

    # --- Изменение ---

    async def create_draft(
        self,
        event_id: str,
        template_id: Optional[str] = None,
        content: Optional[ContractContent] = None,
        created_by: Optional[str] = None,
    ) -> Contract:
        """
        Создать договор-черновик.

        Args:
            event_id: ID мероприятия
            template_id: ID шаблона (по умолчанию шаблон категории мероприятия)
            content: Отрендеренный документ (если не передан, рендерится из шаблона)
            created_by: ID автора

        Returns:
            Новый договор в статусе draft
        """
        event = await self.variables.get_event(event_id)
        template = await self._template_for(event_id, template_id)
        if content is None:
            content = await self.render_for_event(event_id, template.id)

        contract = Contract(
            event_id=event_id,
            template_id=template.id,
            client_id=event.contact_person_id or event.organization_id,
            title=f"Umowa dla eventu {event_id}",
            content=_as_stored(content),
            status=ContractStatus.DRAFT.value,
            created_by=created_by,
        )
        self.session.add(contract)
        await self._flush("create contract", event_id=event_id)

        logger.info(
            "Contract draft created",
            contract_id=contract.id,
            event_id=event_id,
            template_id=template.id,
            created_by=created_by,
        )
        return contract

    async def get_or_create(
        self,
        event_id: str,
        template_id: Optional[str] = None,
        content: Optional[ContractContent] = None,
        created_by: Optional[str] = None,
    ) -> Contract:
        """Текущий договор мероприятия; если его нет, создаётся черновик."""
        contract = await self.get_current(event_id)
        if contract is not None:
            return contract
        return await self.create_draft(event_id, template_id, content, created_by)

    async def update_content(self, contract_id: str, content: ContractContent) -> Contract:
        """Сохранить новое содержимое. После генерации PDF договор помечается устаревшим."""
        contract = await self.get_contract(contract_id)
        contract.content = _as_stored(content)
        self.tracker.mark_content_changed(contract)
        await self._flush("update contract content", contract_id=contract_id)
        logger.info(
            "Contract content updated",
            contract_id=contract_id,
            modified_after_generation=contract.modified_after_generation,
        )
        return contract

    async def switch_template(
        self,
        contract_id: str,
        template_id: str,
        variables: Mapping[str, str],
    ) -> Contract:
        """Сменить шаблон договора. Доступно только до генерации PDF."""
        contract = await self.get_contract(contract_id)
        if contract.generated_pdf_path:
            logger.warning(
                "Template switch rejected for generated contract",
                contract_id=contract_id,
                template_id=template_id,
            )
            raise TemplateLockedError(contract_id)

        template = await self.get_template(template_id)
        document = render(template, variables)
        contract.template_id = template.id
        contract.content = document.to_stored()
        await self._flush("switch contract template", contract_id=contract_id)

        logger.info("Contract template switched", contract_id=contract_id, template_id=template_id)
        return contract

    async def save_variables(
        self,
        event_id: str,
        edits: Mapping[str, str],
        actor: Actor,
        template_id: Optional[str] = None,
    ) -> Contract:
        """
        Сохранить договор с отредактированными переменными.

        Переменные вычисляются заново, правки накладываются сверху,
        шаблон текущего договора рендерится повторно.
        """
        contract = await self.get_current(event_id)
        template_id = template_id or (contract.template_id if contract else None)
        document = await self.render_for_event(event_id, template_id, edits)

        if contract is None:
            return await self.create_draft(event_id, template_id, document, created_by=actor.id)
        return await self.update_content(contract.id, document)

    async def delete(self, contract_id: str) -> None:
        contract = await self.get_contract(contract_id)
        await self.session.delete(contract)
        await self._flush("delete contract", contract_id=contract_id)
        logger.info("Contract deleted", contract_id=contract_id)
