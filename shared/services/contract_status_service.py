"""Жизненный цикл статусов договора."""

from typing import Dict, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.base import utc_now
from domain.entities.contract import Contract, ContractStatus
from core.logging.logger import logger
from shared.services.contract_errors import (
    ContractPermissionDenied,
    ContractValidationError,
    UpstreamFailure,
)
from shared.services.contract_permission_service import Actor, PermissionOracle, RolePermissionOracle
from shared.services.contract_record_service import ContractContent, ContractRecordService

STATUS_LABELS: Dict[ContractStatus, str] = {
    ContractStatus.DRAFT: "Szkic",
    ContractStatus.ISSUED: "Wystawiona",
    ContractStatus.SENT: "Wysłana",
    ContractStatus.SIGNED_BY_CLIENT: "Podpisana przez klienta",
    ContractStatus.SIGNED_RETURNED: "Podpisana odesłana",
    ContractStatus.CANCELLED: "Anulowana",
}

# Статусы, в которых договор может менять любой сотрудник
OPEN_STATUSES = frozenset({ContractStatus.DRAFT, ContractStatus.CANCELLED})


def status_label(status: Union[ContractStatus, str]) -> str:
    """Польская подпись статуса для интерфейса."""
    try:
        return STATUS_LABELS[ContractStatus(status)]
    except ValueError:
        return str(status)


def _parse_status(value: Union[ContractStatus, str]) -> ContractStatus:
    try:
        return ContractStatus(value)
    except ValueError:
        raise ContractValidationError(f"Unknown contract status: {value}")


class ContractStatusService:
    """
    Переходы статусов договора.

    Переход разрешён привилегированному пользователю в любом статусе,
    остальным только пока договор в draft или cancelled.
    """

    def __init__(
        self,
        session: AsyncSession,
        permission_oracle: Optional[PermissionOracle] = None,
        records: Optional[ContractRecordService] = None,
    ):
        self.session = session
        self.permission_oracle = permission_oracle or RolePermissionOracle()
        self.records = records or ContractRecordService(session)

    def can_edit(self, contract: Optional[Contract], actor: Actor) -> bool:
        if self.permission_oracle.is_privileged(actor):
            return True
        if contract is None:
            return True
        return contract.contract_status in OPEN_STATUSES

    def can_send(self, contract: Contract, actor: Actor) -> bool:
        """Отправить договор может привилегированный пользователь или его автор."""
        if self.permission_oracle.is_privileged(actor):
            return True
        return contract.created_by is not None and contract.created_by == actor.id

    async def set_status(
        self,
        event_id: str,
        new_status: Union[ContractStatus, str],
        actor: Actor,
        content: Optional[ContractContent] = None,
    ) -> Contract:
        """
        Перевести текущий договор мероприятия в новый статус.

        Args:
            event_id: ID мероприятия
            new_status: Целевой статус
            actor: Пользователь, выполняющий переход
            content: Текущий отрендеренный документ (сохраняется вместе со статусом)

        Returns:
            Обновлённый договор (создаётся, если его ещё не было)
        """
        status = _parse_status(new_status)
        contract = await self.records.get_current(event_id)

        if not self.can_edit(contract, actor):
            logger.warning(
                "Contract status change denied",
                contract_id=contract.id,
                current_status=contract.status,
                new_status=status.value,
                actor_id=actor.id,
            )
            raise ContractPermissionDenied(
                f"Contract in status '{contract.status}' can only be changed by a privileged user",
                actor_id=actor.id,
            )

        if contract is None:
            contract = await self.records.get_or_create(event_id, content=content, created_by=actor.id)

        return await self.apply_status(contract, status, actor, content)

    async def apply_status(
        self,
        contract: Contract,
        new_status: Union[ContractStatus, str],
        actor: Actor,
        content: Optional[ContractContent] = None,
    ) -> Contract:
        """Записать статус, дату перехода и снимок содержимого. Права проверяет вызывающий код."""
        status = _parse_status(new_status)
        previous = contract.status
        contract.status = status.value
        # Повторный вход в статус перезаписывает дату
        if status.timestamp_field:
            setattr(contract, status.timestamp_field, utc_now())
        if content is not None:
            stored = content if isinstance(content, str) else content.to_stored()
            if stored != contract.content:
                contract.content = stored
                self.records.tracker.mark_content_changed(contract)

        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to change contract status", contract_id=contract.id, error=str(e))
            raise UpstreamFailure("Failed to change contract status", cause=e) from e

        logger.info(
            "Contract status changed",
            contract_id=contract.id,
            event_id=contract.event_id,
            old_status=previous,
            new_status=status.value,
            actor_id=actor.id,
        )
        return contract
