"""
Типизированные ошибки сервиса договоров.

Каждая ошибка несёт человекочитаемое сообщение (message) и машинный код (code),
по которому API сопоставляет HTTP-статус.

    ContractError
    +-- ContractValidationError
    |   +-- MissingTemplateError
    |   +-- TemplateLockedError
    +-- ContractPermissionDenied
    +-- ContractNotFound
    +-- UpstreamFailure
"""

from typing import Optional


class ContractError(Exception):
    """Базовая ошибка сервиса договоров."""

    code: str = "CONTRACT_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ContractValidationError(ContractError):
    """Некорректный ввод: нет шаблона, получателя или обязательного поля."""

    code = "VALIDATION_ERROR"


class MissingTemplateError(ContractValidationError):
    """Для мероприятия не найден шаблон договора."""

    code = "MISSING_TEMPLATE"

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(f"No contract template available for event {event_id}")


class TemplateLockedError(ContractValidationError):
    """Смена шаблона после генерации PDF запрещена."""

    code = "TEMPLATE_LOCKED"

    def __init__(self, contract_id: str):
        self.contract_id = contract_id
        super().__init__(
            f"Contract {contract_id} already has a generated PDF, template cannot be changed"
        )


class ContractPermissionDenied(ContractError):
    """Недостаточно прав для операции над договором."""

    code = "PERMISSION_DENIED"

    def __init__(self, message: str, actor_id: Optional[str] = None):
        self.actor_id = actor_id
        super().__init__(message)


class ContractNotFound(ContractError):
    """Запись (мероприятие, договор, шаблон) не найдена."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class UpstreamFailure(ContractError):
    """Сбой внешней зависимости: БД, сервис рендеринга, хранилище, почта."""

    code = "UPSTREAM_FAILURE"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)
