"""Проверка прав на операции с договорами."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from domain.entities.employee import Employee

ADMIN_ROLE = "admin"
CONTRACTS_MANAGE_PERMISSION = "contracts_manage"


@dataclass(frozen=True)
class Actor:
    """Пользователь, выполняющий операцию. Передаётся явно в каждый вызов."""

    id: str
    role: str = "employee"
    permissions: FrozenSet[str] = field(default_factory=frozenset)
    name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_employee(cls, employee: Employee) -> "Actor":
        return cls(
            id=employee.id,
            role=employee.role or "employee",
            permissions=frozenset(employee.permissions or []),
            name=employee.full_name or None,
            email=employee.email,
        )


class PermissionOracle(ABC):
    """Источник решения о привилегированности пользователя."""

    @abstractmethod
    def is_privileged(self, actor: Actor) -> bool:
        """Может ли пользователь менять договор в любом статусе."""
        ...


class RolePermissionOracle(PermissionOracle):
    """Привилегирован администратор или обладатель права contracts_manage."""

    def is_privileged(self, actor: Actor) -> bool:
        return actor.role == ADMIN_ROLE or CONTRACTS_MANAGE_PERMISSION in actor.permissions
