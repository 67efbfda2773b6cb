"""
Модуль доменных сущностей сервиса договоров
"""

# Импортируем модели в правильном порядке
from .base import Base
from .contract import Contract, ContractTemplate, ContractStatus
from .event import Event, EventCategory, Contact, Organization, Location
from .offer import Offer, OfferItem
from .employee import Employee, EmployeeSignature, EmployeeEmailAccount, EmailTemplate

__all__ = [
    "Base",
    "Contract",
    "ContractTemplate",
    "ContractStatus",
    "Event",
    "EventCategory",
    "Contact",
    "Organization",
    "Location",
    "Offer",
    "OfferItem",
    "Employee",
    "EmployeeSignature",
    "EmployeeEmailAccount",
    "EmailTemplate",
]
