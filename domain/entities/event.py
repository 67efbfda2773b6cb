"""Модели мероприятия и связанных с ним записей (клиент, организация, локация)."""

from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey, Text, Boolean
from sqlalchemy.orm import relationship
from .base import Base, generate_id, utc_now


class EventCategory(Base):
    """Категория мероприятия с привязанным шаблоном договора."""

    __tablename__ = "event_categories"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    contract_template_id = Column(String(36), ForeignKey("contract_templates.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    contract_template = relationship("ContractTemplate")


class Contact(Base):
    """Контактное лицо (клиент-физлицо)."""

    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=generate_id)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    full_name = Column(String(512), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    pesel = Column(String(11), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(255), nullable=True)
    postal_code = Column(String(20), nullable=True)


class Organization(Base):
    """Организация-клиент."""

    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(512), nullable=False)
    nip = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(255), nullable=True)
    postal_code = Column(String(20), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)


class Location(Base):
    """Структурированная локация мероприятия."""

    __tablename__ = "locations"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(512), nullable=True)
    formatted_address = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(255), nullable=True)
    postal_code = Column(String(20), nullable=True)


class Event(Base):
    """Мероприятие."""

    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(512), nullable=False)
    event_date = Column(DateTime(timezone=True), nullable=True)
    event_end_date = Column(DateTime(timezone=True), nullable=True)
    budget = Column(Numeric(12, 2), nullable=True)
    location = Column(Text, nullable=True)  # Адрес строкой, если нет записи Location
    category_id = Column(String(36), ForeignKey("event_categories.id", ondelete="SET NULL"), nullable=True)
    contact_person_id = Column(String(36), ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True)
    location_id = Column(String(36), ForeignKey("locations.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    category = relationship("EventCategory")
    contact = relationship("Contact")
    organization = relationship("Organization")
    location_record = relationship("Location")

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name='{self.name}')>"
