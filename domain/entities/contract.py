"""Модели для системы договоров мероприятий."""

import enum

from sqlalchemy import Column, String, DateTime, Boolean, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base, generate_id, utc_now


class ContractStatus(str, enum.Enum):
    """Статус договора в жизненном цикле подписания."""
    DRAFT = "draft"
    ISSUED = "issued"
    SENT = "sent"
    SIGNED_BY_CLIENT = "signed_by_client"
    SIGNED_RETURNED = "signed_returned"
    CANCELLED = "cancelled"

    @property
    def timestamp_field(self):
        """Имя поля с датой входа в статус (у черновика его нет)."""
        if self is ContractStatus.DRAFT:
            return None
        return f"{self.value}_at"


class ContractTemplate(Base):
    """Шаблон договора."""

    __tablename__ = "contract_templates"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False, index=True)
    content = Column(Text, nullable=True)  # Текст шаблона (старый формат)
    content_html = Column(Text, nullable=True)  # HTML шаблона (старый формат, приоритетнее content)
    # {pages: [...], logoScale, logoPositionX, logoPositionY, lineHeight, selectedLogo, ...}
    page_settings = Column(JSON, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    contracts = relationship("Contract", back_populates="template")

    @property
    def legacy_content(self):
        return self.content_html or self.content

    def __repr__(self) -> str:
        return f"<ContractTemplate(id={self.id}, name='{self.name}')>"


class Contract(Base):
    """Договор на проведение мероприятия."""

    __tablename__ = "contracts"

    id = Column(String(36), primary_key=True, default=generate_id)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    template_id = Column(String(36), ForeignKey("contract_templates.id", ondelete="SET NULL"), nullable=True)
    client_id = Column(String(36), nullable=True)  # Контакт или организация мероприятия
    title = Column(String(255), nullable=False)

    # Снимок отрендеренного документа: HTML или JSON {"pages": [...], "settings": {...}}
    content = Column(Text, nullable=True)

    status = Column(String(50), nullable=False, default=ContractStatus.DRAFT.value)
    created_by = Column(String(36), nullable=True)

    # Сгенерированный PDF
    generated_pdf_path = Column(Text, nullable=True)
    generated_pdf_at = Column(DateTime(timezone=True), nullable=True)
    modified_after_generation = Column(Boolean, default=False, nullable=False)

    # Даты входа в статусы
    issued_at = Column(DateTime(timezone=True), nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    signed_by_client_at = Column(DateTime(timezone=True), nullable=True)
    signed_returned_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    template = relationship("ContractTemplate", back_populates="contracts")
    event = relationship("Event")

    @property
    def contract_status(self) -> ContractStatus:
        return ContractStatus(self.status)

    def __repr__(self) -> str:
        return f"<Contract(id={self.id}, event_id={self.event_id}, status={self.status})>"
