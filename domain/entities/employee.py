"""Модели отправителя писем: сотрудник, подпись, почтовые аккаунты, шаблон письма."""

from sqlalchemy import Column, String, Boolean, Text, ForeignKey, JSON, DateTime
from sqlalchemy.orm import relationship
from .base import Base, generate_id, utc_now


class Employee(Base):
    """Сотрудник (профиль отправителя и субъект прав)."""

    __tablename__ = "employees"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=True)
    surname = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone_number = Column(String(50), nullable=True)
    occupation = Column(String(255), nullable=True)
    avatar_url = Column(Text, nullable=True)
    role = Column(String(50), nullable=False, default="employee")
    permissions = Column(JSON, nullable=True)  # ["contracts_manage", ...]
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    signature = relationship("EmployeeSignature", uselist=False, back_populates="employee")
    email_accounts = relationship("EmployeeEmailAccount", back_populates="employee")

    @property
    def full_name(self) -> str:
        return f"{self.name or ''} {self.surname or ''}".strip()


class EmployeeSignature(Base):
    """Подпись сотрудника для писем."""

    __tablename__ = "employee_signatures"

    id = Column(String(36), primary_key=True, default=generate_id)
    employee_id = Column(String(36), ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, unique=True)
    full_name = Column(String(255), nullable=False)
    position = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    website = Column(String(255), nullable=True)
    avatar_url = Column(Text, nullable=True)
    use_custom_html = Column(Boolean, default=False, nullable=False)
    custom_html = Column(Text, nullable=True)

    employee = relationship("Employee", back_populates="signature")


class EmployeeEmailAccount(Base):
    """Почтовый аккаунт сотрудника, от имени которого уходят письма."""

    __tablename__ = "employee_email_accounts"

    id = Column(String(36), primary_key=True, default=generate_id)
    employee_id = Column(String(36), ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    email_address = Column(String(255), nullable=False)
    from_name = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)

    employee = relationship("Employee", back_populates="email_accounts")


class EmailTemplate(Base):
    """Общий макет письма с плейсхолдерами {{LOGO_URL}}, {{CONTENT}}, {{SIGNATURE}}."""

    __tablename__ = "email_templates"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    body_template = Column(Text, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
