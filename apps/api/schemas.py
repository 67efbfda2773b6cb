"""
Схемы Pydantic для API договоров мероприятий
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from domain.entities.contract import ContractStatus


class ContractTemplateResponse(BaseModel):
    """Шаблон договора в списке выбора."""
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class RenderedDocumentResponse(BaseModel):
    """Отрендеренный документ: постраничный (pages) или одной HTML-строкой (html)."""
    kind: str = Field(..., description="legacy | paged")
    html: Optional[str] = Field(None, description="HTML договора старого формата")
    pages: Optional[List[str]] = Field(None, description="Страницы договора")
    settings: Optional[Dict[str, Any]] = Field(None, description="Настройки страниц (логотип, интерлиньяж)")


class ContractResponse(BaseModel):
    """Запись договора."""
    id: str
    event_id: str
    template_id: Optional[str] = None
    client_id: Optional[str] = None
    title: str
    status: ContractStatus
    status_label: str
    created_by: Optional[str] = None
    generated_pdf_path: Optional[str] = None
    generated_pdf_at: Optional[datetime] = None
    modified_after_generation: bool = False
    issued_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    signed_by_client_at: Optional[datetime] = None
    signed_returned_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ContractStateResponse(BaseModel):
    """Состояние вкладки договора мероприятия."""
    event_id: str
    template_exists: bool = Field(..., description="Есть ли шаблон для мероприятия")
    contract: Optional[ContractResponse] = Field(None, description="Текущий договор (если создан)")
    document: Optional[RenderedDocumentResponse] = Field(None, description="Сохранённый или предварительный документ")
    variables: Dict[str, str] = Field(default_factory=dict, description="Вычисленные переменные")
    can_edit: bool = Field(..., description="Может ли пользователь менять договор")
    needs_generation: bool = Field(..., description="Нужно ли (пере)генерировать PDF")


class SaveVariablesRequest(BaseModel):
    """Сохранение отредактированных переменных."""
    edits: Dict[str, str] = Field(default_factory=dict, description="Изменённые переменные")
    template_id: Optional[str] = Field(None, description="Шаблон (по умолчанию шаблон текущего договора)")


class SwitchTemplateRequest(BaseModel):
    """Смена шаблона договора."""
    template_id: str = Field(..., min_length=1, description="ID нового шаблона")
    edits: Dict[str, str] = Field(default_factory=dict, description="Отредактированные переменные")


class UpdateContentRequest(BaseModel):
    """Ручное изменение содержимого договора."""
    content: str = Field(..., description="HTML или JSON {pages, settings}")


class SetStatusRequest(BaseModel):
    """Смена статуса договора."""
    status: ContractStatus
    content: Optional[str] = Field(None, description="Текущее содержимое для сохранения вместе со статусом")


class GeneratePdfRequest(BaseModel):
    """Генерация PDF договора."""
    html: Optional[str] = Field(None, description="HTML-фрагмент (по умолчанию сохранённое содержимое)")
    css: Optional[str] = Field(None, description="CSS для рендеринга")
    template_id: Optional[str] = Field(None, description="Шаблон, если договора ещё нет")


class PdfUrlResponse(BaseModel):
    """Ссылка на сгенерированный PDF."""
    url: str
    expires_in: int


class SendEmailRequest(BaseModel):
    """Отправка договора по почте."""
    to: str = Field(..., description="Email получателя")
    subject: str = Field(..., description="Тема письма")
    message: str = Field("", description="Текст письма")
    from_account_id: Optional[str] = Field(None, description="Почтовый аккаунт отправителя")
    attach_pdf: bool = Field(True, description="Приложить ссылку на PDF")


class EmailDefaultsResponse(BaseModel):
    """Значения по умолчанию для формы отправки."""
    to: str
    client_name: str
    subject: str
    message: str


class ErrorResponse(BaseModel):
    """Схема ошибки."""
    error: str = Field(..., description="Код ошибки")
    message: str = Field(..., description="Сообщение об ошибке")
