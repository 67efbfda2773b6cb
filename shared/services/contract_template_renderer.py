"""
Рендеринг шаблонов договоров.

Шаблон бывает двух видов: старый (одна HTML-строка в content_html/content)
и постраничный (page_settings.pages). Вид определяется один раз в
load_template_source, дальше код работает с типизированным вариантом.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from domain.entities.contract import ContractTemplate
from shared.services.contract_errors import ContractValidationError

VARIABLE_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}")

PAGE_SETTINGS_DEFAULTS: Dict[str, Any] = {
    "logoScale": 80,
    "logoPositionX": 50,
    "logoPositionY": 0,
    "lineHeight": 1.6,
    "selectedLogo": None,
    "selectedFooter": None,
    "footerContent": "",
    "footerLogoScale": 100,
}


def normalize_page_settings(raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Настройки страниц со значениями по умолчанию для отсутствующих ключей."""
    raw = raw or {}
    settings = {}
    for key, default in PAGE_SETTINGS_DEFAULTS.items():
        value = raw.get(key)
        settings[key] = default if value is None else value
    return settings


def substitute(text: str, variables: Mapping[str, str]) -> str:
    """
    Заменяет {{key}} значениями из словаря.

    Неизвестные ключи остаются в тексте как есть, значения не экранируются.
    """
    if not text:
        return text or ""

    def _replace(match: "re.Match[str]") -> str:
        key = match.group(1)
        if key in variables:
            return str(variables[key])
        return match.group(0)

    return VARIABLE_PATTERN.sub(_replace, text)


def find_unresolved(text: str) -> List[str]:
    """Ключи {{...}}, оставшиеся в тексте."""
    return VARIABLE_PATTERN.findall(text or "")


@dataclass(frozen=True)
class LegacyTemplate:
    html: str


@dataclass(frozen=True)
class PagedTemplate:
    pages: List[str]
    settings: Dict[str, Any] = field(default_factory=dict)


TemplateSource = Union[LegacyTemplate, PagedTemplate]


@dataclass(frozen=True)
class LegacyDocument:
    """Отрендеренный договор старого формата."""

    html: str

    def to_stored(self) -> str:
        return self.html

    def to_html(self) -> str:
        return self.html

    @property
    def page_count(self) -> int:
        return 1


@dataclass(frozen=True)
class PagedDocument:
    """Отрендеренный постраничный договор."""

    pages: List[str]
    settings: Dict[str, Any] = field(default_factory=dict)

    def to_stored(self) -> str:
        return json.dumps({"pages": list(self.pages), "settings": self.settings}, ensure_ascii=False)

    def to_html(self) -> str:
        line_height = self.settings.get("lineHeight", PAGE_SETTINGS_DEFAULTS["lineHeight"])
        return "\n".join(
            f'<div class="contract-page" style="line-height: {line_height};">{page}</div>'
            for page in self.pages
        )

    @property
    def page_count(self) -> int:
        return len(self.pages)


RenderedDocument = Union[LegacyDocument, PagedDocument]


def load_template_source(template: ContractTemplate) -> TemplateSource:
    """Определяет вид шаблона. Страницы из page_settings (даже пустой список) приоритетнее старого контента."""
    page_settings = template.page_settings or {}
    pages = page_settings.get("pages")
    if isinstance(pages, list):
        return PagedTemplate(pages=list(pages), settings=normalize_page_settings(page_settings))

    html = template.legacy_content
    if html is None:
        raise ContractValidationError(f"Contract template {template.id} has no content")
    return LegacyTemplate(html=html)


def render(template: Union[ContractTemplate, TemplateSource, RenderedDocument], variables: Mapping[str, str]) -> RenderedDocument:
    """
    Подставляет переменные в шаблон.

    Args:
        template: Запись шаблона, загруженный вариант или уже отрендеренный документ
        variables: Словарь переменных

    Returns:
        LegacyDocument или PagedDocument (число страниц совпадает с шаблоном)
    """
    if isinstance(template, ContractTemplate):
        template = load_template_source(template)

    if isinstance(template, (PagedTemplate, PagedDocument)):
        return PagedDocument(
            pages=[substitute(page, variables) for page in template.pages],
            settings=dict(template.settings),
        )
    return LegacyDocument(html=substitute(template.html, variables))


def document_from_stored(content: Optional[str]) -> Optional[RenderedDocument]:
    """Восстанавливает документ из сохранённого текста договора."""
    if content is None:
        return None

    stripped = content.lstrip()
    if stripped.startswith("{") or stripped.startswith("["):
        try:
            parsed = json.loads(content)
        except ValueError:
            return LegacyDocument(html=content)
        if isinstance(parsed, dict) and isinstance(parsed.get("pages"), list):
            return PagedDocument(pages=parsed["pages"], settings=normalize_page_settings(parsed.get("settings")))
        # Старые записи: просто массив страниц
        if isinstance(parsed, list):
            return PagedDocument(pages=[str(page) for page in parsed], settings=normalize_page_settings(None))
    return LegacyDocument(html=content)
