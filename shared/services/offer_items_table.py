"""HTML-представления позиций оферты для подстановки в договор."""

from decimal import Decimal
from typing import Iterable, List, Optional

from domain.entities.offer import OfferItem

EMPTY_ITEMS_HTML = '<p style="font-style: italic; color: #666;">Brak pozycji w ofercie</p>'
DEFAULT_ITEM_NAME = "Produkt"

_CELL = "border: 1px solid #000; padding: 4px 6px;"


def format_quantity(quantity: Optional[Decimal]) -> str:
    """2.00 → «2», 1.50 → «1,5»."""
    if not quantity:
        return ""
    text = f"{Decimal(str(quantity)).normalize():f}"
    return text.replace(".", ",")


def build_offer_items_list(items: Iterable[OfferItem]) -> str:
    """Нумерованный список позиций («1. Nazwa», «Ilość: N»)."""
    items = list(items)
    if not items:
        return EMPTY_ITEMS_HTML

    rows: List[str] = []
    for index, item in enumerate(items, start=1):
        row = f"<li><strong>{index}. {item.name or DEFAULT_ITEM_NAME}</strong>"
        quantity = format_quantity(item.quantity)
        if quantity:
            row += f'<br/><span style="margin-left: 20px; font-size: 11pt;">Ilość: {quantity}</span>'
        rows.append(row + "</li>")

    return (
        '<ul style="margin: 0; padding-left: 20px; list-style-type: none;">'
        + "".join(rows)
        + "</ul>"
    )


def build_offer_items_table(items: Iterable[OfferItem]) -> str:
    """Таблица позиций: Lp. / Nazwa / Ilość / Jedn."""
    items = list(items)
    if not items:
        return EMPTY_ITEMS_HTML

    header = "".join(
        f'<th style="{_CELL} text-align: left;">{title}</th>'
        for title in ("Lp.", "Nazwa", "Ilość", "Jedn.")
    )
    body = []
    for index, item in enumerate(items, start=1):
        cells = (
            f"{index}.",
            item.name or DEFAULT_ITEM_NAME,
            format_quantity(item.quantity),
            item.unit or "szt.",
        )
        body.append("<tr>" + "".join(f'<td style="{_CELL}">{c}</td>' for c in cells) + "</tr>")

    return (
        '<table style="width: 100%; border-collapse: collapse; font-size: 11pt;">'
        f"<thead><tr>{header}</tr></thead>"
        f"<tbody>{''.join(body)}</tbody>"
        "</table>"
    )
