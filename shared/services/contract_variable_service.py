"""Сервис вычисления переменных договора по данным мероприятия."""

import random
from decimal import Decimal
from typing import Dict, List, Mapping, NamedTuple, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from domain.entities.event import Event, EventCategory
from domain.entities.offer import Offer, OfferItem
from core.config.settings import settings
from core.logging.logger import logger
from core.utils.timezone_helper import timezone_helper
from shared.services.amount_words import extract_number, format_amount, number_to_words, round_amount
from shared.services.contract_errors import ContractNotFound, UpstreamFailure
from shared.services.offer_items_table import build_offer_items_list, build_offer_items_table

VariableMap = Dict[str, str]


class ParsedLocation(NamedTuple):
    address: str
    postal_code: str
    city: str


def parse_location_string(location: Optional[str]) -> ParsedLocation:
    """
    Разбирает адрес строкой вида «ul. Kwiatowa 5, 10-200 Olsztyn».

    Первый сегмент до запятой - адрес, во втором первый токен - индекс,
    остаток - город. Без запятой вся строка считается адресом.
    """
    if not location:
        return ParsedLocation("", "", "")

    parts = [part.strip() for part in location.split(",")]
    if len(parts) < 2:
        return ParsedLocation(location, "", "")

    postal_city = parts[1].split()
    return ParsedLocation(
        address=parts[0],
        postal_code=postal_city[0] if postal_city else "",
        city=" ".join(postal_city[1:]),
    )


def generate_contract_number(year: Optional[int] = None) -> str:
    """UMW/2025/042 - новый номер при каждом вычислении переменных."""
    year = year or timezone_helper.today().year
    return f"{settings.contract_number_prefix}/{year}/{random.randint(0, 999):03d}"


def executor_variables() -> VariableMap:
    """Реквизиты исполнителя из настроек."""
    return {
        "executor_name": settings.executor_name,
        "executor_address": settings.executor_address,
        "executor_postal_code": settings.executor_postal_code,
        "executor_city": settings.executor_city,
        "executor_nip": settings.executor_nip,
        "executor_phone": settings.executor_phone,
        "executor_email": settings.executor_email,
    }


def build_variables(event: Event, offer: Optional[Offer], items: List[OfferItem]) -> VariableMap:
    """Собирает словарь переменных из уже загруженных записей."""
    contact = event.contact
    organization = event.organization
    location = event.location_record
    parsed = parse_location_string(event.location)

    total = (offer.total_amount if offer else None) or event.budget or Decimal("0")
    deposit = round_amount(Decimal(str(total)) * Decimal(str(settings.deposit_ratio)))

    variables: VariableMap = {
        "contact_first_name": (contact and contact.first_name) or "",
        "contact_last_name": (contact and contact.last_name) or "",
        "contact_full_name": (contact and contact.full_name) or "",
        "contact_email": (contact and contact.email) or "",
        "contact_phone": (contact and contact.phone) or "",
        "contact_pesel": (contact and contact.pesel) or "",
        "contact_address": (contact and contact.address) or "",
        "contact_city": (contact and contact.city) or "",
        "contact_postal_code": (contact and contact.postal_code) or "",

        "organization_name": (organization and organization.name) or "",
        "organization_nip": (organization and organization.nip) or "",
        "organization_address": (organization and organization.address) or "",
        "organization_city": (organization and organization.city) or "",
        "organization_postal_code": (organization and organization.postal_code) or "",
        "organization_phone": (organization and organization.phone) or "",
        "organization_email": (organization and organization.email) or "",

        "event_name": event.name or "",
        "event_date": timezone_helper.format_date_only(event.event_date),
        "event_end_date": timezone_helper.format_date_time(event.event_end_date),
        "event_date_only": timezone_helper.format_date_only(event.event_date),
        "event_end_date_only": timezone_helper.format_date_only(event.event_end_date),
        "event_time_start": timezone_helper.format_time_only(event.event_date),
        "event_time_end": timezone_helper.format_time_only(event.event_end_date),

        "location_name": (location and location.name) or parsed.address,
        "location_address": (location and location.address) or parsed.address,
        "location_city": (location and location.city) or parsed.city,
        "location_postal_code": (location and location.postal_code) or parsed.postal_code,
        "location_full": (location and location.formatted_address) or event.location or "",

        "budget": format_amount(total),
        "budget_words": number_to_words(total),
        "deposit_amount": format_amount(deposit),
        "deposit_words": number_to_words(deposit),

        "contract_number": generate_contract_number(),
        "contract_date": timezone_helper.format_date_only(timezone_helper.today()),

        "offer_items": build_offer_items_list(items),
        "OFFER_ITEMS_TABLE": build_offer_items_table(items),
    }
    variables.update(executor_variables())
    return variables


def apply_variable_edits(variables: Mapping[str, str], edits: Mapping[str, str]) -> VariableMap:
    """
    Применяет ручные правки переменных.

    Суммы прописью пересчитываются из отредактированных сумм, поэтому
    правка budget_words/deposit_words поверх непустой суммы не сохраняется.
    """
    updated = dict(variables)
    updated.update({key: "" if value is None else str(value) for key, value in edits.items()})

    if updated.get("budget"):
        updated["budget_words"] = number_to_words(round_amount(extract_number(updated["budget"])))
    if updated.get("deposit_amount"):
        updated["deposit_words"] = number_to_words(round_amount(extract_number(updated["deposit_amount"])))
    return updated


class ContractVariableService:
    """Вычисление переменных договора для мероприятия."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_event(self, event_id: str) -> Event:
        """Мероприятие со связанными клиентом, организацией, локацией и категорией."""
        try:
            result = await self.session.execute(
                select(Event)
                .where(Event.id == event_id)
                .options(
                    selectinload(Event.contact),
                    selectinload(Event.organization),
                    selectinload(Event.location_record),
                    selectinload(Event.category).selectinload(EventCategory.contract_template),
                )
                .execution_options(populate_existing=True)
            )
            event = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Failed to load event", event_id=event_id, error=str(e))
            raise UpstreamFailure(f"Failed to load event {event_id}", cause=e) from e

        if event is None:
            raise ContractNotFound("Event", event_id)
        return event

    async def get_latest_offer(self, event_id: str) -> Optional[Offer]:
        """Последняя по дате создания оферта мероприятия с позициями."""
        try:
            result = await self.session.execute(
                select(Offer)
                .where(Offer.event_id == event_id)
                .order_by(Offer.created_at.desc())
                .limit(1)
                .options(selectinload(Offer.items))
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Failed to load offer", event_id=event_id, error=str(e))
            raise UpstreamFailure(f"Failed to load offer for event {event_id}", cause=e) from e

    async def resolve(
        self,
        event_id: str,
        overrides: Optional[Mapping[str, str]] = None,
    ) -> VariableMap:
        """
        Вычислить переменные договора.

        Args:
            event_id: ID мероприятия
            overrides: Дополнительные ключи конкретного шаблона (перекрывают вычисленные)

        Returns:
            Словарь переменных. Ничего не сохраняет.
        """
        event = await self.get_event(event_id)
        offer = await self.get_latest_offer(event_id)
        items = list(offer.items) if offer else []

        variables = build_variables(event, offer, items)
        if overrides:
            variables.update(overrides)

        logger.debug(
            "Contract variables resolved",
            event_id=event_id,
            offer_id=offer.id if offer else None,
            items_count=len(items),
        )
        return variables
