"""
Конфигурация pytest для тестов сервиса договоров
Объединяет фикстуры БД (SQLite в памяти) и моки внешних сервисов
"""
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from domain.entities import (
    Base,
    Contact,
    Contract,
    ContractTemplate,
    Event,
    EventCategory,
    Offer,
    OfferItem,
    Organization,
)
from shared.services.contract_permission_service import Actor


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

LEGACY_TEMPLATE_HTML = (
    "<h1>Umowa {{contract_number}}</h1>"
    "<p>Zamawiający: {{contact_full_name}}, {{contact_email}}</p>"
    "<p>Wydarzenie: {{event_name}} ({{event_date}})</p>"
    "<p>Miejsce: {{location_address}}, {{location_postal_code}} {{location_city}}</p>"
    "<p>Wynagrodzenie: {{budget}} (słownie: {{budget_words}})</p>"
    "<p>Zadatek: {{deposit_amount}} (słownie: {{deposit_words}})</p>"
    "{{offer_items}}"
)

PAGED_TEMPLATE_PAGES = [
    "<p>Strona 1: {{ event_name }} dla {{contact_full_name}}</p>",
    "<p>Strona 2: {{OFFER_ITEMS_TABLE}}</p>",
    "<p>Strona 3: podpis {{executor_name}} {{unknown_key}}</p>",
]


# =============================================================================
# База данных
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Движок SQLite в памяти со всеми таблицами."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """Сессия БД для одного теста."""
    session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with session_maker() as session:
        yield session
        await session.rollback()


# =============================================================================
# Тестовые данные
# =============================================================================

@pytest_asyncio.fixture
async def legacy_template(db_session):
    """Шаблон договора старого формата."""
    template = ContractTemplate(name="Umowa standardowa", content_html=LEGACY_TEMPLATE_HTML)
    db_session.add(template)
    await db_session.flush()
    return template


@pytest_asyncio.fixture
async def paged_template(db_session):
    """Постраничный шаблон договора."""
    template = ContractTemplate(
        name="Umowa wielostronicowa",
        content_html="<p>stara treść {{event_name}}</p>",
        page_settings={"pages": PAGED_TEMPLATE_PAGES, "logoScale": 60, "lineHeight": 1.4},
    )
    db_session.add(template)
    await db_session.flush()
    return template


@pytest_asyncio.fixture
async def sample_event(db_session, legacy_template):
    """Мероприятие с клиентом, организацией, категорией и адресом строкой."""
    category = EventCategory(name="Wesele", contract_template_id=legacy_template.id)
    contact = Contact(
        first_name="Anna",
        last_name="Nowak",
        full_name="Anna Nowak",
        email="anna.nowak@example.pl",
        phone="600-100-200",
    )
    organization = Organization(name="Nowak Events Sp. z o.o.", nip="5250000000", email="biuro@nowak.pl")
    db_session.add_all([category, contact, organization])
    await db_session.flush()

    event = Event(
        name="Wesele Anny i Piotra",
        event_date=datetime(2025, 6, 14, 14, 0, tzinfo=timezone.utc),
        event_end_date=datetime(2025, 6, 15, 1, 30, tzinfo=timezone.utc),
        budget=Decimal("1000.00"),
        location="ul. Kwiatowa 5, 10-200 Olsztyn",
        category_id=category.id,
        contact_person_id=contact.id,
        organization_id=organization.id,
    )
    db_session.add(event)
    await db_session.commit()
    db_session.expunge_all()
    return event


@pytest_asyncio.fixture
async def event_without_template(db_session):
    """Мероприятие без категории (и без шаблона)."""
    organization = Organization(name="Firma Bez Kontaktu", email="firma@example.pl")
    db_session.add(organization)
    await db_session.flush()

    event = Event(name="Gala firmowa", organization_id=organization.id, budget=Decimal("2500.00"))
    db_session.add(event)
    await db_session.commit()
    db_session.expunge_all()
    return event


async def add_offer(session, event_id, total_amount, items, created_at=None):
    """Добавить оферту с позициями [(name, quantity), ...]."""
    offer = Offer(event_id=event_id, total_amount=total_amount)
    if created_at is not None:
        offer.created_at = created_at
    session.add(offer)
    await session.flush()
    for index, (name, quantity) in enumerate(items):
        session.add(OfferItem(offer_id=offer.id, name=name, quantity=quantity, display_order=index))
    await session.commit()
    session.expunge_all()
    return offer


async def add_contract(session, event_id, created_at, **fields):
    """Добавить договор с заданным временем создания."""
    contract = Contract(
        event_id=event_id,
        title=f"Umowa dla eventu {event_id}",
        created_at=created_at,
        **fields
    )
    session.add(contract)
    await session.commit()
    session.expunge_all()
    return contract


@pytest.fixture
def base_time():
    """Опорное время для упорядочивания записей."""
    return datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def later(base_time):
    """Смещение от опорного времени в минутах."""
    return lambda minutes: base_time + timedelta(minutes=minutes)


# =============================================================================
# Пользователи и моки внешних сервисов
# =============================================================================

@pytest.fixture
def admin_actor():
    """Администратор."""
    return Actor(id="admin-1", role="admin", name="Admin")


@pytest.fixture
def employee_actor():
    """Сотрудник без особых прав."""
    return Actor(id="employee-1", role="employee", name="Jan Kowalski")


@pytest.fixture
def manager_actor():
    """Сотрудник с правом contracts_manage."""
    return Actor(id="manager-1", role="employee", permissions=frozenset({"contracts_manage"}))


@pytest.fixture
def mock_rendering_client():
    """Мок сервиса рендеринга PDF."""
    client = MagicMock()
    client.render_pdf = AsyncMock(return_value="event-1/umowa-1718000000000.pdf")
    return client


@pytest.fixture
def mock_storage():
    """Мок хранилища артефактов."""
    storage = MagicMock()
    storage.get_signed_url = AsyncMock(return_value="https://files.example.pl/umowa.pdf?sig=abc")
    storage.exists = AsyncMock(return_value=True)
    return storage


@pytest.fixture
def mock_delivery_client():
    """Мок сервиса доставки почты."""
    client = MagicMock()
    client.send = AsyncMock(return_value={"success": True, "messageId": "msg-1"})
    return client
