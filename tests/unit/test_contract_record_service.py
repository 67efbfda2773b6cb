"""Unit-тесты хранения договоров."""

import json
import pytest

from domain.entities import Contract, ContractTemplate
from domain.entities.contract import ContractStatus
from shared.services.contract_errors import ContractNotFound, MissingTemplateError, TemplateLockedError
from shared.services.contract_record_service import ContractRecordService
from shared.services.contract_template_renderer import LegacyDocument, PagedDocument, document_from_stored
from conftest import add_contract


@pytest.mark.asyncio
async def test_get_current_returns_latest_created(db_session, sample_event, later):
    """Текущий договор - последний по created_at."""
    await add_contract(db_session, sample_event.id, later(0), content="<p>stara</p>")
    newest = await add_contract(db_session, sample_event.id, later(10), content="<p>nowa</p>")
    await add_contract(db_session, sample_event.id, later(5), content="<p>środkowa</p>")

    contract = await ContractRecordService(db_session).get_current(sample_event.id)

    assert contract.id == newest.id
    assert contract.content == "<p>nowa</p>"


@pytest.mark.asyncio
async def test_get_current_without_contract(db_session, sample_event):
    assert await ContractRecordService(db_session).get_current(sample_event.id) is None


@pytest.mark.asyncio
async def test_create_draft_from_category_template(db_session, sample_event, legacy_template, employee_actor):
    """Черновик рендерится из шаблона категории."""
    contract = await ContractRecordService(db_session).create_draft(
        sample_event.id, created_by=employee_actor.id
    )

    assert contract.status == ContractStatus.DRAFT.value
    assert contract.template_id == legacy_template.id
    assert contract.client_id == sample_event.contact_person_id
    assert contract.title == f"Umowa dla eventu {sample_event.id}"
    assert contract.created_by == employee_actor.id
    assert contract.generated_pdf_path is None
    assert "Zamawiający: Anna Nowak, anna.nowak@example.pl" in contract.content
    assert "Wynagrodzenie: 1 000,00 zł (słownie: tysiąc)" in contract.content
    assert "{{" not in contract.content


@pytest.mark.asyncio
async def test_create_draft_client_falls_back_to_organization(db_session, event_without_template, legacy_template):
    """Без контакта клиентом договора становится организация."""
    contract = await ContractRecordService(db_session).create_draft(
        event_without_template.id, legacy_template.id
    )
    assert contract.client_id == event_without_template.organization_id


@pytest.mark.asyncio
async def test_create_draft_without_template(db_session, event_without_template):
    """Нет категории и шаблон не передан."""
    with pytest.raises(MissingTemplateError) as exc_info:
        await ContractRecordService(db_session).create_draft(event_without_template.id)
    assert exc_info.value.event_id == event_without_template.id
    assert exc_info.value.code == "MISSING_TEMPLATE"


@pytest.mark.asyncio
async def test_create_draft_with_paged_template(db_session, sample_event, paged_template):
    """Постраничный шаблон сохраняется как JSON со страницами и настройками."""
    contract = await ContractRecordService(db_session).create_draft(sample_event.id, paged_template.id)

    stored = json.loads(contract.content)
    assert len(stored["pages"]) == 3
    assert stored["pages"][0] == "<p>Strona 1: Wesele Anny i Piotra dla Anna Nowak</p>"
    assert stored["settings"]["logoScale"] == 60
    assert stored["settings"]["lineHeight"] == 1.4
    assert "{{unknown_key}}" in stored["pages"][2]

    document = document_from_stored(contract.content)
    assert isinstance(document, PagedDocument)
    assert document.page_count == 3


@pytest.mark.asyncio
async def test_get_or_create_reuses_current(db_session, sample_event, later):
    existing = await add_contract(db_session, sample_event.id, later(0), content="<p>x</p>")
    records = ContractRecordService(db_session)

    contract = await records.get_or_create(sample_event.id)

    assert contract.id == existing.id


@pytest.mark.asyncio
async def test_update_content_before_generation(db_session, sample_event, later):
    """До генерации PDF флаг устаревания не ставится."""
    existing = await add_contract(db_session, sample_event.id, later(0), content="<p>x</p>")

    contract = await ContractRecordService(db_session).update_content(existing.id, "<p>y</p>")

    assert contract.content == "<p>y</p>"
    assert contract.modified_after_generation is False


@pytest.mark.asyncio
async def test_update_content_after_generation_marks_stale(db_session, sample_event, later):
    """Изменение после генерации PDF помечает договор устаревшим."""
    existing = await add_contract(
        db_session,
        sample_event.id,
        later(0),
        content="<p>x</p>",
        generated_pdf_path="event/umowa.pdf",
        generated_pdf_at=later(1),
    )

    contract = await ContractRecordService(db_session).update_content(
        existing.id, LegacyDocument(html="<p>nowa treść</p>")
    )

    assert contract.content == "<p>nowa treść</p>"
    assert contract.modified_after_generation is True
    assert contract.generated_pdf_path == "event/umowa.pdf"


@pytest.mark.asyncio
async def test_update_content_missing_contract(db_session):
    with pytest.raises(ContractNotFound):
        await ContractRecordService(db_session).update_content("missing", "<p>x</p>")


@pytest.mark.asyncio
async def test_switch_template_rerenders_content(db_session, sample_event, legacy_template, paged_template):
    """Смена шаблона до генерации PDF перерисовывает содержимое."""
    records = ContractRecordService(db_session)
    contract = await records.create_draft(sample_event.id, legacy_template.id)
    variables = await records.variables.resolve(sample_event.id)

    switched = await records.switch_template(contract.id, paged_template.id, variables)

    assert switched.template_id == paged_template.id
    document = document_from_stored(switched.content)
    assert isinstance(document, PagedDocument)
    assert document.pages[0] == "<p>Strona 1: Wesele Anny i Piotra dla Anna Nowak</p>"


@pytest.mark.asyncio
async def test_switch_template_after_generation_is_rejected(db_session, sample_event, legacy_template, paged_template, later):
    existing = await add_contract(
        db_session,
        sample_event.id,
        later(0),
        template_id=legacy_template.id,
        content="<p>x</p>",
        generated_pdf_path="event/umowa.pdf",
    )

    with pytest.raises(TemplateLockedError) as exc_info:
        await ContractRecordService(db_session).switch_template(existing.id, paged_template.id, {})

    assert exc_info.value.contract_id == existing.id
    contract = await db_session.get(Contract, existing.id)
    assert contract.template_id == legacy_template.id
    assert contract.content == "<p>x</p>"


@pytest.mark.asyncio
async def test_switch_template_unknown_template(db_session, sample_event, later):
    existing = await add_contract(db_session, sample_event.id, later(0), content="<p>x</p>")
    with pytest.raises(ContractNotFound):
        await ContractRecordService(db_session).switch_template(existing.id, "missing-template", {})


@pytest.mark.asyncio
async def test_save_variables_creates_contract_with_edits(db_session, sample_event, employee_actor):
    """Первое сохранение создаёт договор с учётом правок."""
    contract = await ContractRecordService(db_session).save_variables(
        sample_event.id,
        {"contact_full_name": "Anna Kowalska", "budget": "2 000,00 zł"},
        employee_actor,
    )

    assert contract.created_by == employee_actor.id
    assert "Zamawiający: Anna Kowalska" in contract.content
    assert "Wynagrodzenie: 2 000,00 zł (słownie: dwa tysiące)" in contract.content


@pytest.mark.asyncio
async def test_save_variables_updates_current_contract(db_session, sample_event, legacy_template, employee_actor, later):
    existing = await add_contract(
        db_session, sample_event.id, later(0), template_id=legacy_template.id, content="<p>x</p>"
    )

    contract = await ContractRecordService(db_session).save_variables(
        sample_event.id, {"event_name": "Poprawiona nazwa"}, employee_actor
    )

    assert contract.id == existing.id
    assert "Wydarzenie: Poprawiona nazwa (14.06.2025)" in contract.content


@pytest.mark.asyncio
async def test_list_templates_only_active(db_session, legacy_template, paged_template):
    db_session.add(ContractTemplate(name="Archiwalna", content="x", is_active=False))
    await db_session.flush()

    templates = await ContractRecordService(db_session).list_templates()

    assert [t.name for t in templates] == ["Umowa standardowa", "Umowa wielostronicowa"]


@pytest.mark.asyncio
async def test_delete_contract(db_session, sample_event, later):
    existing = await add_contract(db_session, sample_event.id, later(0), content="<p>x</p>")
    records = ContractRecordService(db_session)

    await records.delete(existing.id)

    assert await records.get_current(sample_event.id) is None
