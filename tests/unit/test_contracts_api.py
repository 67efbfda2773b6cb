"""Тесты HTTP API договора мероприятия."""

import pytest
import pytest_asyncio
import httpx

from domain.entities import Employee, EmployeeEmailAccount
from core.database.session import get_db_session
from apps.api.app import create_app
from apps.api.dependencies import get_artifact_storage, get_email_delivery_client, get_rendering_client

EMPLOYEE = {"X-Actor-Id": "employee-1", "X-Actor-Name": "Jan Kowalski"}
ADMIN = {"X-Actor-Id": "admin-1", "X-Actor-Role": "admin"}


@pytest_asyncio.fixture
async def client(db_session, mock_rendering_client, mock_delivery_client, mock_storage):
    """HTTP клиент приложения с тестовой БД и моками внешних сервисов."""
    app = create_app(use_lifespan=False)

    async def override_db_session():
        yield db_session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_rendering_client] = lambda: mock_rendering_client
    app.dependency_overrides[get_email_delivery_client] = lambda: mock_delivery_client
    app.dependency_overrides[get_artifact_storage] = lambda: mock_storage

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def _url(event_id, suffix=""):
    return f"/api/v1/events/{event_id}/contract{suffix}"


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_actor_header_required(client, sample_event):
    response = await client.get(_url(sample_event.id))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_state_without_contract_shows_preview(client, sample_event):
    """Без договора возвращается предварительный рендер шаблона категории."""
    response = await client.get(_url(sample_event.id), headers=EMPLOYEE)

    assert response.status_code == 200
    data = response.json()
    assert data["contract"] is None
    assert data["template_exists"] is True
    assert data["can_edit"] is True
    assert data["needs_generation"] is True
    assert data["document"]["kind"] == "legacy"
    assert "Zamawiający: Anna Nowak" in data["document"]["html"]
    assert data["variables"]["budget"] == "1 000,00 zł"


@pytest.mark.asyncio
async def test_state_without_template(client, event_without_template):
    response = await client.get(_url(event_without_template.id), headers=EMPLOYEE)

    assert response.status_code == 200
    assert response.json()["template_exists"] is False
    assert response.json()["document"] is None


@pytest.mark.asyncio
async def test_unknown_event(client):
    response = await client.get(_url("missing-event"), headers=EMPLOYEE)

    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_templates_list(client, legacy_template, paged_template):
    response = await client.get(_url("any", "/templates"), headers=EMPLOYEE)

    assert response.status_code == 200
    assert [t["name"] for t in response.json()] == ["Umowa standardowa", "Umowa wielostronicowa"]


@pytest.mark.asyncio
async def test_save_variables_then_read_state(client, sample_event):
    response = await client.put(
        _url(sample_event.id, "/variables"),
        json={"edits": {"event_name": "Wesele po zmianie"}},
        headers=EMPLOYEE,
    )
    assert response.status_code == 200
    contract = response.json()
    assert contract["status"] == "draft"
    assert contract["status_label"] == "Szkic"
    assert contract["created_by"] == "employee-1"

    state = (await client.get(_url(sample_event.id), headers=EMPLOYEE)).json()
    assert state["contract"]["id"] == contract["id"]
    assert "Wydarzenie: Wesele po zmianie" in state["document"]["html"]


@pytest.mark.asyncio
async def test_status_lifecycle_and_permissions(client, sample_event):
    """Сотрудник выставляет договор, дальше статус меняет только привилегированный пользователь."""
    response = await client.post(_url(sample_event.id, "/status"), json={"status": "issued"}, headers=EMPLOYEE)
    assert response.status_code == 200
    assert response.json()["status"] == "issued"
    assert response.json()["issued_at"] is not None

    response = await client.post(_url(sample_event.id, "/status"), json={"status": "sent"}, headers=EMPLOYEE)
    assert response.status_code == 403
    assert response.json()["error"] == "PERMISSION_DENIED"

    response = await client.put(
        _url(sample_event.id, "/content"), json={"content": "<p>zmiana</p>"}, headers=EMPLOYEE
    )
    assert response.status_code == 403

    response = await client.post(
        _url(sample_event.id, "/status"), json={"status": "signed_by_client"}, headers=ADMIN
    )
    assert response.status_code == 200
    assert response.json()["status_label"] == "Podpisana przez klienta"


@pytest.mark.asyncio
async def test_invalid_status_value(client, sample_event):
    response = await client.post(_url(sample_event.id, "/status"), json={"status": "archived"}, headers=ADMIN)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_pdf_generation_locks_template(client, sample_event, paged_template, mock_rendering_client):
    """После генерации PDF шаблон сменить нельзя, правки помечают PDF устаревшим."""
    response = await client.post(_url(sample_event.id, "/pdf"), json={}, headers=EMPLOYEE)
    assert response.status_code == 200
    assert response.json()["generated_pdf_path"] == "event-1/umowa-1718000000000.pdf"
    mock_rendering_client.render_pdf.assert_awaited_once()

    response = await client.put(
        _url(sample_event.id, "/template"), json={"template_id": paged_template.id}, headers=EMPLOYEE
    )
    assert response.status_code == 400
    assert response.json()["error"] == "TEMPLATE_LOCKED"

    response = await client.put(
        _url(sample_event.id, "/content"), json={"content": "<p>poprawka</p>"}, headers=EMPLOYEE
    )
    assert response.status_code == 200
    assert response.json()["modified_after_generation"] is True

    state = (await client.get(_url(sample_event.id), headers=EMPLOYEE)).json()
    assert state["needs_generation"] is True


@pytest.mark.asyncio
async def test_switch_template_before_generation(client, sample_event, paged_template):
    response = await client.put(
        _url(sample_event.id, "/template"), json={"template_id": paged_template.id}, headers=EMPLOYEE
    )
    assert response.status_code == 200
    assert response.json()["template_id"] == paged_template.id

    state = (await client.get(_url(sample_event.id), headers=EMPLOYEE)).json()
    assert state["document"]["kind"] == "paged"
    assert len(state["document"]["pages"]) == 3
    assert state["document"]["settings"]["logoScale"] == 60


@pytest.mark.asyncio
async def test_pdf_url(client, sample_event, mock_storage):
    response = await client.get(_url(sample_event.id, "/pdf-url"), headers=EMPLOYEE)
    assert response.status_code == 404

    await client.post(_url(sample_event.id, "/pdf"), json={"html": "<p>x</p>"}, headers=EMPLOYEE)
    response = await client.get(_url(sample_event.id, "/pdf-url"), headers=EMPLOYEE)

    assert response.status_code == 200
    assert response.json()["url"] == "https://files.example.pl/umowa.pdf?sig=abc"
    mock_storage.get_signed_url.assert_awaited_once()


@pytest.mark.asyncio
async def test_email_defaults(client, sample_event):
    response = await client.get(_url(sample_event.id, "/email-defaults"), headers=EMPLOYEE)

    assert response.status_code == 200
    data = response.json()
    assert data["to"] == "anna.nowak@example.pl"
    assert data["client_name"] == "Anna Nowak"
    assert data["subject"] == "Umowa - Event"


@pytest.mark.asyncio
async def test_send_email_marks_contract_sent(client, db_session, sample_event, mock_delivery_client):
    db_session.add(Employee(id="employee-1", name="Jan", surname="Kowalski"))
    db_session.add(EmployeeEmailAccount(
        employee_id="employee-1", email_address="jan@eventrulers.pl", is_default=True
    ))
    await db_session.commit()

    await client.post(_url(sample_event.id, "/pdf"), json={}, headers=EMPLOYEE)
    response = await client.post(
        _url(sample_event.id, "/email"),
        json={"to": "anna.nowak@example.pl", "subject": "Umowa - Event", "message": "Dzień dobry"},
        headers=EMPLOYEE,
    )

    assert response.status_code == 200
    assert response.json()["status"] == "sent"
    assert response.json()["sent_at"] is not None
    mock_delivery_client.send.assert_awaited_once()


@pytest.mark.asyncio
async def test_send_email_validation_error(client, sample_event):
    response = await client.post(
        _url(sample_event.id, "/email"), json={"to": "", "subject": "Umowa"}, headers=EMPLOYEE
    )
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_delete_contract(client, sample_event):
    await client.put(_url(sample_event.id, "/variables"), json={"edits": {}}, headers=EMPLOYEE)

    response = await client.delete(_url(sample_event.id), headers=EMPLOYEE)
    assert response.status_code == 204

    state = (await client.get(_url(sample_event.id), headers=EMPLOYEE)).json()
    assert state["contract"] is None
