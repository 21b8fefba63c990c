"""Tests for appointment endpoints."""

import pytest
from httpx import AsyncClient

from app.core.exceptions import StoreUnavailableException
from app.dependencies import get_appointment_service
from app.main import app
from app.services.appointment_service import AppointmentService

BASE = "/api/v1/appointments"


async def _book(client: AsyncClient, headers: dict, data: dict, **overrides) -> dict:
    response = await client.post(f"{BASE}/", json={**data, **overrides}, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    """Test health check endpoint."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_detailed_health_check(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health/detailed")
    assert response.status_code == 200
    assert response.json()["store"] == "healthy"


@pytest.mark.asyncio
async def test_create_appointment(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
) -> None:
    """Test booking an appointment and reading it back."""
    booking = await _book(client, auth_headers, sample_appointment_data)
    assert booking["conflict"] is None

    response = await client.get(f"{BASE}/{booking['id']}", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["doctor_name"] == sample_appointment_data["doctor_name"]
    assert data["status"] == "scheduled"
    assert data["created_by"] == "staff-1"


@pytest.mark.asyncio
async def test_double_booking_is_reported_not_blocked(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
) -> None:
    first = await _book(client, auth_headers, sample_appointment_data)
    second = await _book(client, auth_headers, sample_appointment_data, patient_name="Bilal Ahmed")

    assert second["conflict"]["id"] == first["id"]

    response = await client.get(
        f"{BASE}/conflicts",
        params={"date": "2025-06-01", "time": "09:00", "exclude_id": first["id"]},
        headers=auth_headers,
    )
    assert response.json()["conflict"]["id"] == second["id"]


@pytest.mark.asyncio
async def test_create_requires_time_or_on_call(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
) -> None:
    response = await client.post(
        f"{BASE}/", json={**sample_appointment_data, "time": None}, headers=auth_headers
    )
    assert response.status_code == 422
    assert response.json()["error"] == "ValidationException"

    response = await client.post(f"{BASE}/", json={"date": "2025-06-01"}, headers=auth_headers)
    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_list_appointments(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
) -> None:
    """Test listing appointments by calendar window."""
    await _book(client, auth_headers, sample_appointment_data)
    await _book(client, auth_headers, sample_appointment_data, date="2025-06-03")
    await _book(client, auth_headers, sample_appointment_data, time=None, is_on_call=True)

    response = await client.get(f"{BASE}/", params={"view": "today"}, headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [item["time"] for item in data["items"]] == ["09:00", "on-call"]

    response = await client.get(f"{BASE}/", params={"view": "week"}, headers=auth_headers)
    assert response.json()["total"] == 3


@pytest.mark.asyncio
async def test_status_transitions(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
) -> None:
    booking = await _book(client, auth_headers, sample_appointment_data)
    url = f"{BASE}/{booking['id']}/status"

    response = await client.patch(url, json={"status": "completed"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["follow_up_suggested"] is True
    assert response.json()["appointment"]["status"] == "completed"

    response = await client.patch(url, json={"status": "cancelled"}, headers=auth_headers)
    assert response.status_code == 409
    body = response.json()
    assert body["current_status"] == "completed"
    assert body["requested_status"] == "cancelled"


@pytest.mark.asyncio
async def test_mark_late_and_revert(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
) -> None:
    booking = await _book(client, auth_headers, sample_appointment_data)
    url = f"{BASE}/{booking['id']}/late"

    response = await client.post(url, json={"minutes": 15, "reason": "Traffic"}, headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["time"] == "09:15"
    assert data["original_time"] == "09:00"
    assert data["is_late"] is True

    response = await client.post(url, json={"minutes": 0}, headers=auth_headers)
    assert response.status_code == 422

    response = await client.delete(url, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["time"] == "09:00"
    assert response.json()["is_late"] is False


@pytest.mark.asyncio
async def test_reschedule(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
) -> None:
    first = await _book(client, auth_headers, sample_appointment_data)
    second = await _book(client, auth_headers, sample_appointment_data, time="11:00")

    response = await client.put(
        f"{BASE}/{second['id']}", json={"time": "09:00"}, headers=auth_headers
    )

    assert response.status_code == 200
    assert response.json()["appointment"]["time"] == "09:00"
    assert response.json()["conflict"]["id"] == first["id"]


@pytest.mark.asyncio
async def test_follow_up(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
) -> None:
    booking = await _book(client, auth_headers, sample_appointment_data)

    response = await client.post(
        f"{BASE}/{booking['id']}/follow-up",
        json={"date": "2025-06-15", "time": "10:30"},
        headers=auth_headers,
    )
    assert response.status_code == 201

    follow_up = (await client.get(f"{BASE}/{response.json()['id']}", headers=auth_headers)).json()
    assert follow_up["is_follow_up"] is True
    assert follow_up["previous_appointment_id"] == booking["id"]
    assert follow_up["patient_name"] == sample_appointment_data["patient_name"]


@pytest.mark.asyncio
async def test_delete_requires_admin(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
) -> None:
    booking = await _book(client, auth_headers, sample_appointment_data)
    url = f"{BASE}/{booking['id']}"

    response = await client.delete(url, headers=auth_headers)
    assert response.status_code == 403

    response = await client.delete(url, headers=admin_headers)
    assert response.status_code == 204

    response = await client.get(url, headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_invalid_token_rejected(client: AsyncClient) -> None:
    response = await client.get(f"{BASE}/", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["error"] == "UnauthorizedException"
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_activity_feed(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
) -> None:
    booking = await _book(client, auth_headers, sample_appointment_data)
    await client.patch(
        f"{BASE}/{booking['id']}/status", json={"status": "confirmed"}, headers=auth_headers
    )

    response = await client.get("/api/v1/activity/", headers=auth_headers)

    assert response.status_code == 200
    messages = [item["message"] for item in response.json()["items"]]
    assert messages == [
        "Ayesha marked Sara Khan as confirmed",
        "Ayesha created an appointment for Sara Khan",
    ]


@pytest.mark.asyncio
async def test_store_outage_returns_retryable_503(
    client: AsyncClient,
    auth_headers: dict,
) -> None:
    class FailingStore:
        async def get(self, appointment_id: str):
            raise StoreUnavailableException()

    app.dependency_overrides[get_appointment_service] = lambda: AppointmentService(FailingStore())

    response = await client.get(f"{BASE}/abc", headers=auth_headers)

    assert response.status_code == 503
    assert response.json()["retryable"] is True
    assert response.headers["Retry-After"] == "5"


@pytest.mark.asyncio
async def test_late_badge_hidden_once_closed(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
) -> None:
    booking = await _book(client, auth_headers, sample_appointment_data)
    url = f"{BASE}/{booking['id']}"

    delayed = (
        await client.post(f"{url}/late", json={"minutes": 15, "reason": "Traffic"}, headers=auth_headers)
    ).json()
    assert delayed["delay_minutes"] == 15
    assert delayed["delay_visible"] is True

    await client.patch(f"{url}/status", json={"status": "completed"}, headers=auth_headers)

    response = await client.get(url, headers=auth_headers)
    data = response.json()
    assert data["is_late"] is True
    assert data["delay_visible"] is False
    assert data["delay_minutes"] == 15
