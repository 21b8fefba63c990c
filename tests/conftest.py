from collections.abc import AsyncGenerator
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.security import create_staff_token
from app.dependencies import (
    get_activity_store,
    get_appointment_service,
    get_appointment_store,
)
from app.main import app
from app.schemas.appointments import Actor, AppointmentCreate, StaffRole
from app.services.activity_service import ActivityService
from app.services.appointment_service import AppointmentService
from app.stores.memory import InMemoryActivityLogStore, InMemoryAppointmentStore

# Clinic wall-clock time used by every test that depends on "now"
FIXED_NOW = datetime(2025, 6, 1, 8, 30)


@pytest.fixture
def appointment_store() -> InMemoryAppointmentStore:
    """Fresh in-memory appointment store."""
    return InMemoryAppointmentStore()


@pytest.fixture
def activity_store() -> InMemoryActivityLogStore:
    """Fresh in-memory activity log."""
    return InMemoryActivityLogStore()


@pytest.fixture
def service(appointment_store: InMemoryAppointmentStore) -> AppointmentService:
    """Scheduling engine pinned to FIXED_NOW."""
    return AppointmentService(appointment_store, clock=lambda: FIXED_NOW)


@pytest.fixture
def activity_service(activity_store: InMemoryActivityLogStore) -> ActivityService:
    return ActivityService(activity_store)


@pytest.fixture
def receptionist() -> Actor:
    return Actor(uid="staff-1", name="Ayesha", role=StaffRole.RECEPTIONIST)


@pytest.fixture
def admin() -> Actor:
    return Actor(uid="admin-1", name="Imran", role=StaffRole.ADMIN)


@pytest.fixture
def booking() -> AppointmentCreate:
    """Booking for the first slot of the test day."""
    return AppointmentCreate(
        patient_name="Sara Khan",
        patient_phone="+923001234567",
        date="2025-06-01",
        time="09:00",
        doctor_id="doc-1",
        doctor_name="Dr. Malik",
        notes="Root canal review",
    )


@pytest.fixture
def sample_appointment_data() -> dict:
    """Sample booking payload for the HTTP API."""
    return {
        "patient_name": "Sara Khan",
        "patient_phone": "+923001234567",
        "date": "2025-06-01",
        "time": "09:00",
        "doctor_id": "doc-1",
        "doctor_name": "Dr. Malik",
        "notes": "Root canal review",
    }


@pytest_asyncio.fixture
async def client(
    appointment_store: InMemoryAppointmentStore,
    activity_store: InMemoryActivityLogStore,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client backed by in-memory stores."""

    async def override_appointment_store() -> AsyncGenerator[InMemoryAppointmentStore, None]:
        yield appointment_store

    async def override_activity_store() -> AsyncGenerator[InMemoryActivityLogStore, None]:
        yield activity_store

    def override_service() -> AppointmentService:
        return AppointmentService(appointment_store, clock=lambda: FIXED_NOW)

    app.dependency_overrides[get_appointment_store] = override_appointment_store
    app.dependency_overrides[get_activity_store] = override_activity_store
    app.dependency_overrides[get_appointment_service] = override_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def _headers(actor: Actor) -> dict:
    token = create_staff_token(actor, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(receptionist: Actor) -> dict:
    """Bearer headers for a receptionist."""
    return _headers(receptionist)


@pytest.fixture
def admin_headers(admin: Actor) -> dict:
    """Bearer headers for an administrator."""
    return _headers(admin)
