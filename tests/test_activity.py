"""Tests for the activity log service."""

from unittest.mock import AsyncMock

import pytest

from app.schemas.activity import ActivityType
from app.schemas.appointments import Actor, Appointment, AppointmentStatus
from app.services.activity_service import ActivityService


def _appt(**overrides) -> Appointment:
    fields = {"id": "a1", "patient_name": "Sara Khan", "date": "2025-06-01", "time": "09:00"}
    fields.update(overrides)
    return Appointment(**fields)


@pytest.mark.asyncio
async def test_created_message(activity_service, activity_store, receptionist) -> None:
    await activity_service.appointment_created(_appt(), receptionist)
    await activity_service.appointment_created(
        _appt(is_follow_up=True, previous_appointment_id="a0"), receptionist
    )

    newest, oldest = await activity_store.list_recent()

    assert oldest.message == "Ayesha created an appointment for Sara Khan"
    assert newest.message == "Ayesha scheduled a follow-up for Sara Khan"
    assert newest.type == ActivityType.APPOINTMENT_CREATED
    assert newest.actor_id == "staff-1"
    assert newest.actor_name == "Ayesha"


@pytest.mark.asyncio
async def test_status_and_delay_messages(activity_service, activity_store, receptionist) -> None:
    await activity_service.status_changed(_appt(status=AppointmentStatus.MISSED), receptionist)
    await activity_service.appointment_delayed(
        _appt(time="09:15", is_late=True, original_time="09:00", delay_reason="Traffic"),
        15,
        receptionist,
    )

    delayed, status = await activity_store.list_recent()

    assert status.message == "Ayesha marked Sara Khan as missed"
    assert status.type == ActivityType.APPOINTMENT_STATUS_CHANGED
    assert delayed.message == "Ayesha marked Sara Khan as running 15 minutes late (Traffic)"
    assert delayed.type == ActivityType.APPOINTMENT_DELAYED


@pytest.mark.asyncio
async def test_unnamed_actor(activity_service, activity_store) -> None:
    await activity_service.appointment_deleted(_appt(), Actor(uid="u-9"))

    (entry,) = await activity_store.list_recent()

    assert entry.message == "Someone deleted appointment for Sara Khan"
    assert entry.actor_name == "Unknown"


@pytest.mark.asyncio
async def test_logging_failure_is_swallowed(receptionist) -> None:
    store = AsyncMock()
    store.create.side_effect = RuntimeError("log store down")

    await ActivityService(store).appointment_updated(_appt(), receptionist)

    store.create.assert_awaited_once()
