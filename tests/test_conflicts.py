"""Tests for advisory conflict detection."""

from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import StoreUnavailableException
from app.scheduling.conflicts import find_conflict
from app.stores.memory import InMemoryAppointmentStore


async def _add(store: InMemoryAppointmentStore, time: str, status: str = "scheduled", day: str = "2025-06-01") -> str:
    return await store.create(
        {"patient_name": "P", "date": day, "time": time, "status": status}
    )


@pytest.mark.asyncio
async def test_finds_active_appointment_in_same_slot(appointment_store) -> None:
    existing = await _add(appointment_store, "09:00", "confirmed")

    conflict = await find_conflict(appointment_store, "2025-06-01", "09:00")

    assert conflict is not None
    assert conflict.id == existing


@pytest.mark.asyncio
async def test_other_slots_do_not_conflict(appointment_store) -> None:
    await _add(appointment_store, "09:00")
    await _add(appointment_store, "09:30", day="2025-06-02")

    assert await find_conflict(appointment_store, "2025-06-01", "09:30") is None
    assert await find_conflict(appointment_store, "2025-06-02", "09:00") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["completed", "missed", "cancelled"])
async def test_closed_appointments_never_block(appointment_store, status: str) -> None:
    await _add(appointment_store, "09:00", status)

    assert await find_conflict(appointment_store, "2025-06-01", "09:00") is None


@pytest.mark.asyncio
async def test_on_call_never_conflicts(appointment_store) -> None:
    await _add(appointment_store, "on-call")
    await _add(appointment_store, "on-call")

    assert await find_conflict(appointment_store, "2025-06-01", "on-call") is None


@pytest.mark.asyncio
async def test_on_call_skips_the_store_entirely() -> None:
    store = AsyncMock()

    assert await find_conflict(store, "2025-06-01", "on-call") is None
    store.query_by_date_and_status.assert_not_called()


@pytest.mark.asyncio
async def test_excluded_id_is_ignored(appointment_store) -> None:
    own = await _add(appointment_store, "09:00")

    assert await find_conflict(appointment_store, "2025-06-01", "09:00", exclude_id=own) is None

    other = await _add(appointment_store, "09:00")
    conflict = await find_conflict(appointment_store, "2025-06-01", "09:00", exclude_id=own)
    assert conflict.id == other


@pytest.mark.asyncio
async def test_store_failure_propagates() -> None:
    store = AsyncMock()
    store.query_by_date_and_status.side_effect = StoreUnavailableException()

    with pytest.raises(StoreUnavailableException) as exc_info:
        await find_conflict(store, "2025-06-01", "09:00")

    assert exc_info.value.retryable is True
