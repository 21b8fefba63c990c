"""Tests for running-late arithmetic."""

import pytest

from app.core.exceptions import ValidationException
from app.schemas.appointments import Appointment, AppointmentStatus
from app.scheduling.delays import (
    NO_REASON,
    apply_delay,
    delay_minutes,
    is_delay_visible,
    revert_delay,
)


def _appt(**overrides) -> Appointment:
    fields = {"id": "a1", "patient_name": "Sara", "date": "2025-06-01", "time": "09:00"}
    fields.update(overrides)
    return Appointment(**fields)


def _after(appointment: Appointment, change) -> Appointment:
    return appointment.model_copy(update=change.as_fields())


def test_apply_delay_shifts_time_and_records_original() -> None:
    change = apply_delay(_appt(), 15, "  Traffic ")

    assert change.time == "09:15"
    assert change.original_time == "09:00"
    assert change.is_late is True
    assert change.delay_reason == "Traffic"


def test_apply_delay_wraps_past_midnight() -> None:
    appointment = _appt(time="23:50")

    change = apply_delay(appointment, 30, None)

    assert change.time == "00:20"
    assert _after(appointment, change).date == "2025-06-01"


@pytest.mark.parametrize("minutes", [1, 15, 45, 90, 600, 1439, 1440, 1500, 3000])
def test_apply_then_revert_restores_time(minutes: int) -> None:
    appointment = _appt(time="17:40")

    delayed = _after(appointment, apply_delay(appointment, minutes, "Running over"))
    restored = _after(delayed, revert_delay(delayed))

    assert restored.time == "17:40"
    assert restored.is_late is False
    assert restored.original_time is None


def test_successive_delays_keep_first_booked_time() -> None:
    appointment = _appt(time="10:00")

    first = _after(appointment, apply_delay(appointment, 10, "Patient late"))
    second = _after(first, apply_delay(first, 20, "Doctor in surgery"))
    third = _after(second, apply_delay(second, 5, ""))

    assert third.time == "10:35"
    assert third.original_time == "10:00"
    assert third.delay_reason == NO_REASON
    assert _after(third, revert_delay(third)).time == "10:00"


def test_blank_reason_uses_fallback() -> None:
    assert apply_delay(_appt(), 5, "   ").delay_reason == NO_REASON
    assert apply_delay(_appt(), 5, None).delay_reason == NO_REASON


@pytest.mark.parametrize("minutes", [0, -5, 2.5, True])
def test_apply_delay_rejects_non_positive_or_fractional_minutes(minutes) -> None:
    with pytest.raises(ValidationException):
        apply_delay(_appt(), minutes, "x")


def test_apply_delay_rejects_on_call() -> None:
    with pytest.raises(ValidationException):
        apply_delay(_appt(time="on-call"), 10, "x")


def test_revert_requires_original_time() -> None:
    with pytest.raises(ValidationException):
        revert_delay(_appt())


def test_revert_leaves_delay_reason_alone() -> None:
    delayed = _appt(time="09:20", is_late=True, original_time="09:00", delay_reason="Traffic")
    assert "delay_reason" not in revert_delay(delayed).as_fields()


def test_delay_minutes_and_visibility() -> None:
    delayed = _appt(time="00:10", is_late=True, original_time="23:55")

    assert delay_minutes(delayed) == 15
    assert delay_minutes(_appt()) is None
    assert is_delay_visible(delayed) is True
    assert is_delay_visible(delayed.model_copy(update={"status": AppointmentStatus.COMPLETED})) is False
    assert is_delay_visible(_appt()) is False


@pytest.mark.parametrize(("minutes", "expected"), [(1440, "23:50"), (1500, "00:50")])
def test_delays_of_a_day_or_more_wrap_and_revert(minutes: int, expected: str) -> None:
    appointment = _appt(time="23:50")

    delayed = _after(appointment, apply_delay(appointment, minutes, "x"))

    assert delayed.time == expected
    assert delayed.original_time == "23:50"
    assert delayed.date == "2025-06-01"
    assert _after(delayed, revert_delay(delayed)).time == "23:50"
