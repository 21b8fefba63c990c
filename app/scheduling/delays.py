"""Running-late adjustments that keep the originally booked time."""

from dataclasses import dataclass
from typing import Any

from app.core.exceptions import ValidationException
from app.schemas.appointments import Appointment
from app.scheduling.conflicts import ACTIVE_STATUSES
from app.scheduling.timeslots import MINUTES_PER_DAY, from_minutes, is_on_call, to_minutes

NO_REASON = "No reason provided"


@dataclass(frozen=True)
class DelayChange:
    """Field set produced by applying a delay."""

    time: str
    original_time: str
    delay_reason: str
    is_late: bool = True

    def as_fields(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "original_time": self.original_time,
            "delay_reason": self.delay_reason,
            "is_late": self.is_late,
        }


@dataclass(frozen=True)
class DelayRevert:
    """Field set produced by reverting a delay. ``delay_reason`` is left untouched."""

    time: str
    is_late: bool = False
    original_time: str | None = None

    def as_fields(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "is_late": self.is_late,
            "original_time": self.original_time,
        }


def validate_delay_minutes(minutes: int) -> int:
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise ValidationException("Delay must be a whole number of minutes")
    if minutes <= 0:
        raise ValidationException("Delay must be a positive number of minutes")
    return minutes


def apply_delay(appointment: Appointment, minutes: int, reason: str | None) -> DelayChange:
    """
    Shift the appointment's time by ``minutes``, wrapping past midnight.

    The date is never touched. ``original_time`` is captured only on the first
    delay, so a chain of delays still reverts to the time first booked.

    Raises:
        ValidationException: For on-call appointments or non-positive minutes
    """
    if is_on_call(appointment.time):
        raise ValidationException("On-call appointments have no fixed time to delay")
    validate_delay_minutes(minutes)

    new_time = from_minutes(to_minutes(appointment.time) + minutes)

    already_late = appointment.is_late and appointment.original_time
    original_time = appointment.original_time if already_late else appointment.time

    reason = (reason or "").strip() or NO_REASON
    return DelayChange(time=new_time, original_time=original_time, delay_reason=reason)


def revert_delay(appointment: Appointment) -> DelayRevert:
    """
    Restore the originally booked time and clear the late flag.

    Raises:
        ValidationException: When there is no original time to return to
    """
    original_time = appointment.original_time
    if not original_time or is_on_call(original_time):
        raise ValidationException("Appointment is not running late")
    return DelayRevert(time=original_time)


def delay_minutes(appointment: Appointment) -> int | None:
    """How many minutes late the appointment is running, or None if not late."""
    if not appointment.is_late or not appointment.original_time or is_on_call(appointment.time):
        return None
    return (to_minutes(appointment.time) - to_minutes(appointment.original_time)) % MINUTES_PER_DAY


def is_delay_visible(appointment: Appointment) -> bool:
    """Late state is only shown while the appointment is still active."""
    return bool(
        appointment.is_late
        and appointment.original_time
        and appointment.status in ACTIVE_STATUSES
    )
