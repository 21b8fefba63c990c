"""Calendar-local date and wall-clock time helpers.

Dates travel as ``YYYY-MM-DD`` strings and times as ``HH:MM`` strings (or the
``on-call`` sentinel). Both compare lexically, so no helper here ever converts
through UTC.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.exceptions import ValidationException
from app.schemas.appointments import Appointment

ON_CALL = "on-call"
MINUTES_PER_DAY = 24 * 60

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def is_on_call(time_value: str | None) -> bool:
    """Return True for the on-call sentinel."""
    return time_value == ON_CALL


def validate_date(value: str | None) -> str:
    """
    Validate a calendar date string.

    Raises:
        ValidationException: If missing or not a real YYYY-MM-DD date
    """
    if not value or not value.strip():
        raise ValidationException("Appointment date is required")
    value = value.strip()
    if not _DATE_RE.match(value):
        raise ValidationException(f"Invalid date '{value}', expected YYYY-MM-DD")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValidationException(f"Invalid date '{value}'")
    return value


def validate_time(value: str | None) -> str:
    """
    Validate a wall-clock time string (``on-call`` is not accepted here).

    Raises:
        ValidationException: If missing or not HH:MM in 24-hour form
    """
    if not value or not value.strip():
        raise ValidationException("Please select a time or mark as 'On Call'")
    value = value.strip()
    if not _TIME_RE.match(value):
        raise ValidationException(f"Invalid time '{value}', expected HH:MM")
    return value


def resolve_slot_time(time_value: str | None, on_call: bool) -> str:
    """Combine the time field and the on-call flag into the stored time value."""
    if on_call:
        if time_value and time_value.strip() and not is_on_call(time_value.strip()):
            raise ValidationException("An on-call appointment cannot also have a fixed time")
        return ON_CALL
    if time_value is not None and is_on_call(time_value.strip()):
        return ON_CALL
    return validate_time(time_value)


def to_minutes(time_value: str) -> int:
    """Minutes since midnight for an ``HH:MM`` string."""
    hours, minutes = validate_time(time_value).split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(total: int) -> str:
    """Format minutes since midnight as ``HH:MM``, wrapping around midnight."""
    total %= MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def clinic_zone(tz_name: str | None) -> ZoneInfo | None:
    """Resolve the clinic's zone; None means the host's local zone."""
    if not tz_name:
        return None
    try:
        return ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        raise ValueError(f"Unknown clinic timezone '{tz_name}'")


def local_now(tz_name: str | None = None) -> datetime:
    """Current wall-clock time in the clinic's zone, as a naive datetime."""
    zone = clinic_zone(tz_name)
    if zone is None:
        return datetime.now()
    return datetime.now(zone).replace(tzinfo=None)


def to_date_string(value: date) -> str:
    """Format a calendar date from its local components."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def add_months(value: date, months: int) -> date:
    """Same day-of-month ``months`` later, clamped to the month's last day."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def minutes_until(appointment_time: str, now: datetime) -> float:
    """Minutes from ``now`` until ``appointment_time`` on the same calendar day."""
    start = now.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(
        minutes=to_minutes(appointment_time)
    )
    return (start - now).total_seconds() / 60


def _time_rank(appointment: Appointment) -> tuple[int, str]:
    # on-call sorts after every fixed slot
    if is_on_call(appointment.time):
        return (1, "")
    return (0, appointment.time)


def sort_appointments(
    appointments: list[Appointment], newest_first: bool = False
) -> list[Appointment]:
    """
    Order by date, then by time with on-call bookings last within a day.

    ``newest_first`` reverses the date order only; times stay ascending.
    """
    by_time = sorted(appointments, key=_time_rank)
    return sorted(by_time, key=lambda appointment: appointment.date, reverse=newest_first)
