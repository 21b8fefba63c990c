"""Advisory double-booking detection."""

from structlog import get_logger

from app.schemas.appointments import Appointment, AppointmentStatus
from app.scheduling.timeslots import is_on_call
from app.stores.base import AppointmentStore

logger = get_logger(__name__)

# Only these statuses occupy a slot.
ACTIVE_STATUSES = (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED)


async def find_conflict(
    store: AppointmentStore,
    date: str,
    time: str,
    exclude_id: str | None = None,
) -> Appointment | None:
    """
    Find an active appointment already booked at exactly ``date`` and ``time``.

    On-call bookings never conflict. When the data already holds several
    bookings for the slot, any one of them is returned. Store failures
    propagate as ``StoreUnavailableException``.

    Args:
        store: Appointment store to query
        date: Calendar date, YYYY-MM-DD
        time: Wall-clock time HH:MM, or on-call
        exclude_id: Appointment being edited, ignored when matching

    Returns:
        A conflicting appointment, or None
    """
    if is_on_call(time):
        return None

    candidates = await store.query_by_date_and_status(date, time, ACTIVE_STATUSES)
    for candidate in candidates:
        if exclude_id and candidate.id == exclude_id:
            continue
        logger.debug("slot_conflict_found", date=date, time=time, conflicting_id=candidate.id)
        return candidate
    return None
