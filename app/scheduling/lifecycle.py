"""Appointment status state machine."""

from app.core.exceptions import InvalidTransitionException
from app.schemas.appointments import AppointmentStatus

S = AppointmentStatus

TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    S.SCHEDULED: frozenset({S.CONFIRMED, S.CANCELLED, S.COMPLETED, S.MISSED}),
    S.CONFIRMED: frozenset({S.COMPLETED, S.MISSED}),
    S.COMPLETED: frozenset(),
    S.MISSED: frozenset(),
    S.CANCELLED: frozenset(),
}


def allowed_transitions(status: AppointmentStatus) -> frozenset[AppointmentStatus]:
    """Statuses reachable from ``status`` through the engine."""
    return TRANSITIONS[AppointmentStatus(status)]


def is_terminal(status: AppointmentStatus) -> bool:
    return not allowed_transitions(status)


def validate_transition(current: AppointmentStatus, requested: AppointmentStatus) -> None:
    """
    Reject a status change not in the legal set.

    Raises:
        InvalidTransitionException: Naming both statuses
    """
    current = AppointmentStatus(current)
    requested = AppointmentStatus(requested)
    if requested not in TRANSITIONS[current]:
        raise InvalidTransitionException(current.value, requested.value)


def suggests_follow_up(new_status: AppointmentStatus) -> bool:
    """Completing a visit is the only transition that prompts a follow-up booking."""
    return AppointmentStatus(new_status) is AppointmentStatus.COMPLETED
