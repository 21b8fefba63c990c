"""Pure scheduling rules: conflicts, delays and the status lifecycle."""

from app.scheduling.conflicts import ACTIVE_STATUSES, find_conflict
from app.scheduling.delays import apply_delay, delay_minutes, is_delay_visible, revert_delay
from app.scheduling.lifecycle import allowed_transitions, suggests_follow_up, validate_transition
from app.scheduling.timeslots import ON_CALL

__all__ = [
    "ACTIVE_STATUSES",
    "ON_CALL",
    "allowed_transitions",
    "apply_delay",
    "delay_minutes",
    "find_conflict",
    "is_delay_visible",
    "revert_delay",
    "suggests_follow_up",
    "validate_transition",
]
