"""Tests for the appointment status state machine."""

import pytest

from app.core.exceptions import InvalidTransitionException
from app.schemas.appointments import AppointmentStatus as S
from app.scheduling.lifecycle import (
    allowed_transitions,
    is_terminal,
    suggests_follow_up,
    validate_transition,
)

LEGAL = [
    (S.SCHEDULED, S.CONFIRMED),
    (S.SCHEDULED, S.CANCELLED),
    (S.SCHEDULED, S.COMPLETED),
    (S.SCHEDULED, S.MISSED),
    (S.CONFIRMED, S.COMPLETED),
    (S.CONFIRMED, S.MISSED),
]


@pytest.mark.parametrize(("current", "requested"), LEGAL)
def test_legal_transitions_pass(current: S, requested: S) -> None:
    validate_transition(current, requested)


@pytest.mark.parametrize(
    ("current", "requested"),
    [
        (current, requested)
        for current in S
        for requested in S
        if (current, requested) not in LEGAL
    ],
)
def test_everything_else_is_rejected(current: S, requested: S) -> None:
    with pytest.raises(InvalidTransitionException) as exc_info:
        validate_transition(current, requested)

    assert exc_info.value.current_status == current.value
    assert exc_info.value.requested_status == requested.value
    assert current.value in exc_info.value.message


def test_terminal_statuses() -> None:
    assert {s for s in S if is_terminal(s)} == {S.COMPLETED, S.MISSED, S.CANCELLED}
    assert allowed_transitions(S.CONFIRMED) == {S.COMPLETED, S.MISSED}


def test_only_completion_suggests_follow_up() -> None:
    assert suggests_follow_up(S.COMPLETED) is True
    assert not any(suggests_follow_up(s) for s in S if s is not S.COMPLETED)
