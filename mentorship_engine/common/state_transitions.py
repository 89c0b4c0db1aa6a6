"""
Transition tables for every status-bearing entity of the engine.

Each table maps a source status to the set of statuses it may move to. Services
never assign a status directly: they ask `ensure_transition` whether a move is
legal and then issue a conditional update restricted to `source_statuses`, so a
concurrent writer that already moved the row makes the update match zero rows.
"""

from enum import Enum

from mentorship_engine.common.mentorship_enums import (
    CycleStatus,
    InterestStatus,
    MatchStatus,
    MentorshipStatus,
    ProgramStatus,
    TaskStatus,
)
from mentorship_engine.common.mentorship_errors import PreconditionFailedError

CYCLE_TRANSITIONS = {
    CycleStatus.UPCOMING: frozenset({CycleStatus.ACTIVE}),
    CycleStatus.ACTIVE: frozenset({CycleStatus.COMPLETED}),
    CycleStatus.COMPLETED: frozenset(),
}

INTEREST_TRANSITIONS = {
    InterestStatus.INTERESTED: frozenset({InterestStatus.WITHDRAWN}),
    InterestStatus.WITHDRAWN: frozenset({InterestStatus.INTERESTED}),
}

MATCH_TRANSITIONS = {
    MatchStatus.PENDING: frozenset({MatchStatus.APPROVED, MatchStatus.REJECTED}),
    MatchStatus.APPROVED: frozenset(),
    MatchStatus.REJECTED: frozenset(),
}

MENTORSHIP_TRANSITIONS = {
    MentorshipStatus.PENDING: frozenset(
        {MentorshipStatus.ACTIVE, MentorshipStatus.CANCELLED}
    ),
    MentorshipStatus.ACTIVE: frozenset(
        {MentorshipStatus.COMPLETED, MentorshipStatus.CANCELLED}
    ),
    MentorshipStatus.COMPLETED: frozenset(),
    MentorshipStatus.CANCELLED: frozenset(),
}

PROGRAM_TRANSITIONS = {
    ProgramStatus.ACTIVE: frozenset({ProgramStatus.COMPLETED}),
    ProgramStatus.COMPLETED: frozenset(),
}

TASK_TRANSITIONS = {
    TaskStatus.PENDING: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.COMPLETED}),
    TaskStatus.COMPLETED: frozenset(),
}


def can_transition(transitions: dict, current: Enum, target: Enum) -> bool:
    """Return True when `current -> target` is listed in the given table."""
    return target in transitions.get(current, frozenset())


def is_terminal(transitions: dict, status: Enum) -> bool:
    """Return True when no transition leaves the given status."""
    return not transitions.get(status)


def source_statuses(transitions: dict, target: Enum) -> list:
    """
    List every status from which `target` can be reached.

    The result is ordered by declaration order of the table so the generated
    SQL is stable across runs.
    """
    return [source for source, targets in transitions.items() if target in targets]


def ensure_transition(
    transitions: dict, current: Enum, target: Enum, entity_name: str
) -> None:
    """
    Reject a transition that is not in the table.

    Raises:
        PreconditionFailedError: If `current -> target` is not allowed.
    """
    if not can_transition(transitions, current, target):
        raise PreconditionFailedError(
            f"{entity_name} cannot move from '{current.value}' to '{target.value}'."
        )
