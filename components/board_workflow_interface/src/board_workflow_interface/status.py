"""Status contract - workflow statuses, priorities and the transition table."""

from __future__ import annotations

from enum import Enum


class Status(str, Enum):
    BACKLOG = "Backlog"
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    REVIEW = "In Review"
    DONE = "Done"
    BLOCKED = "Blocked"


class Priority(str, Enum):
    HIGHEST = "Highest"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    LOWEST = "Lowest"

    @property
    def rank(self) -> int:
        """Return the sort rank, 0 being the most urgent."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK: dict[Priority, int] = {
    Priority.HIGHEST: 0,
    Priority.HIGH:    1,
    Priority.MEDIUM:  2,
    Priority.LOW:     3,
    Priority.LOWEST:  4,
}

UNKNOWN_PRIORITY_RANK = 99

#backend and older boards spell the review column differently
_STATUS_ALIASES: dict[str, Status] = {
    "review":      Status.REVIEW,
    "todo":        Status.TODO,
    "in_progress": Status.IN_PROGRESS,
}

#board layout, left to right
BOARD_COLUMNS: tuple[Status, ...] = (
    Status.TODO,
    Status.IN_PROGRESS,
    Status.REVIEW,
    Status.DONE,
)

#single-direction workflow with one reopen from Done
TRANSITIONS: dict[Status, frozenset[Status]] = {
    Status.TODO:        frozenset({Status.IN_PROGRESS}),
    Status.IN_PROGRESS: frozenset({Status.REVIEW}),
    Status.REVIEW:      frozenset({Status.DONE}),
    Status.DONE:        frozenset({Status.TODO}),
}


def parse_status(value: str | Status | None) -> Status | None:
    """Return the Status matching ``value``, or None if it is not a known status."""
    if isinstance(value, Status):
        return value
    if not value:
        return None
    key = value.strip().lower()
    if key in _STATUS_ALIASES:
        return _STATUS_ALIASES[key]
    for status in Status:
        if status.value.lower() == key:
            return status
    return None


def parse_priority(value: str | Priority | None) -> Priority | None:
    """Return the Priority matching ``value``, or None if it is not a known priority."""
    if isinstance(value, Priority):
        return value
    if not value:
        return None
    key = value.strip().lower()
    for priority in Priority:
        if priority.value.lower() == key:
            return priority
    return None


def priority_rank(priority: Priority | str | None) -> int:
    parsed = parse_priority(priority)
    if parsed is None:
        return UNKNOWN_PRIORITY_RANK
    return parsed.rank


def is_transition_allowed(from_status: Status | str, to_status: Status | str) -> bool:
    """Return True if the workflow allows moving from ``from_status`` to ``to_status``.

    Any pair not listed in TRANSITIONS is rejected, including unknown statuses
    and moves that skip a column.
    """
    source = parse_status(from_status)
    target = parse_status(to_status)
    if source is None or target is None:
        return False
    return target in TRANSITIONS.get(source, frozenset())


def allowed_targets(from_status: Status | str) -> list[Status]:
    """Return the statuses reachable in one move, in board column order."""
    source = parse_status(from_status)
    if source is None:
        return []
    targets = TRANSITIONS.get(source, frozenset())
    return [status for status in BOARD_COLUMNS if status in targets]
