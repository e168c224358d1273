"""Tracker item builders - turn REST payloads into board items."""

from __future__ import annotations

import logging

from board_workflow_interface.items import (
    Epic,
    EpicStatus,
    Sprint,
    SprintStatus,
    Story,
    Task,
    TaskType,
)
from board_workflow_interface.status import Priority, parse_priority, parse_status

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Field normalization
# ---------------------------------------------------------------------------

def _status_or_raw(value):
    """Return the parsed Status, keeping unknown values verbatim for the board to drop."""
    parsed = parse_status(value)
    if parsed is None:
        return value or ""
    return parsed


def _priority(value) -> Priority | str:
    parsed = parse_priority(value)
    if parsed is None:
        #backend default for new stories and tasks
        return value or Priority.MEDIUM
    return parsed


def _enum_or_default(enum_cls, value, default):
    try:
        return enum_cls(value)
    except ValueError:
        logger.debug("Unknown %s value %r, using %s", enum_cls.__name__, value, default.value)
        return default


def _optional_id(value) -> str | None:
    #the backend sends "" for a story without an epic
    if value in (None, ""):
        return None
    return str(value)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def build_story(raw_data: dict) -> Story:
    """Return a Story from a tracker REST story payload.

    Args:
        raw_data: The JSON object for one story (camelCase keys).

    Returns:
        A Story with no tasks attached.

    """
    return Story(
        id=str(raw_data["id"]),
        title=raw_data.get("title", ""),
        status=_status_or_raw(raw_data.get("status")),
        priority=_priority(raw_data.get("priority")),
        points=raw_data.get("points"),
        epic_id=_optional_id(raw_data.get("epicId")),
        sprint_id=_optional_id(raw_data.get("sprintId")),
        assignee_id=_optional_id(raw_data.get("assigneeId")),
        description=raw_data.get("description") or "",
    )


def build_task(raw_data: dict) -> Task:
    """Return a Task from a tracker REST task payload."""
    return Task(
        id=str(raw_data["id"]),
        title=raw_data.get("title", ""),
        status=_status_or_raw(raw_data.get("status")),
        priority=_priority(raw_data.get("priority")),
        type=_enum_or_default(TaskType, raw_data.get("type"), TaskType.TASK),
        story_id=_optional_id(raw_data.get("storyId")),
        assignee_id=_optional_id(raw_data.get("assigneeId")),
    )


def build_epic(raw_data: dict) -> Epic:
    return Epic(
        id=str(raw_data["id"]),
        name=raw_data.get("name", ""),
        status=_enum_or_default(EpicStatus, raw_data.get("status"), EpicStatus.TODO),
        description=raw_data.get("description") or "",
    )


def build_sprint(raw_data: dict) -> Sprint:
    return Sprint(
        id=str(raw_data["id"]),
        name=raw_data.get("name", ""),
        status=_enum_or_default(SprintStatus, raw_data.get("status"), SprintStatus.PLANNING),
        goal=raw_data.get("goal") or "",
    )
