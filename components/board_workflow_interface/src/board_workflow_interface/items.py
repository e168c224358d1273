"""Item contract - Epic, Story, Task and Sprint representations."""

from __future__ import annotations

from dataclasses import dataclass, field, fields as dataclass_fields
from enum import Enum

from board_workflow_interface.status import Priority, Status


class ItemKind(str, Enum):
    EPIC = "Epic"
    STORY = "Story"
    TASK = "Task"


class TaskType(str, Enum):
    TASK = "Task"
    BUG = "Bug"
    SUBTASK = "Subtask"


class EpicStatus(str, Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class SprintStatus(str, Enum):
    PLANNING = "Planning"
    ACTIVE = "Active"
    COMPLETED = "Completed"


#container name used for stories that belong to no sprint
BACKLOG_CONTAINER = "backlog"


@dataclass
class Task:
    """A unit of work, optionally parented by a Story.

    ``status`` holds the raw backend value when it does not match a known Status.
    """

    id: str
    title: str
    status: Status | str = Status.TODO
    priority: Priority | str = Priority.MEDIUM
    type: TaskType = TaskType.TASK
    story_id: str | None = None
    assignee_id: str | None = None
    kind: ItemKind = field(default=ItemKind.TASK, init=False)


@dataclass
class Story:
    """A story on the board. ``tasks`` is only populated by board materialization."""

    id: str
    title: str
    status: Status | str = Status.BACKLOG
    priority: Priority | str = Priority.MEDIUM
    points: int | None = None
    epic_id: str | None = None
    sprint_id: str | None = None
    assignee_id: str | None = None
    description: str = ""
    tasks: list[Task] = field(default_factory=list)
    kind: ItemKind = field(default=ItemKind.STORY, init=False)

    @property
    def container(self) -> str:
        """Return the sprint id, or the backlog container when unscheduled."""
        return self.sprint_id or BACKLOG_CONTAINER


@dataclass
class Epic:
    id: str
    name: str
    status: EpicStatus = EpicStatus.TODO
    description: str = ""
    kind: ItemKind = field(default=ItemKind.EPIC, init=False)


@dataclass
class Sprint:
    id: str
    name: str
    status: SprintStatus = SprintStatus.PLANNING
    goal: str = ""

    @property
    def is_open(self) -> bool:
        """Planning and active sprints can still receive stories."""
        return self.status in (SprintStatus.PLANNING, SprintStatus.ACTIVE)


@dataclass
#dataclass so partial updates can be built field by field
class ItemUpdate:
    """
    All fields default to None. During an update, only fields explicitly changed to non-None value will be changed.
    """

    title: str | None = None
    status: Status | None = None
    priority: Priority | None = None
    assignee_id: str | None = None
    story_id: str | None = None

    def set_fields(self) -> dict:
        """Return a dict containing only the fields explicitly set to non-None values."""
        return {f.name: getattr(self, f.name) for f in dataclass_fields(self) if getattr(self, f.name) is not None}
