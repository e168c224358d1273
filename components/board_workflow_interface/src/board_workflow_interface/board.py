"""Core board contract definitions: columns and move intents."""


from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from board_workflow_interface.items import ItemKind, Story, Task
from board_workflow_interface.status import Priority, Status


@dataclass
class Column:
    """One board column, keyed by a workflow status.

    Columns are rebuilt on every materialization and own no persistent state.
    """

    status: Status
    stories: list[Story] = field(default_factory=list)

    @property
    def id(self) -> str:
        """Return the column id used as a drop target."""
        return self.status.value

    @property
    def title(self) -> str:
        return self.status.value

    def find_story(self, story_id: str) -> Story | None:
        for story in self.stories:
            if story.id == story_id:
                return story
        return None


class MoveKind(str, Enum):
    STATUS = "statusMove"
    REPARENT = "reparent"
    REASSIGN = "reassign"
    PRIORITY = "priority"


@dataclass(frozen=True)
class MoveIntent:
    """A user request to move or change one Story or Task.

    Build intents through the classmethods so that the target field matching
    ``kind`` is always set.
    """

    kind: MoveKind
    subject_id: str
    subject_kind: ItemKind
    from_container: str | None = None
    to_status: Status | None = None
    to_story_id: str | None = None
    to_assignee_id: str | None = None
    to_priority: Priority | None = None

    @property
    def to_container(self) -> str | None:
        """Return the column id or story id the subject is headed to."""
        if self.kind is MoveKind.STATUS and self.to_status is not None:
            return self.to_status.value
        if self.kind is MoveKind.REPARENT:
            return self.to_story_id
        return self.from_container

    @classmethod
    def status_move(
        cls,
        subject_id: str,
        to_status: Status,
        *,
        subject_kind: ItemKind = ItemKind.STORY,
        from_container: str | None = None,
    ) -> MoveIntent:
        return cls(MoveKind.STATUS, subject_id, subject_kind, from_container, to_status=to_status)

    @classmethod
    def reparent(cls, task_id: str, to_story_id: str, *, from_container: str | None = None) -> MoveIntent:
        return cls(MoveKind.REPARENT, task_id, ItemKind.TASK, from_container, to_story_id=to_story_id)

    @classmethod
    def reassign(cls, subject_id: str, subject_kind: ItemKind, assignee_id: str | None) -> MoveIntent:
        """Assign the subject to ``assignee_id``; None unassigns it."""
        return cls(MoveKind.REASSIGN, subject_id, subject_kind, to_assignee_id=assignee_id or "")

    @classmethod
    def reprioritize(cls, subject_id: str, subject_kind: ItemKind, priority: Priority) -> MoveIntent:
        return cls(MoveKind.PRIORITY, subject_id, subject_kind, to_priority=priority)


def find_subject(columns: list[Column], subject_id: str, kind: ItemKind) -> tuple[Column, Story, Task | None] | None:
    """Locate a Story or Task on the board.

    Returns ``(column, story, task)`` where ``task`` is None for stories, or
    None if the subject is not on the board.
    """
    for column in columns:
        for story in column.stories:
            if kind is ItemKind.STORY:
                if story.id == subject_id:
                    return column, story, None
                continue
            for task in story.tasks:
                if task.id == subject_id:
                    return column, story, task
    return None
