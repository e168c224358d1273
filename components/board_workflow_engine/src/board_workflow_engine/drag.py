"""Drag interaction adapter: drag gestures in, move intents out."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from board_workflow_interface.board import MoveIntent, find_subject
from board_workflow_interface.items import ItemKind
from board_workflow_interface.status import parse_status
from board_workflow_engine.coordinator import MoveCoordinator, PendingMove

logger = logging.getLogger(__name__)

CANCEL_KEYS = frozenset({"Escape", "Esc"})


class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class DropTargetKind(str, Enum):
    COLUMN = "column"
    STORY = "story"


@dataclass(frozen=True)
class DropTarget:
    """Where a dragged item was released: a status column or a story's task container."""

    kind: DropTargetKind
    id: str

    @classmethod
    def column(cls, column_id: str) -> DropTarget:
        return cls(DropTargetKind.COLUMN, column_id)

    @classmethod
    def story(cls, story_id: str) -> DropTarget:
        return cls(DropTargetKind.STORY, story_id)


@dataclass(frozen=True)
class DragSubject:
    id: str
    kind: ItemKind
    container: str


class DragAdapter:
    """Tracks one drag at a time and hands finished drops to the coordinator.

    The lifecycle is Idle -> Dragging -> (dropped | cancelled) -> Idle. A new
    drag cannot start until the current one has ended.
    """

    def __init__(self, coordinator: MoveCoordinator) -> None:
        self._coordinator = coordinator
        self._subject: DragSubject | None = None

    @property
    def phase(self) -> DragPhase:
        return DragPhase.IDLE if self._subject is None else DragPhase.DRAGGING

    @property
    def subject(self) -> DragSubject | None:
        return self._subject

    def drag_start(self, subject_id: str, subject_kind: ItemKind = ItemKind.STORY) -> bool:
        """Begin dragging ``subject_id``. Returns False if the drag was not started."""
        if self._subject is not None:
            logger.debug("Ignoring drag of %s: %s is still being dragged", subject_id, self._subject.id)
            return False
        located = find_subject(self._coordinator.state.columns, subject_id, subject_kind)
        if located is None:
            logger.debug("Ignoring drag of %s: not on the board", subject_id)
            return False
        column, story, _ = located
        #stories live in columns, tasks live in stories
        container = column.id if subject_kind is ItemKind.STORY else story.id
        self._subject = DragSubject(subject_id, subject_kind, container)
        return True

    def drag_end(self, target: DropTarget | None) -> PendingMove | None:
        """Finish the drag over ``target`` (None when released outside any container).

        Returns the pending move handed to the coordinator, or None when the
        drop produced no move.
        """
        subject = self._subject
        self._subject = None
        if subject is None:
            return None
        intent = self.intent_for(subject, target)
        if intent is None:
            return None
        return self._coordinator.apply_move(intent)

    def cancel(self) -> None:
        if self._subject is not None:
            logger.debug("Drag of %s cancelled", self._subject.id)
        self._subject = None

    def handle_key(self, key: str) -> bool:
        """Cancel the drag on Escape. Returns True if the key was consumed."""
        if key in CANCEL_KEYS and self._subject is not None:
            self.cancel()
            return True
        return False

    @staticmethod
    def intent_for(subject: DragSubject, target: DropTarget | None) -> MoveIntent | None:
        """Translate a drop into a move intent, or None for a no-op drop."""
        if target is None or target.id == subject.container:
            return None

        if subject.kind is ItemKind.STORY and target.kind is DropTargetKind.COLUMN:
            status = parse_status(target.id)
            if status is None:
                logger.debug("Ignoring drop of %s on unknown column %r", subject.id, target.id)
                return None
            return MoveIntent.status_move(subject.id, status, from_container=subject.container)

        if subject.kind is ItemKind.TASK and target.kind is DropTargetKind.STORY:
            return MoveIntent.reparent(subject.id, target.id, from_container=subject.container)

        #stories dropped on cards and tasks dropped on columns do not move anything
        return None
