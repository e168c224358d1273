"""Core backend contract definitions and shared errors."""

from abc import ABC, abstractmethod

from board_workflow_interface.items import Epic, ItemUpdate, Story, Task
from board_workflow_interface.status import Status

__all__ = [
    "BoardBackend",
    "BoardWorkflowError",
    "InvalidTransitionError",
    "ItemNotFoundError",
]


class BoardWorkflowError(Exception):
    """Base exception for board workflow failures."""


class ItemNotFoundError(BoardWorkflowError):
    """Raised when a requested story, task or epic does not exist."""


class InvalidTransitionError(BoardWorkflowError):
    """Raised when a status change is not allowed by the workflow."""

    def __init__(self, from_status, to_status) -> None:
        self.from_status = from_status
        self.to_status = to_status
        source = getattr(from_status, "value", from_status)
        target = getattr(to_status, "value", to_status)
        super().__init__(f"Cannot move from '{source}' to '{target}'")


class BoardBackend(ABC):
    """System of record for stories and tasks.

    Implementations are expected to validate every change on their own side;
    the engine's client-side checks only keep invalid moves off the wire.
    """

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    @abstractmethod
    def fetch_stories_for_container(self, container: str) -> list[Story]:
        """Fetch stories for a board container.

        Args:
            container: A sprint id, or "backlog" for stories with no sprint

        """
        raise NotImplementedError

    @abstractmethod
    def fetch_tasks_for_story(self, story_id: str) -> list[Task]:
        """Fetch the tasks parented by a story."""
        raise NotImplementedError

    @abstractmethod
    def fetch_epics(self) -> list[Epic]:
        """Fetch every epic of the project."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    @abstractmethod
    def update_story_status(self, story_id: str, status: Status) -> Story:
        """Change a story's status.

        Notes on usage: the backend must reject a status that is not a legal
        transition from the story's stored status.

        Raises:
            ItemNotFoundError: If no story with that ID exists
            BoardWorkflowError: If the backend rejects the change

        """
        raise NotImplementedError

    @abstractmethod
    def update_task_status(self, task_id: str, status: Status) -> Task:
        """Change a task's status."""
        raise NotImplementedError

    @abstractmethod
    def update_task_parent(self, task_id: str, story_id: str) -> Task:
        """Move a task under another story and return the updated task."""
        raise NotImplementedError

    @abstractmethod
    def update_story(self, story_id: str, update: ItemUpdate) -> Story:
        """Apply a partial update to a story.

        Only the fields explicitly set on ``update`` are sent.
        """
        raise NotImplementedError

    @abstractmethod
    def update_task(self, task_id: str, update: ItemUpdate) -> Task:
        """Apply a partial update to a task."""
        raise NotImplementedError
