"""Shared fixtures for the board workflow engine tests.

The sprint board built from these fixtures looks like this:

    To Do:        S-3 (Highest), S-1 (Medium, tasks T-1 and T-2)
    In Progress:  S-2 (High, task T-3)
    In Review:    empty
    Done:         S-4 (Low)

S-5 sits in the backlog and T-4 has no parent story.
"""

from unittest.mock import MagicMock

import pytest

from board_workflow_interface.client import BoardBackend
from board_workflow_interface.items import Story, Task
from board_workflow_interface.status import Priority, Status
from board_workflow_engine.coordinator import MoveCoordinator
from board_workflow_engine.materializer import materialize
from board_workflow_engine.state import BoardState


@pytest.fixture
def stories():
    return [
        Story("S-1", "Login form", status=Status.TODO, priority=Priority.MEDIUM, points=3, epic_id="E-1", sprint_id="sp-1"),
        Story("S-2", "Password reset", status=Status.IN_PROGRESS, priority=Priority.HIGH, epic_id="E-1", sprint_id="sp-1"),
        Story("S-3", "Audit log", status=Status.TODO, priority=Priority.HIGHEST, sprint_id="sp-1"),
        Story("S-4", "Dark mode", status=Status.DONE, priority=Priority.LOW, epic_id="E-2", sprint_id="sp-1"),
        Story("S-5", "Export CSV", status=Status.BACKLOG, priority=Priority.LOW),
    ]


@pytest.fixture
def tasks():
    return [
        Task("T-1", "Form markup", story_id="S-1"),
        Task("T-2", "Validation", status=Status.IN_PROGRESS, story_id="S-1", assignee_id="u-7"),
        Task("T-3", "Email template", story_id="S-2"),
        Task("T-4", "Standalone chore"),
    ]


@pytest.fixture
def board(stories, tasks):
    """Board state for sprint sp-1."""
    return BoardState(materialize(stories, tasks, "sp-1"), container="sp-1")


@pytest.fixture
def backend():
    """Backend whose every call succeeds unless a test says otherwise."""
    return MagicMock(spec=BoardBackend)


@pytest.fixture
def coordinator(board, backend):
    return MoveCoordinator(board, backend)
