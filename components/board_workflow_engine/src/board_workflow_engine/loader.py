"""Load and refresh a board from the backend."""

from __future__ import annotations

import asyncio
import logging

from board_workflow_interface.client import BoardBackend
from board_workflow_interface.items import Task
from board_workflow_engine.materializer import materialize_report
from board_workflow_engine.state import BoardState

logger = logging.getLogger(__name__)


def fetch_board(backend: BoardBackend, container: str) -> BoardState:
    """Fetch the stories of ``container`` and their tasks, and build a fresh board."""
    state = BoardState(container=container)
    refresh_board(backend, state)
    return state


def refresh_board(backend: BoardBackend, state: BoardState) -> None:
    """Replace the board's columns with the backend's current view.

    Refreshing after a committed move reconciles the optimistic state with
    the system of record.
    """
    stories = backend.fetch_stories_for_container(state.container)
    tasks: list[Task] = []
    for story in stories:
        tasks.extend(backend.fetch_tasks_for_story(story.id))

    report = materialize_report(stories, tasks, state.container)
    if report.dropped:
        logger.warning("%d stories in %s were left off the board", len(report.dropped), state.container)
    state.replace_columns(report.columns)


async def load_board(backend: BoardBackend, container: str) -> BoardState:
    """Async wrapper around fetch_board for use inside the event loop."""
    return await asyncio.to_thread(fetch_board, backend, container)
