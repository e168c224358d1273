"""Board materialization: flat stories and tasks in, status columns out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from board_workflow_interface.board import Column
from board_workflow_interface.items import Story, Task
from board_workflow_interface.status import BOARD_COLUMNS, parse_status, priority_rank

logger = logging.getLogger(__name__)


@dataclass
class Materialization:
    """Columns built for one container, plus the stories that fit no column."""

    columns: list[Column]
    dropped: list[Story] = field(default_factory=list)


def sort_by_priority(stories: list[Story]) -> list[Story]:
    """Return stories ordered by priority rank; equal ranks keep their order."""
    return sorted(stories, key=lambda s: priority_rank(s.priority))


def _in_container(story: Story, container: str | None) -> bool:
    if container is None:
        return True
    return story.container == container


def materialize_report(stories: list[Story], tasks: list[Task], container: str | None = None) -> Materialization:
    """Build the board columns and report stories that could not be placed.

    Args:
        stories:   Stories fetched from the backend, in backend order.
        tasks:     Tasks to nest under their parent stories.
        container: Sprint id, "backlog" for unscheduled stories, or None for all.

    The inputs are never modified; every story on the board is a copy with
    its own task list.
    """
    tasks_by_story: dict[str, list[Task]] = {}
    for task in tasks:
        if task.story_id is not None:
            tasks_by_story.setdefault(task.story_id, []).append(task)

    grouped: dict = {status: [] for status in BOARD_COLUMNS}
    dropped: list[Story] = []
    for story in stories:
        if not _in_container(story, container):
            continue
        board_story = replace(
            story,
            tasks=[replace(t) for t in tasks_by_story.get(story.id, [])],
        )
        status = parse_status(story.status)
        bucket = grouped.get(status)
        if bucket is None:
            dropped.append(board_story)
            continue
        #board copies carry the canonical spelling
        board_story.status = status
        bucket.append(board_story)

    for story in dropped:
        logger.warning(
            "Story %s has status %r with no board column; leaving it off the board",
            story.id, getattr(story.status, "value", story.status),
        )

    columns = [Column(status, sort_by_priority(grouped[status])) for status in BOARD_COLUMNS]
    return Materialization(columns, dropped)


def materialize(stories: list[Story], tasks: list[Task], container: str | None = None) -> list[Column]:
    """Build one column per board status, in board order, even when empty."""
    return materialize_report(stories, tasks, container).columns
