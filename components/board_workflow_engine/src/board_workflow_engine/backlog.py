"""Backlog hierarchy view: stories grouped under their epics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from board_workflow_interface.items import Epic, Story
from board_workflow_interface.status import Status
from board_workflow_engine.materializer import sort_by_priority

logger = logging.getLogger(__name__)

SORT_KEYS = ("priority", "id")


@dataclass
class EpicGroup:
    epic: Epic
    stories: list[Story] = field(default_factory=list)
    progress: int = 0

    @property
    def done_count(self) -> int:
        return sum(1 for s in self.stories if s.status == Status.DONE)


@dataclass
class Backlog:
    """Stories grouped by epic.

    ``by_epic`` follows the order of the epics passed in. ``orphaned`` holds
    stories pointing at an epic that was not supplied.
    """

    unassigned: list[Story] = field(default_factory=list)
    by_epic: dict[str, EpicGroup] = field(default_factory=dict)
    orphaned: list[Story] = field(default_factory=list)


def epic_progress(stories: list[Story]) -> int:
    """Return the percentage of ``stories`` that are Done, 0 for none.

    Halves round up, so 1 of 8 done is 13.
    """
    if not stories:
        return 0
    done = sum(1 for s in stories if s.status == Status.DONE)
    total = len(stories)
    return (200 * done + total) // (2 * total)


def _sorted(stories: list[Story], sort_by: str) -> list[Story]:
    if sort_by == "id":
        return sorted(stories, key=lambda s: s.id)
    return sort_by_priority(stories)


def build_backlog(epics: list[Epic], stories: list[Story], *, sort_by: str = "priority") -> Backlog:
    """Group ``stories`` under ``epics``.

    Sprint assignment is not considered: every story with no epic is
    unassigned, and every story of an epic counts towards its progress.
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(f"sort_by must be one of {SORT_KEYS}, got {sort_by!r}")

    backlog = Backlog(by_epic={epic.id: EpicGroup(epic) for epic in epics})
    for story in stories:
        if story.epic_id is None:
            backlog.unassigned.append(story)
        elif story.epic_id in backlog.by_epic:
            backlog.by_epic[story.epic_id].stories.append(story)
        else:
            backlog.orphaned.append(story)

    if backlog.orphaned:
        logger.warning(
            "%d stories reference unknown epics: %s",
            len(backlog.orphaned), ", ".join(s.id for s in backlog.orphaned),
        )

    backlog.unassigned = _sorted(backlog.unassigned, sort_by)
    for group in backlog.by_epic.values():
        group.stories = _sorted(group.stories, sort_by)
        group.progress = epic_progress(group.stories)
    return backlog
