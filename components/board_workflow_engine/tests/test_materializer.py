"""Unit tests for board materialization."""

import copy
import logging

from board_workflow_interface.items import Story, Task
from board_workflow_interface.status import BOARD_COLUMNS, Priority, Status
from board_workflow_engine.materializer import materialize, materialize_report


def ids_in(columns, status):
    for column in columns:
        if column.status is status:
            return [s.id for s in column.stories]
    raise AssertionError(f"no column for {status}")


def test_one_column_per_board_status_in_order(stories, tasks):
    columns = materialize(stories, tasks, "sp-1")

    assert [c.status for c in columns] == list(BOARD_COLUMNS)
    assert [c.id for c in columns] == ["To Do", "In Progress", "In Review", "Done"]


def test_empty_columns_are_kept():
    # No stories at all still yields every drop target
    columns = materialize([], [], "sp-1")

    assert len(columns) == len(BOARD_COLUMNS)
    assert all(c.stories == [] for c in columns)


def test_stories_grouped_and_sorted_by_priority(stories, tasks):
    columns = materialize(stories, tasks, "sp-1")

    # S-3 is Highest so it leads the To Do column even though S-1 came first
    assert ids_in(columns, Status.TODO) == ["S-3", "S-1"]
    assert ids_in(columns, Status.IN_PROGRESS) == ["S-2"]
    assert ids_in(columns, Status.REVIEW) == []
    assert ids_in(columns, Status.DONE) == ["S-4"]


def test_equal_priorities_keep_input_order():
    stories = [
        Story("B", "b", status=Status.TODO, priority=Priority.MEDIUM),
        Story("A", "a", status=Status.TODO, priority=Priority.MEDIUM),
        Story("C", "c", status=Status.TODO, priority="Unranked"),
        Story("D", "d", status=Status.TODO, priority=Priority.HIGH),
    ]

    columns = materialize(stories, [], None)

    assert ids_in(columns, Status.TODO) == ["D", "B", "A", "C"]


def test_tasks_attached_to_their_story_only(stories, tasks):
    columns = materialize(stories, tasks, "sp-1")

    by_id = {s.id: s for c in columns for s in c.stories}
    assert [t.id for t in by_id["S-1"].tasks] == ["T-1", "T-2"]
    assert [t.id for t in by_id["S-2"].tasks] == ["T-3"]
    assert by_id["S-3"].tasks == []
    # the standalone task T-4 appears nowhere
    assert all(t.id != "T-4" for s in by_id.values() for t in s.tasks)


def test_container_filter_backlog(stories, tasks):
    columns = materialize(stories, tasks, "backlog")

    # S-5 is in the backlog but its Backlog status has no board column
    assert all(c.stories == [] for c in columns)
    report = materialize_report(stories, tasks, "backlog")
    assert [s.id for s in report.dropped] == ["S-5"]


def test_no_container_keeps_every_story(stories, tasks):
    report = materialize_report(stories, tasks)

    placed = {s.id for c in report.columns for s in c.stories}
    assert placed == {"S-1", "S-2", "S-3", "S-4"}
    assert [s.id for s in report.dropped] == ["S-5"]


def test_materialize_is_pure_and_idempotent(stories, tasks):
    stories_before = copy.deepcopy(stories)
    tasks_before = copy.deepcopy(tasks)

    first = materialize(stories, tasks, "sp-1")
    second = materialize(stories, tasks, "sp-1")

    assert first == second
    assert stories == stories_before
    assert tasks == tasks_before
    # board stories and tasks are copies; editing them leaves the input alone
    login = first[0].stories[1]
    login.title = "Renamed"
    login.tasks[0].title = "Renamed task"
    assert stories == stories_before
    assert tasks == tasks_before


def test_unknown_status_is_dropped_and_logged(caplog):
    stories = [
        Story("S-1", "ok", status=Status.TODO),
        Story("S-9", "bad record", status="Archived"),
    ]

    with caplog.at_level(logging.WARNING, logger="board_workflow_engine.materializer"):
        report = materialize_report(stories, [Task("T-1", "t", story_id="S-9")])

    assert [s.id for c in report.columns for s in c.stories] == ["S-1"]
    assert [s.id for s in report.dropped] == ["S-9"]
    assert "S-9" in caplog.text
    assert "Archived" in caplog.text


def test_status_aliases_land_in_their_column():
    stories = [
        Story("S-1", "spelled Review", status="Review"),
        Story("S-2", "snake case", status="in_progress"),
        Story("S-3", "canonical", status=Status.IN_PROGRESS),
    ]

    report = materialize_report(stories, [])

    assert report.dropped == []
    assert ids_in(report.columns, Status.REVIEW) == ["S-1"]
    assert ids_in(report.columns, Status.IN_PROGRESS) == ["S-2", "S-3"]
    # the board copy uses the canonical status, the input keeps its spelling
    assert report.columns[2].stories[0].status is Status.REVIEW
    assert stories[0].status == "Review"
