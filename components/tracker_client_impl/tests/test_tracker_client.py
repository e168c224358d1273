"""Unit tests for TrackerClient core methods.

The HTTP session is replaced by a MagicMock so no request leaves the test.
"""

#Run with "python -m pytest components/tracker_client_impl/tests/test_tracker_client.py -v"

from unittest.mock import MagicMock

import pytest

from board_workflow_interface.client import BoardWorkflowError
from board_workflow_interface.items import ItemUpdate, TaskType
from board_workflow_interface.status import Priority, Status
from tracker_client_impl.tracker_impl import ItemNotFoundError, TrackerApiError, TrackerClient, get_client
from tracker_client_impl.tracker_items import build_epic, build_story, build_task


def _response(status_code=200, body=None, *, reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = reason
    response.url = "https://tracker.test/api/resource"
    response.content = b"{}" if body is not None else b""
    response.json.return_value = body
    return response


#Fixture for mock tests
@pytest.fixture
def tracker_client():
    """Returns a TrackerClient whose HTTP session is mocked."""
    client = TrackerClient("https://tracker.test/api/", "proj-1", "dummy_token")
    client._session = MagicMock()
    return client

#--------------------------- construction --------------------------

def test_client_sends_bearer_token():
    client = TrackerClient("https://tracker.test/api", "proj-1", "secret")
    assert client._session.headers["Authorization"] == "Bearer secret"


def test_client_without_token_sends_no_authorization():
    client = TrackerClient("https://tracker.test/api", "proj-1")
    assert "Authorization" not in client._session.headers


def test_url_joins_base_and_path(tracker_client):
    assert tracker_client._url("/tasks") == "https://tracker.test/api/tasks"

#--------------------------- reads --------------------------

def test_fetch_stories_unwraps_data_envelope(tracker_client):
    # Setup: the API wraps the story list in {"success": true, "data": [...]}
    tracker_client._session.get.return_value = _response(body={
        "success": True,
        "data": [
            {"id": "S-1", "title": "Login", "status": "In Progress", "priority": "High", "sprintId": "sp-1"},
            {"id": "S-2", "title": "Logout", "status": "To Do", "priority": "Low", "sprintId": "sp-1"},
        ],
    })

    # Act
    stories = tracker_client.fetch_stories_for_container("sp-1")

    # Assert: both stories built with normalized statuses and the sprint passed as a filter
    assert [s.id for s in stories] == ["S-1", "S-2"]
    assert stories[0].status is Status.IN_PROGRESS
    assert stories[0].priority is Priority.HIGH
    args, kwargs = tracker_client._session.get.call_args
    assert args[0] == "https://tracker.test/api/projects/proj-1/stories"
    assert kwargs["params"] == {"sprintId": "sp-1"}


def test_fetch_backlog_keeps_only_unscheduled_stories(tracker_client):
    tracker_client._session.get.return_value = _response(body=[
        {"id": "S-1", "title": "Scheduled", "status": "To Do", "sprintId": "sp-1"},
        {"id": "S-2", "title": "Backlog", "status": "Backlog", "sprintId": None},
    ])

    stories = tracker_client.fetch_stories_for_container("backlog")

    assert [s.id for s in stories] == ["S-2"]


def test_fetch_project_stories_sends_no_sprint_filter(tracker_client):
    tracker_client._session.get.return_value = _response(body={"data": [
        {"id": "S-1", "title": "Scheduled", "status": "To Do", "sprintId": "sp-1"},
        {"id": "S-2", "title": "Backlog", "status": "Backlog", "sprintId": None},
    ]})

    stories = tracker_client.fetch_project_stories()

    assert [s.id for s in stories] == ["S-1", "S-2"]
    args, kwargs = tracker_client._session.get.call_args
    assert args[0] == "https://tracker.test/api/projects/proj-1/stories"
    assert kwargs["params"] is None


def test_fetch_tasks_for_story_filters_by_project_and_story(tracker_client):
    tracker_client._session.get.return_value = _response(body=[
        {"id": "T-1", "title": "Fix", "status": "Done", "type": "Bug", "storyId": "S-1"},
    ])

    tasks = tracker_client.fetch_tasks_for_story("S-1")

    assert tasks[0].type is TaskType.BUG
    assert tasks[0].story_id == "S-1"
    _, kwargs = tracker_client._session.get.call_args
    assert kwargs["params"] == {"projectId": "proj-1", "storyId": "S-1"}


def test_fetch_epics_returns_empty_for_unexpected_payload(tracker_client):
    tracker_client._session.get.return_value = _response(body={"data": {"unexpected": True}})

    assert tracker_client.fetch_epics() == []

#--------------------------- mutations --------------------------

def test_update_story_status_patches_status(tracker_client):
    tracker_client._session.patch.return_value = _response(body={"data": {"id": "S-1", "title": "Login", "status": "In Review"}})

    story = tracker_client.update_story_status("S-1", Status.REVIEW)

    assert story.status is Status.REVIEW
    args, kwargs = tracker_client._session.patch.call_args
    assert args[0] == "https://tracker.test/api/projects/proj-1/stories/S-1"
    assert kwargs["json"] == {"status": "In Review"}


def test_update_task_parent_puts_story_id(tracker_client):
    tracker_client._session.put.return_value = _response(body={"id": "T-1", "title": "Fix", "storyId": "S-2"})

    task = tracker_client.update_task_parent("T-1", "S-2")

    assert task.story_id == "S-2"
    args, kwargs = tracker_client._session.put.call_args
    assert args[0] == "https://tracker.test/api/tasks/T-1"
    assert kwargs["json"] == {"storyId": "S-2"}


def test_update_task_status_uses_status_endpoint(tracker_client):
    tracker_client._session.patch.return_value = _response(body={"id": "T-1", "title": "Fix", "status": "Done"})

    tracker_client.update_task_status("T-1", Status.DONE)

    args, kwargs = tracker_client._session.patch.call_args
    assert args[0] == "https://tracker.test/api/tasks/T-1/status"
    assert kwargs["json"] == {"status": "Done"}


def test_update_story_sends_only_set_fields(tracker_client):
    tracker_client._session.patch.return_value = _response(body={"id": "S-1", "title": "Login", "priority": "Highest"})

    tracker_client.update_story("S-1", ItemUpdate(priority=Priority.HIGHEST))

    _, kwargs = tracker_client._session.patch.call_args
    assert kwargs["json"] == {"priority": "Highest"}


def test_update_task_empty_assignee_clears_assignment(tracker_client):
    tracker_client._session.put.return_value = _response(body={"id": "T-1", "title": "Fix"})

    task = tracker_client.update_task("T-1", ItemUpdate(assignee_id=""))

    _, kwargs = tracker_client._session.put.call_args
    assert kwargs["json"] == {"assigneeId": None}
    assert task.assignee_id is None


def test_update_story_with_no_changes_skips_request(tracker_client):
    with pytest.raises(TrackerApiError):
        tracker_client.update_story("S-1", ItemUpdate())

    tracker_client._session.patch.assert_not_called()

#--------------------------- _raise_for_status --------------------------

def test_raise_for_status_ok_response_does_not_raise():
    TrackerClient._raise_for_status(_response(200, {}))


def test_raise_for_status_404_raises_item_not_found():
    with pytest.raises(ItemNotFoundError):
        TrackerClient._raise_for_status(_response(404, {}, reason="Not Found"))


def test_raise_for_status_uses_server_message():
    # Setup: server rejects an illegal transition with a message body
    response = _response(409, {"message": "Story cannot move from To Do to Done"}, reason="Conflict")

    with pytest.raises(TrackerApiError) as exc_info:
        TrackerClient._raise_for_status(response)

    assert str(exc_info.value) == "Story cannot move from To Do to Done"
    assert exc_info.value.server_message == "Story cannot move from To Do to Done"
    assert exc_info.value.status_code == 409
    # the client errors share the workflow base class
    assert isinstance(exc_info.value, BoardWorkflowError)


def test_raise_for_status_falls_back_to_status_line():
    response = _response(500, None, reason="Internal Server Error")
    response.json.side_effect = ValueError("no json")

    with pytest.raises(TrackerApiError) as exc_info:
        TrackerClient._raise_for_status(response)

    assert str(exc_info.value) == "API error: 500 Internal Server Error"
    assert exc_info.value.server_message is None

#--------------------------- item builders --------------------------

def test_build_story_keeps_unknown_status_verbatim():
    story = build_story({"id": 7, "title": "Odd", "status": "Archived", "epicId": ""})

    assert story.id == "7"
    assert story.status == "Archived"
    assert story.epic_id is None


def test_build_task_defaults():
    task = build_task({"id": "T-9", "title": "Untyped", "type": "Chore"})

    assert task.type is TaskType.TASK
    assert task.priority is Priority.MEDIUM
    assert task.story_id is None


def test_build_epic_unknown_status_defaults_to_todo():
    epic = build_epic({"id": "E-1", "name": "Payments", "status": "Someday"})

    assert epic.status.value == "To Do"

#--------------------------- get_client --------------------------

def test_get_client_raises_when_env_vars_missing(monkeypatch):
    for var in ["TRACKER_BASE_URL", "TRACKER_PROJECT_ID", "TRACKER_API_TOKEN", "TRACKER_TIMEOUT"]:
        monkeypatch.delenv(var, raising=False)

    with pytest.raises(EnvironmentError) as exc_info:
        get_client(interactive=False)

    assert "TRACKER_BASE_URL" in str(exc_info.value)
    assert "TRACKER_PROJECT_ID" in str(exc_info.value)


def test_get_client_succeeds_when_env_vars_present(monkeypatch):
    monkeypatch.setenv("TRACKER_BASE_URL", "https://tracker.test/api")
    monkeypatch.setenv("TRACKER_PROJECT_ID", "proj-1")
    monkeypatch.setenv("TRACKER_TIMEOUT", "2.5")
    monkeypatch.delenv("TRACKER_API_TOKEN", raising=False)

    client = get_client(interactive=False)

    assert isinstance(client, TrackerClient)
    assert client.project_id == "proj-1"
    assert client._timeout == 2.5


def test_get_client_rejects_bad_timeout(monkeypatch):
    monkeypatch.setenv("TRACKER_BASE_URL", "https://tracker.test/api")
    monkeypatch.setenv("TRACKER_PROJECT_ID", "proj-1")
    monkeypatch.setenv("TRACKER_TIMEOUT", "soon")

    with pytest.raises(EnvironmentError):
        get_client(interactive=False)
