"""
Configuration
-------------
The client supports two credential modes:

1. When get_client(interactive = True)
    User is prompted for any of the values below that are missing from the environment.
2. When get_client(interactive = False) - Default
        TRACKER_BASE_URL    https://tracker.example.com/api
        TRACKER_PROJECT_ID  id of the project whose board is served
        TRACKER_API_TOKEN   bearer token (optional)
        TRACKER_TIMEOUT     request timeout in seconds (optional, default 10)

Dependencies:
    uv add requests

"""
#to avoid having to consider forward declarations, the below line must be first line in the file
from __future__ import annotations

import logging
import os
from getpass import getpass
from typing import Any

import requests

from board_workflow_interface.client import (
    BoardBackend,
    BoardWorkflowError,
    ItemNotFoundError as BaseItemNotFoundError,
)
from board_workflow_interface.items import BACKLOG_CONTAINER, Epic, ItemUpdate, Sprint, Story, Task
from board_workflow_interface.status import Status
from tracker_client_impl.tracker_items import build_epic, build_sprint, build_story, build_task

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

#ItemUpdate field name -> tracker JSON field name
_UPDATE_FIELDS: dict[str, str] = {
    "title":       "title",
    "status":      "status",
    "priority":    "priority",
    "assignee_id": "assigneeId",
    "story_id":    "storyId",
}


class TrackerApiError(BoardWorkflowError):
    """Raised when the tracker API returns an unexpected response.

    ``server_message`` holds the ``message`` field of the error body when the
    server sent one.
    """

    def __init__(self, message: str, *, status_code: int | None = None, server_message: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message


class ItemNotFoundError(BaseItemNotFoundError):
    """Raised when a requested tracker item does not exist."""


def _update_body(update: ItemUpdate) -> dict[str, Any]:
    body: dict[str, Any] = {}
    for name, value in update.set_fields().items():
        #an empty assignee clears the assignment
        if name == "assignee_id" and value == "":
            value = None
        body[_UPDATE_FIELDS[name]] = getattr(value, "value", value)
    return body


# ---------------------------------------------------------------------------
# Client implementation
# ---------------------------------------------------------------------------

class TrackerClient(BoardBackend):
    """
    Args:
        base_url:   Tracker API root URL (e.g. 'https://tracker.example.com/api')
        project_id: Project whose stories, tasks and epics are served
        api_token:  Bearer token, or None for an open API
        timeout:    Seconds to wait for each request
    """

    def __init__(self, base_url: str, project_id: str, api_token: str | None = None, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._base_url = base_url.rstrip("/")
        self._project_id = project_id
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json", "Content-Type": "application/json"})
        if api_token:
            self._session.headers["Authorization"] = f"Bearer {api_token}"

    @property
    def project_id(self) -> str:
        return self._project_id

    # ------------------------------------------------------------------
    # Internal HTTP helpers
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _get(self, path: str, params: dict | None = None) -> Any:
        response = self._session.get(self._url(path), params=params, timeout=self._timeout)
        return self._unwrap(response)

    def _patch(self, path: str, body: dict) -> Any:
        response = self._session.patch(self._url(path), json=body, timeout=self._timeout)
        return self._unwrap(response)

    def _put(self, path: str, body: dict) -> Any:
        response = self._session.put(self._url(path), json=body, timeout=self._timeout)
        return self._unwrap(response)

    @classmethod
    def _unwrap(cls, response: requests.Response) -> Any:
        cls._raise_for_status(response)
        if response.status_code == 204 or not response.content:
            return {}
        data = response.json()
        # The API wraps most payloads as {"success": true, "data": ...}
        if isinstance(data, dict) and "data" in data:
            return data["data"]
        return data

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        if response.status_code == 404:
            raise ItemNotFoundError(f"Resource not found: {response.url}")
        if not response.ok:
            try:
                detail = response.json()
            except ValueError:
                detail = {}
            server_message = None
            if isinstance(detail, dict):
                server_message = detail.get("message") or detail.get("error") or None
            message = server_message or f"API error: {response.status_code} {response.reason}"
            raise TrackerApiError(message, status_code=response.status_code, server_message=server_message)

    def _story_path(self, story_id: str) -> str:
        return f"/projects/{self._project_id}/stories/{story_id}"

    # ------------------------------------------------------------------
    # BoardBackend contract - reads
    # ------------------------------------------------------------------

    def fetch_stories_for_container(self, container: str) -> list[Story]:
        """Fetch the stories of a sprint, or of the backlog when ``container`` is "backlog"."""
        data = self._get(f"/projects/{self._project_id}/stories", params={"sprintId": container})
        if not isinstance(data, list):
            return []
        stories = [build_story(s) for s in data if isinstance(s, dict)]
        if container == BACKLOG_CONTAINER:
            return [s for s in stories if s.sprint_id is None]
        return stories

    def fetch_project_stories(self) -> list[Story]:
        """Fetch every story of the project regardless of sprint."""
        data = self._get(f"/projects/{self._project_id}/stories")
        if not isinstance(data, list):
            return []
        return [build_story(s) for s in data if isinstance(s, dict)]

    def fetch_tasks_for_story(self, story_id: str) -> list[Task]:
        data = self._get("/tasks", params={"projectId": self._project_id, "storyId": story_id})
        if not isinstance(data, list):
            return []
        return [build_task(t) for t in data if isinstance(t, dict)]

    def fetch_epics(self) -> list[Epic]:
        data = self._get(f"/projects/{self._project_id}/epics")
        if not isinstance(data, list):
            return []
        return [build_epic(e) for e in data if isinstance(e, dict)]

    def fetch_sprints(self) -> list[Sprint]:
        """Fetch every sprint of the project."""
        data = self._get(f"/projects/{self._project_id}/sprints")
        if not isinstance(data, list):
            return []
        return [build_sprint(s) for s in data if isinstance(s, dict)]

    # ------------------------------------------------------------------
    # BoardBackend contract - mutations
    # ------------------------------------------------------------------

    def update_story_status(self, story_id: str, status: Status) -> Story:
        """PATCH the story status. The server enforces its own transition rules."""
        data = self._patch(self._story_path(story_id), {"status": status.value})
        logger.debug("Story %s status set to %s", story_id, status.value)
        return build_story(data)

    def update_task_status(self, task_id: str, status: Status) -> Task:
        data = self._patch(f"/tasks/{task_id}/status", {"status": status.value})
        return build_task(data)

    def update_task_parent(self, task_id: str, story_id: str) -> Task:
        data = self._put(f"/tasks/{task_id}", {"storyId": story_id})
        logger.debug("Task %s moved under story %s", task_id, story_id)
        return build_task(data)

    def update_story(self, story_id: str, update: ItemUpdate) -> Story:
        """
        Notes on usage:
            Fields left as "None" on the update are not sent and remain unchanged.
            An empty assignee_id clears the assignee.
        """
        body = _update_body(update)
        if not body:
            raise TrackerApiError(f"Nothing to update for story {story_id}")
        return build_story(self._patch(self._story_path(story_id), body))

    def update_task(self, task_id: str, update: ItemUpdate) -> Task:
        body = _update_body(update)
        if not body:
            raise TrackerApiError(f"Nothing to update for task {task_id}")
        return build_task(self._put(f"/tasks/{task_id}", body))


# ---------------------------------------------------------------------------
# Get client
# ---------------------------------------------------------------------------

def get_client(*, interactive: bool = False) -> TrackerClient:
    """Return a configured TrackerClient.

    Reads settings from environment variables. If "interactive = True" and
    a required variable is missing, the user will be prompted.

    Environment variables:
        TRACKER_BASE_URL:    Base URL of the tracker API.
        TRACKER_PROJECT_ID:  Project to serve.
        TRACKER_API_TOKEN:   Bearer token (optional).
        TRACKER_TIMEOUT:     Request timeout in seconds (optional).
    """
    base_url = os.environ.get("TRACKER_BASE_URL", "")
    project_id = os.environ.get("TRACKER_PROJECT_ID", "")
    api_token = os.environ.get("TRACKER_API_TOKEN", "")

    if interactive:
        if not base_url:
            base_url = input("Tracker API URL (e.g. https://tracker.example.com/api): ").strip()
        if not project_id:
            project_id = input("Project id: ").strip()
        if not api_token:
            api_token = getpass("API token (leave empty for none): ")
    else:
        #collects the missing fields and raises an error alerting to the missing values
        missing = [name for name, val in [
            ("TRACKER_BASE_URL", base_url),
            ("TRACKER_PROJECT_ID", project_id),
        ] if not val]
        if missing:
            raise EnvironmentError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Set them or call get_client(interactive=True)."
            )

    raw_timeout = os.environ.get("TRACKER_TIMEOUT", "")
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
    except ValueError as exc:
        raise EnvironmentError(f"TRACKER_TIMEOUT must be a number of seconds, got {raw_timeout!r}") from exc

    return TrackerClient(base_url, project_id, api_token or None, timeout=timeout)
