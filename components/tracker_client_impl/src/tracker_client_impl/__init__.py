"""REST implementation of the board backend."""

from tracker_client_impl.tracker_impl import ItemNotFoundError, TrackerApiError, TrackerClient, get_client

__all__ = ["ItemNotFoundError", "TrackerApiError", "TrackerClient", "get_client"]
