"""Board view state and the move-result events published to the UI."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from board_workflow_interface.board import Column, MoveIntent

logger = logging.getLogger(__name__)


class MoveOutcome(str, Enum):
    APPLIED = "applied"          # optimistic state shown, request in flight
    COMMITTED = "committed"      # backend accepted the change
    ROLLED_BACK = "rolled_back"  # backend failed, snapshot restored
    REJECTED = "rejected"        # refused before any request was sent
    IGNORED = "ignored"          # stale or no-op intent


@dataclass
class MoveResult:
    """Event describing what happened to one move.

    ``message`` is meant for display and is set for every outcome a user
    should see (rejections and rollbacks). ``error`` is the exception behind
    a rejection or rollback.
    """

    intent: MoveIntent | None
    outcome: MoveOutcome
    columns: list[Column] = field(default_factory=list)
    message: str | None = None
    error: Exception | None = None

    @property
    def is_error(self) -> bool:
        return self.outcome in (MoveOutcome.REJECTED, MoveOutcome.ROLLED_BACK)


Listener = Callable[[MoveResult], None]


def snapshot(columns: list[Column]) -> list[Column]:
    """Deep copy the columns so later edits cannot leak into the copy."""
    return copy.deepcopy(columns)


class BoardState:
    """The one mutable column list of a board.

    Only the move coordinator and the board loader write to it; everything
    else reads ``columns`` or subscribes to move results.
    """

    def __init__(self, columns: list[Column] | None = None, *, container: str | None = None) -> None:
        self._columns: list[Column] = list(columns or [])
        self._listeners: list[Listener] = []
        self.container = container

    @property
    def columns(self) -> list[Column]:
        return self._columns

    def replace_columns(self, columns: list[Column]) -> None:
        self._columns = columns

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for move results and return an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, result: MoveResult) -> None:
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception:
                #a broken listener must not stop the others or the move itself
                logger.exception("Move result listener %r failed", listener)
