"""Optimistic move coordinator.

Every change to the board goes through ``MoveCoordinator.apply_move``:

1. the subject is looked up on the board (missing subjects are ignored),
2. status changes are checked against the workflow transition table,
3. the change is applied to the board immediately,
4. the backend request runs in the background,
5. a failed request restores the board to the snapshot taken for that move.

Results are published to the ``BoardState`` listeners as ``MoveResult`` events.
"""
from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Callable
from typing import Any

from board_workflow_interface.board import Column, MoveIntent, MoveKind, find_subject
from board_workflow_interface.client import BoardBackend, BoardWorkflowError, InvalidTransitionError
from board_workflow_interface.items import ItemKind, ItemUpdate, Story, Task
from board_workflow_interface.status import is_transition_allowed
from board_workflow_engine.materializer import sort_by_priority
from board_workflow_engine.optimistic import with_optimistic_update
from board_workflow_engine.state import BoardState, MoveOutcome, MoveResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pending moves
# ---------------------------------------------------------------------------

class PendingMove:
    """Handle returned by ``apply_move``.

    ``columns`` is the board to render right away. Await ``settled()`` for the
    final result once the backend has answered.
    """

    def __init__(self, intent: MoveIntent, columns: list[Column], *, result: MoveResult | None = None, task: asyncio.Task | None = None) -> None:
        self.intent = intent
        self.columns = columns
        self._result = result
        self._task = task

    @property
    def outcome(self) -> MoveOutcome:
        """Return the outcome known so far (APPLIED while the request is in flight)."""
        if self._task is None:
            return self._result.outcome
        if self._task.done():
            return self._task.result().outcome
        return MoveOutcome.APPLIED

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def settled(self) -> MoveResult:
        if self._task is None:
            return self._result
        return await self._task


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------

class MoveCoordinator:
    """
    Args:
        state:          The board state this coordinator owns writes to
        backend:        System of record; its blocking calls run in a worker thread
        reject_pending: When True, a move for a subject that still has a
                        request in flight is rejected instead of stacked
    """

    def __init__(self, state: BoardState, backend: BoardBackend, *, reject_pending: bool = False) -> None:
        self._state = state
        self._backend = backend
        self._reject_pending = reject_pending
        self._in_flight: Counter[str] = Counter()
        #the event loop only holds weak references to tasks
        self._commits: set[asyncio.Task] = set()

    @property
    def state(self) -> BoardState:
        return self._state

    def is_pending(self, subject_id: str) -> bool:
        return self._in_flight[subject_id] > 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def apply_move(self, intent: MoveIntent) -> PendingMove:
        """Apply ``intent`` to the board and start the backend request.

        Returns immediately; the returned ``columns`` already show the move.
        Invalid, stale and no-op intents settle at once without any request.
        Requires a running event loop for moves that reach the backend.
        """
        located = find_subject(self._state.columns, intent.subject_id, intent.subject_kind)
        if located is None:
            logger.debug("Ignoring %s for %s: not on the board", intent.kind.value, intent.subject_id)
            return self._settle_now(intent, MoveOutcome.IGNORED)
        _, story, task = located
        subject = task if task is not None else story

        refusal = self._check(intent, subject, story)
        if refusal is not None:
            return refusal

        if self._reject_pending and self.is_pending(intent.subject_id):
            return self._settle_now(
                intent,
                MoveOutcome.REJECTED,
                f"'{subject.title}' is still being saved; try again in a moment.",
            )

        call, action = self._backend_call(intent)
        self._in_flight[intent.subject_id] += 1

        async def commit() -> MoveResult:
            try:
                await asyncio.to_thread(call)
            finally:
                self._release(intent.subject_id)
            logger.info("Committed %s for %s", intent.kind.value, intent.subject_id)
            return self._publish(intent, MoveOutcome.COMMITTED)

        def compensate(exc: Exception) -> MoveResult:
            message = _failure_message(action, exc)
            logger.warning("Rolled back %s for %s: %s", intent.kind.value, intent.subject_id, message)
            return self._publish(intent, MoveOutcome.ROLLED_BACK, message, exc)

        update = with_optimistic_update(
            self._state,
            lambda columns: _mutate(columns, intent),
            commit,
            compensate,
        )
        self._commits.add(update.task)
        update.task.add_done_callback(self._commits.discard)
        self._publish(intent, MoveOutcome.APPLIED)
        return PendingMove(intent, update.columns, task=update.task)

    async def move(self, intent: MoveIntent) -> MoveResult:
        """Apply ``intent`` and wait for the backend to settle it."""
        return await self.apply_move(intent).settled()

    async def wait_idle(self) -> None:
        """Wait until every commit started so far has settled."""
        while self._commits:
            await asyncio.gather(*list(self._commits))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check(self, intent: MoveIntent, subject: Story | Task, story: Story) -> PendingMove | None:
        """Return a settled move if ``intent`` must not reach the backend."""
        if intent.kind is MoveKind.STATUS:
            if intent.to_status is None:
                raise ValueError("status move needs to_status")
            if subject.status == intent.to_status:
                return self._settle_now(intent, MoveOutcome.IGNORED)
            if not is_transition_allowed(subject.status, intent.to_status):
                error = InvalidTransitionError(subject.status, intent.to_status)
                return self._settle_now(
                    intent,
                    MoveOutcome.REJECTED,
                    f"Invalid transition for '{subject.title}': {error}",
                    error,
                )
        elif intent.kind is MoveKind.REPARENT:
            if intent.subject_kind is not ItemKind.TASK or not intent.to_story_id:
                raise ValueError("reparent moves a task and needs to_story_id")
            if story.id == intent.to_story_id:
                return self._settle_now(intent, MoveOutcome.IGNORED)
            if find_subject(self._state.columns, intent.to_story_id, ItemKind.STORY) is None:
                logger.debug("Ignoring reparent of %s: story %s is not on the board", intent.subject_id, intent.to_story_id)
                return self._settle_now(intent, MoveOutcome.IGNORED)
        elif intent.kind is MoveKind.REASSIGN:
            if (subject.assignee_id or "") == (intent.to_assignee_id or ""):
                return self._settle_now(intent, MoveOutcome.IGNORED)
        elif intent.kind is MoveKind.PRIORITY:
            if intent.to_priority is None:
                raise ValueError("priority move needs to_priority")
            if subject.priority == intent.to_priority:
                return self._settle_now(intent, MoveOutcome.IGNORED)
        return None

    def _backend_call(self, intent: MoveIntent) -> tuple[Callable[[], Any], str]:
        """Return the blocking backend call for ``intent`` and a label for error messages."""
        backend = self._backend
        is_story = intent.subject_kind is ItemKind.STORY
        noun = "story" if is_story else "task"
        subject_id = intent.subject_id

        if intent.kind is MoveKind.STATUS:
            if is_story:
                return (lambda: backend.update_story_status(subject_id, intent.to_status)), "update story status"
            return (lambda: backend.update_task_status(subject_id, intent.to_status)), "update task status"
        if intent.kind is MoveKind.REPARENT:
            return (lambda: backend.update_task_parent(subject_id, intent.to_story_id)), "move task"

        if intent.kind is MoveKind.REASSIGN:
            update = ItemUpdate(assignee_id=intent.to_assignee_id or "")
            action = f"assign {noun}"
        else:
            update = ItemUpdate(priority=intent.to_priority)
            action = f"update {noun} priority"
        if is_story:
            return (lambda: backend.update_story(subject_id, update)), action
        return (lambda: backend.update_task(subject_id, update)), action

    def _release(self, subject_id: str) -> None:
        self._in_flight[subject_id] -= 1
        if self._in_flight[subject_id] <= 0:
            del self._in_flight[subject_id]

    def _publish(self, intent: MoveIntent, outcome: MoveOutcome, message: str | None = None, error: Exception | None = None) -> MoveResult:
        result = MoveResult(intent, outcome, self._state.columns, message, error)
        self._state.publish(result)
        return result

    def _settle_now(self, intent: MoveIntent, outcome: MoveOutcome, message: str | None = None, error: Exception | None = None) -> PendingMove:
        result = self._publish(intent, outcome, message, error)
        return PendingMove(intent, self._state.columns, result=result)


# ---------------------------------------------------------------------------
# Board mutations - applied to a working copy of the columns
# ---------------------------------------------------------------------------

def _mutate(columns: list[Column], intent: MoveIntent) -> None:
    column, story, task = find_subject(columns, intent.subject_id, intent.subject_kind)
    subject = task if task is not None else story

    if intent.kind is MoveKind.STATUS:
        subject.status = intent.to_status
        if task is None:
            column.stories.remove(story)
            for target in columns:
                if target.status == intent.to_status:
                    target.stories.append(story)
                    target.stories[:] = sort_by_priority(target.stories)
                    break

    elif intent.kind is MoveKind.REPARENT:
        _, new_parent, _ = find_subject(columns, intent.to_story_id, ItemKind.STORY)
        story.tasks.remove(task)
        task.story_id = new_parent.id
        new_parent.tasks.append(task)

    elif intent.kind is MoveKind.REASSIGN:
        subject.assignee_id = intent.to_assignee_id or None

    elif intent.kind is MoveKind.PRIORITY:
        subject.priority = intent.to_priority
        if task is None:
            column.stories[:] = sort_by_priority(column.stories)


def _failure_message(action: str, exc: Exception) -> str:
    """Prefer the server's own message; fall back to a generic one."""
    detail = str(exc) if isinstance(exc, BoardWorkflowError) else ""
    if detail:
        return f"Failed to {action}: {detail}"
    return f"Failed to {action}. The change was not saved and has been undone."
