"""Snapshot, mutate, commit, and restore on failure."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from board_workflow_interface.board import Column
from board_workflow_engine.state import BoardState, snapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class OptimisticUpdate(Generic[T]):
    """An applied local change whose backend commit may still be running.

    ``columns`` is the optimistic view, available before the commit settles.
    ``task`` resolves to the value returned by ``commit`` on success or by
    ``compensate`` after a rollback; it never raises for commit failures.
    """

    columns: list[Column]
    task: asyncio.Task[T]


def with_optimistic_update(
    state: BoardState,
    mutate: Callable[[list[Column]], None],
    commit: Callable[[], Awaitable[T]],
    compensate: Callable[[Exception], T],
) -> OptimisticUpdate[T]:
    """Apply ``mutate`` to a copy of the board now and commit it in the background.

    The snapshot is taken immediately before the mutation and belongs to this
    update alone: on failure the state goes back to exactly that snapshot, even
    if other updates were applied in between.

    Must be called from a running event loop. The local mutation runs
    synchronously, so updates reach the board in call order even though their
    commits may settle in any order.
    """
    loop = asyncio.get_running_loop()

    saved = snapshot(state.columns)
    working = snapshot(state.columns)
    mutate(working)
    state.replace_columns(working)

    async def run() -> T:
        try:
            return await commit()
        except Exception as exc:
            logger.warning("Commit failed, restoring board snapshot: %s", exc)
            state.replace_columns(saved)
            return compensate(exc)

    return OptimisticUpdate(working, loop.create_task(run()))
