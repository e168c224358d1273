"""Agile board workflow engine."""

from board_workflow_engine.backlog import Backlog, EpicGroup, build_backlog
from board_workflow_engine.coordinator import MoveCoordinator, PendingMove
from board_workflow_engine.drag import DragAdapter, DropTarget
from board_workflow_engine.loader import fetch_board, load_board, refresh_board
from board_workflow_engine.materializer import materialize
from board_workflow_engine.optimistic import with_optimistic_update
from board_workflow_engine.state import BoardState, MoveOutcome, MoveResult

__all__ = [
    "Backlog",
    "BoardState",
    "DragAdapter",
    "DropTarget",
    "EpicGroup",
    "MoveCoordinator",
    "MoveOutcome",
    "MoveResult",
    "PendingMove",
    "build_backlog",
    "fetch_board",
    "load_board",
    "materialize",
    "refresh_board",
    "with_optimistic_update",
]
