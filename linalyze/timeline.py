"""
Branching undo/redo timeline over matrix snapshots.

A ``TimelineStateMachine`` owns one ``HistoryState``:

    past (oldest → newest) · present · future (nearest → furthest)

Applying an operation pushes the present onto ``past`` and clears
``future`` (branch cut).  Undo, redo and jump only move snapshots between
the three parts; no snapshot is ever modified.  Instances share nothing,
so each solving session gets its own.  The class does no locking: callers
with several writers must serialise access themselves.
"""

import logging
from typing import Iterable, Optional

from linalyze.explanation import (
    INITIAL_EXPLANATION,
    generate_explanation,
    generate_formula,
)
from linalyze.geometry import matrix_to_planes
from linalyze.matrix_ops import apply_operation, ensure_supported
from linalyze.models import (
    AddMultiple,
    HistoryState,
    Matrix,
    RowOperation,
    Scale,
    Snapshot,
    SolverStep,
    Swap,
)

logger = logging.getLogger(__name__)


def create_snapshot(matrix: Matrix, op: Optional[RowOperation]) -> Snapshot:
    return Snapshot(
        matrix=matrix,
        operation=op,
        explanation=generate_explanation(op) if op is not None else INITIAL_EXPLANATION,
        formula=generate_formula(op) if op is not None else "",
        planes=matrix_to_planes(matrix),
    )


class TimelineStateMachine:
    """Undo/redo/jump-able history of snapshots for one solving session."""

    def __init__(self, matrix):
        self._state = self._initial_state(matrix)

    @staticmethod
    def _initial_state(matrix) -> HistoryState:
        return HistoryState(past=(), present=create_snapshot(ensure_supported(matrix), None))

    # ── Read-only views ─────────────────────────────────────────────────

    @property
    def state(self) -> HistoryState:
        return self._state

    @property
    def present(self) -> Snapshot:
        return self._state.present

    @property
    def snapshots(self) -> tuple[Snapshot, ...]:
        return self._state.snapshots

    @property
    def can_undo(self) -> bool:
        return len(self._state.past) > 0

    @property
    def can_redo(self) -> bool:
        return len(self._state.future) > 0

    @property
    def current_step(self) -> int:
        return len(self._state.past)

    @property
    def total_steps(self) -> int:
        return len(self._state.past) + 1 + len(self._state.future)

    @property
    def initial_matrix(self) -> Matrix:
        return self.snapshots[0].matrix

    @property
    def operations(self) -> tuple[RowOperation, ...]:
        """Operations along the whole timeline, redo branch included."""
        return tuple(s.operation for s in self.snapshots[1:])

    # ── Transitions ─────────────────────────────────────────────────────

    def apply_operation(self, op: RowOperation) -> Snapshot:
        """Apply *op* to the present matrix and cut the redo branch.

        Raises ``InvalidOperation`` before touching any state.
        """
        matrix = apply_operation(self._state.present.matrix, op)
        snapshot = create_snapshot(matrix, op)
        self._state = HistoryState(
            past=self._state.past + (self._state.present,),
            present=snapshot,
            future=(),
        )
        logger.debug("applied %s (step %d)", snapshot.explanation, self.current_step)
        return snapshot

    def apply_step(self, step: SolverStep) -> Optional[Snapshot]:
        """Feed an elimination step in; framing steps carry no operation."""
        if step.operation is None:
            return None
        return self.apply_operation(step.operation)

    def undo(self) -> bool:
        if not self._state.past:
            return False
        self._state = HistoryState(
            past=self._state.past[:-1],
            present=self._state.past[-1],
            future=(self._state.present,) + self._state.future,
        )
        logger.debug("undo -> step %d", self.current_step)
        return True

    def redo(self) -> bool:
        if not self._state.future:
            return False
        self._state = HistoryState(
            past=self._state.past + (self._state.present,),
            present=self._state.future[0],
            future=self._state.future[1:],
        )
        logger.debug("redo -> step %d", self.current_step)
        return True

    def jump_to(self, index: int) -> bool:
        """Move to snapshot *index* of the whole timeline.

        Out-of-range indices are ignored and return ``False``.
        """
        snapshots = self._state.snapshots
        if not 0 <= index < len(snapshots):
            return False
        self._state = HistoryState(
            past=snapshots[:index],
            present=snapshots[index],
            future=snapshots[index + 1:],
        )
        logger.debug("jump -> step %d", index)
        return True

    def reset(self, matrix) -> None:
        self._state = self._initial_state(matrix)
        logger.debug("reset to %dx%d matrix", len(self.present.matrix),
                     len(self.present.matrix[0]))


# ── Serialisation ───────────────────────────────────────────────────────

def operation_to_dict(op: RowOperation) -> dict:
    if isinstance(op, Swap):
        return {"type": "swap", "row1": op.row1, "row2": op.row2}
    if isinstance(op, Scale):
        return {"type": "scale", "row": op.row, "scalar": op.scalar}
    if isinstance(op, AddMultiple):
        return {"type": "add_multiple", "target_row": op.target_row,
                "source_row": op.source_row, "scalar": op.scalar}
    raise TypeError(f"Unknown row operation: {op!r}")


def operation_from_dict(data: dict) -> RowOperation:
    kind = data.get("type")
    try:
        if kind == "swap":
            return Swap(int(data["row1"]), int(data["row2"]))
        if kind == "scale":
            return Scale(int(data["row"]), float(data["scalar"]))
        if kind == "add_multiple":
            return AddMultiple(int(data["target_row"]), int(data["source_row"]),
                               float(data["scalar"]))
    except KeyError as e:
        raise ValueError(f"Row operation '{kind}' is missing field {e}") from e
    raise ValueError(f"Unknown row operation type: {kind!r}")


def session_to_dict(timeline: TimelineStateMachine) -> dict:
    """Everything needed to rebuild *timeline*: initial matrix, operations, cursor."""
    return {
        "initial_matrix": [list(row) for row in timeline.initial_matrix],
        "operations": [operation_to_dict(op) for op in timeline.operations],
        "cursor": timeline.current_step,
    }


def replay(initial, operations: Iterable[RowOperation],
           cursor: Optional[int] = None) -> TimelineStateMachine:
    """Rebuild a timeline by re-applying *operations* in order.

    With *cursor* the result is then moved to that snapshot, which restores
    the redo branch as well.
    """
    timeline = TimelineStateMachine(initial)
    for op in operations:
        timeline.apply_operation(op)
    if cursor is not None:
        timeline.jump_to(cursor)
    return timeline


def session_from_dict(data: dict) -> TimelineStateMachine:
    ops = [operation_from_dict(item) for item in data.get("operations", [])]
    return replay(data["initial_matrix"], ops, data.get("cursor"))
