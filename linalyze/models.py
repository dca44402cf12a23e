"""
Core data structures for Linalyze.

These frozen dataclasses define the contract between the elimination
engine, the timeline and any renderer or persistence layer sitting on top.
An augmented matrix [A|b] is stored as a tuple of float tuples, so nothing
downstream can mutate a snapshot after it has been created.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

# Values with an absolute size below this are treated as zero.
TOLERANCE = 1e-10

MAX_ROWS = 6
MAX_VARIABLES = 3

VARIABLE_NAMES = ("x", "y", "z")

# One colour per equation, reused cyclically past six rows.
PLANE_COLORS = (
    "#6366f1",   # indigo
    "#22c55e",   # green
    "#ef4444",   # red
    "#f59e0b",   # amber
    "#06b6d4",   # cyan
    "#ec4899",   # pink
)

Row = tuple[float, ...]
Matrix = tuple[Row, ...]


# ── Row operations ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class Swap:
    """R_row1 ↔ R_row2"""
    row1: int
    row2: int


@dataclass(frozen=True)
class Scale:
    """R_row ← scalar · R_row"""
    row: int
    scalar: float


@dataclass(frozen=True)
class AddMultiple:
    """R_target ← R_target + scalar · R_source"""
    target_row: int
    source_row: int
    scalar: float


RowOperation = Union[Swap, Scale, AddMultiple]


# ── Enumerations ────────────────────────────────────────────────────────

class EliminationMode(str, Enum):
    REF = "ref"
    RREF = "rref"


class Phase(str, Enum):
    INITIAL = "initial"
    INTERMEDIATE = "intermediate"
    COMPLETE = "complete"


class SolutionType(str, Enum):
    UNIQUE = "unique"
    INFINITE = "infinite"
    NONE = "none"


@dataclass(frozen=True)
class SolverConfig:
    partial_pivoting: bool = True
    mode: EliminationMode = EliminationMode.RREF


# ── Geometry ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PlaneParams:
    """Plane a·x + b·y + c·z = d derived from a row [a, b, c | d]."""
    normal: tuple[float, float, float]
    constant: float
    color: str
    equation: str


@dataclass(frozen=True)
class LineParams:
    """Line a·x + b·y = c derived from a row [a, b | c]."""
    coefficients: tuple[float, float]
    constant: float
    color: str
    equation: str


Projection = Union[PlaneParams, LineParams]


# ── Snapshots and steps ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Snapshot:
    """One frozen point on the undo/redo timeline.

    ``operation`` is ``None`` only for the very first snapshot of a
    timeline.  ``formula`` is the LaTeX notation of the operation and
    ``planes`` holds one projection per row (lines for two-variable
    systems, planes for three-variable systems, empty otherwise).
    """
    matrix: Matrix
    operation: Optional[RowOperation]
    explanation: str
    formula: str
    planes: tuple[Projection, ...] = ()


@dataclass(frozen=True)
class SolverStep:
    step_index: int
    matrix: Matrix
    operation: Optional[RowOperation]
    explanation: str
    formula: str
    phase: Phase
    planes: tuple[Projection, ...] = ()


@dataclass(frozen=True)
class HistoryState:
    """past is oldest → newest, future is nearest → furthest."""
    past: tuple[Snapshot, ...]
    present: Snapshot
    future: tuple[Snapshot, ...] = ()

    @property
    def snapshots(self) -> tuple[Snapshot, ...]:
        return self.past + (self.present,) + self.future


@dataclass(frozen=True)
class SolverResult:
    steps: tuple[SolverStep, ...]
    solution_type: SolutionType
    solution: Optional[tuple[float, ...]]
    parametric: Optional[str]
    rref: Matrix
    runtime_ms: float = field(default=0.0, compare=False)
