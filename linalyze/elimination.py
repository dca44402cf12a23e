"""
Step-by-step Gauss-Jordan elimination.

``gauss_jordan_steps`` is a generator that yields a ``SolverStep`` after
every elementary row operation, framed by an ``initial`` step and a
``complete`` step.  Consumers can drain it up front (``solve_system``) or
pull steps one at a time for timed playback; abandoning it half way is
always safe.

Algorithm, column by column with a moving pivot row:
  1. pick the pivot (largest |value| at or below the pivot row when
     partial pivoting is on) and swap it into place
  2. scale the pivot row so the pivot becomes 1
  3. eliminate the column below the pivot (REF) or everywhere else (RREF)

A column without a usable pivot is a free variable and is skipped
without advancing the pivot row.
"""

import logging
import time
from itertools import count
from typing import Iterator, Optional, Sequence

from linalyze.classifier import (
    back_substitute,
    classify,
    extract_solution,
    parametric_description,
)
from linalyze.explanation import generate_explanation, generate_formula
from linalyze.geometry import matrix_to_planes
from linalyze.matrix_ops import apply_operation, ensure_valid
from linalyze.models import (
    TOLERANCE,
    VARIABLE_NAMES,
    AddMultiple,
    EliminationMode,
    Matrix,
    Phase,
    RowOperation,
    Scale,
    SolutionType,
    SolverConfig,
    SolverResult,
    SolverStep,
    Swap,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = SolverConfig()

_FORM_NAMES = {
    EliminationMode.REF: "Row Echelon Form (REF) achieved",
    EliminationMode.RREF: "Reduced Row Echelon Form (RREF) achieved",
}


def _make_step(index: int, matrix: Matrix, op: Optional[RowOperation],
               phase: Phase, explanation: Optional[str] = None) -> SolverStep:
    step = SolverStep(
        step_index=index,
        matrix=matrix,
        operation=op,
        explanation=explanation if explanation is not None else generate_explanation(op),
        formula=generate_formula(op) if op is not None else "",
        phase=phase,
        planes=matrix_to_planes(matrix),
    )
    logger.debug("step %d (%s): %s", index, phase.value, step.explanation)
    return step


def _select_pivot(matrix: Matrix, pivot_row: int, col: int) -> tuple[int, float]:
    """Row with the largest |entry| in *col*; ties go to the earliest row."""
    best_row, best_val = pivot_row, abs(matrix[pivot_row][col])
    for row in range(pivot_row + 1, len(matrix)):
        value = abs(matrix[row][col])
        if value > best_val:
            best_row, best_val = row, value
    return best_row, best_val


def _eliminate(matrix: Matrix, config: SolverConfig) -> Iterator[SolverStep]:
    mode = EliminationMode(config.mode)
    num_rows = len(matrix)
    num_cols = len(matrix[0])
    index = count()

    yield _make_step(next(index), matrix, None, Phase.INITIAL,
                     "Initial augmented matrix")

    pivot_row = 0
    for col in range(num_cols - 1):
        if pivot_row >= num_rows:
            break

        # ── Pivot selection ─────────────────────────────────────────
        if config.partial_pivoting:
            best_row, best_val = _select_pivot(matrix, pivot_row, col)
            if best_val < TOLERANCE:
                continue
            if best_row != pivot_row:
                op = Swap(pivot_row, best_row)
                matrix = apply_operation(matrix, op)
                yield _make_step(next(index), matrix, op, Phase.INTERMEDIATE)
        elif abs(matrix[pivot_row][col]) < TOLERANCE:
            continue

        # ── Normalise the pivot to 1 ────────────────────────────────
        pivot = matrix[pivot_row][col]
        if abs(pivot) > TOLERANCE and abs(pivot - 1) > TOLERANCE:
            op = Scale(pivot_row, 1 / pivot)
            matrix = apply_operation(matrix, op)
            yield _make_step(next(index), matrix, op, Phase.INTERMEDIATE)

        # ── Eliminate the rest of the column ────────────────────────
        if mode is EliminationMode.RREF:
            targets = [r for r in range(num_rows) if r != pivot_row]
        else:
            targets = list(range(pivot_row + 1, num_rows))
        for row in targets:
            entry = matrix[row][col]
            if abs(entry) < TOLERANCE:
                continue
            op = AddMultiple(row, pivot_row, -entry)
            matrix = apply_operation(matrix, op)
            yield _make_step(next(index), matrix, op, Phase.INTERMEDIATE)

        pivot_row += 1

    yield _make_step(next(index), matrix, None, Phase.COMPLETE, _FORM_NAMES[mode])


def gauss_jordan_steps(matrix, config: Optional[SolverConfig] = None) -> Iterator[SolverStep]:
    """Return a fresh step iterator for *matrix*.

    The matrix is validated eagerly, so a malformed input raises
    ``ValidationError`` here rather than on the first ``next()``.
    Each call is independent: the same input and configuration always
    yield the same steps.
    """
    return _eliminate(ensure_valid(matrix), config or DEFAULT_CONFIG)


def solve_system(matrix, config: Optional[SolverConfig] = None,
                 variables: Sequence[str] = VARIABLE_NAMES) -> SolverResult:
    """Run the elimination to completion and classify the result.

    *variables* only names the unknowns in the parametric description.
    """
    config = config or DEFAULT_CONFIG
    t_start = time.perf_counter()
    steps = tuple(gauss_jordan_steps(matrix, config))
    rref = steps[-1].matrix
    solution_type = classify(rref)
    solution = None
    if solution_type is SolutionType.UNIQUE:
        if EliminationMode(config.mode) is EliminationMode.RREF:
            solution = extract_solution(rref)
        else:
            solution = back_substitute(rref)
    parametric = parametric_description(rref, variables)
    t_end = time.perf_counter()

    logger.debug("solved %dx%d system in %d steps: %s", len(rref), len(rref[0]),
                 len(steps), solution_type.value)
    return SolverResult(
        steps=steps,
        solution_type=solution_type,
        solution=solution,
        parametric=parametric,
        rref=rref,
        runtime_ms=round((t_end - t_start) * 1000, 3),
    )
