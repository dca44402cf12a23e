"""
Solution classification for reduced augmented matrices.

- none     : some row reads [0 0 … 0 | c] with c ≠ 0 (inconsistent)
- unique   : the number of non-zero rows reaches the number of variables
- infinite : consistent, but fewer non-zero rows than variables

The checks are only meaningful once the matrix has been reduced (REF or
RREF); on a raw system the non-zero row count overstates the rank.
"""

from typing import Optional, Sequence

from linalyze.explanation import format_number
from linalyze.matrix_ops import is_zero_row
from linalyze.models import TOLERANCE, VARIABLE_NAMES, SolutionType


def _is_inconsistent_row(row, num_vars: int) -> bool:
    return is_zero_row(row[:num_vars]) and abs(row[num_vars]) > TOLERANCE


def classify(matrix) -> SolutionType:
    num_vars = len(matrix[0]) - 1

    if any(_is_inconsistent_row(row, num_vars) for row in matrix):
        return SolutionType.NONE

    rank = sum(1 for row in matrix if not is_zero_row(row))
    return SolutionType.UNIQUE if rank >= num_vars else SolutionType.INFINITE


def extract_solution(matrix) -> tuple[float, ...]:
    """Read variable i's value from the constant column of row i.

    Assumes a unique solution in RREF with pivots on the diagonal.  A
    matrix whose pivots are not on the diagonal (for instance after a
    manual swap) is read row by row all the same.
    """
    last = len(matrix[0]) - 1
    return tuple(matrix[i][last] for i in range(min(last, len(matrix))))


def back_substitute(matrix) -> tuple[float, ...]:
    """Solve a uniquely solvable matrix in row echelon form, bottom row first."""
    num_vars = len(matrix[0]) - 1
    values = [0.0] * num_vars
    for r, p in reversed(pivot_columns(matrix)):
        row = matrix[r]
        known = sum(row[c] * values[c] for c in range(p + 1, num_vars))
        values[p] = (row[num_vars] - known) / row[p]
    return tuple(values)


def pivot_columns(matrix) -> tuple[tuple[int, int], ...]:
    """``(row, column)`` of the leading non-zero coefficient of each row."""
    num_vars = len(matrix[0]) - 1
    pivots = []
    for r, row in enumerate(matrix):
        for c in range(num_vars):
            if abs(row[c]) >= TOLERANCE:
                pivots.append((r, c))
                break
    return tuple(pivots)


def free_variables(matrix) -> tuple[int, ...]:
    """Indices of the variable columns that hold no pivot."""
    num_vars = len(matrix[0]) - 1
    used = {c for _, c in pivot_columns(matrix)}
    return tuple(c for c in range(num_vars) if c not in used)


def _term(coeff: float, name: str) -> str:
    magnitude = format_number(abs(coeff))
    if magnitude == "1":
        return name
    if "/" in magnitude:
        return f"({magnitude}){name}"
    return f"{magnitude}{name}"


def parametric_description(matrix,
                           variables: Sequence[str] = VARIABLE_NAMES) -> Optional[str]:
    """Describe an infinite solution set, e.g. ``x = 2 - z; y = 1 + 3z; z free``.

    Returns ``None`` unless ``classify(matrix)`` is ``INFINITE``.
    """
    if classify(matrix) is not SolutionType.INFINITE:
        return None
    num_vars = len(matrix[0]) - 1
    names = list(variables[:num_vars])
    names += [f"x{i + 1}" for i in range(len(names), num_vars)]

    parts = []
    for r, p in pivot_columns(matrix):
        row = matrix[r]
        lead = row[p]
        constant = row[num_vars] / lead
        pieces = []
        if abs(constant) >= TOLERANCE:
            pieces.append(format_number(constant))
        for c in range(num_vars):
            if c == p or abs(row[c]) < TOLERANCE:
                continue
            coeff = -row[c] / lead
            term = _term(coeff, names[c])
            if not pieces:
                pieces.append(term if coeff > 0 else f"-{term}")
            else:
                pieces.append(f"{'+' if coeff > 0 else '-'} {term}")
        parts.append(f"{names[p]} = {' '.join(pieces) if pieces else '0'}")
    for c in free_variables(matrix):
        parts.append(f"{names[c]} free")
    return "; ".join(parts)
