"""
Elementary row operations on augmented matrices.

Every function takes a matrix and returns a new one; the input is never
touched.  Arithmetic goes through NumPy, results come back as tuples of
plain floats so they can be compared, hashed and stored inside frozen
snapshots.

Row indices are 0-based throughout.
"""

import math
import numbers
from enum import Enum
from typing import Optional

import numpy as np

from linalyze.errors import (
    InvalidOperation,
    InvalidOperationReason,
    ValidationError,
    ValidationReason,
)
from linalyze.models import (
    MAX_ROWS,
    MAX_VARIABLES,
    TOLERANCE,
    AddMultiple,
    Matrix,
    RowOperation,
    Scale,
    Swap,
)


class MatrixStatus(str, Enum):
    OK = "ok"
    NOT_RECTANGULAR = "not_rectangular"
    TOO_FEW_ROWS = "too_few_rows"
    TOO_FEW_COLUMNS = "too_few_columns"
    NON_NUMERIC_ENTRY = "non_numeric_entry"


# ── Internal helpers ────────────────────────────────────────────────────

def _is_sequence(value) -> bool:
    return isinstance(value, (list, tuple, np.ndarray))


def _is_finite_real(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def _to_array(matrix) -> np.ndarray:
    return np.array(matrix, dtype=float)


def _freeze(arr: np.ndarray) -> Matrix:
    return tuple(tuple(row) for row in arr.tolist())


def _check_scalar(k) -> None:
    if not _is_finite_real(k):
        raise InvalidOperation(
            InvalidOperationReason.NON_FINITE_SCALAR,
            f"Scalar must be a finite number, got {k!r}.",
        )


def _freeze_finite(arr: np.ndarray) -> Matrix:
    if not np.isfinite(arr).all():
        raise InvalidOperation(
            InvalidOperationReason.NON_FINITE_RESULT,
            "Row operation overflows: the result would not be a finite number.",
        )
    return _freeze(arr)


def _check_row(matrix, index) -> None:
    if (isinstance(index, bool) or not isinstance(index, numbers.Integral)
            or not 0 <= index < len(matrix)):
        raise InvalidOperation(
            InvalidOperationReason.ROW_INDEX_OUT_OF_RANGE,
            f"Row index {index!r} is out of range for a matrix with "
            f"{len(matrix)} row(s).",
        )


def _diagnose(matrix) -> tuple[MatrixStatus, str]:
    """Return the first structural problem found in *matrix* and a message."""
    if not _is_sequence(matrix) or len(matrix) == 0:
        return MatrixStatus.TOO_FEW_ROWS, "Matrix must have at least one row."
    if not _is_sequence(matrix[0]):
        return MatrixStatus.NOT_RECTANGULAR, "Row 1 is not a sequence of numbers."
    cols = len(matrix[0])
    if cols < 2:
        return (MatrixStatus.TOO_FEW_COLUMNS,
                "Matrix must have at least 2 columns (1 variable + 1 constant).")
    for i, row in enumerate(matrix):
        if not _is_sequence(row) or len(row) != cols:
            got = len(row) if _is_sequence(row) else "no"
            return (MatrixStatus.NOT_RECTANGULAR,
                    f"Row {i + 1} has {got} columns but expected {cols}.")
    for i, row in enumerate(matrix):
        for j, value in enumerate(row):
            if not _is_finite_real(value):
                return (MatrixStatus.NON_NUMERIC_ENTRY,
                        f"Invalid value at row {i + 1}, column {j + 1}: {value!r}.")
    return MatrixStatus.OK, ""


# ── Validation ──────────────────────────────────────────────────────────

def validate(matrix) -> MatrixStatus:
    """Classify the structure of *matrix*.  Never raises."""
    status, _ = _diagnose(matrix)
    return status


def ensure_valid(matrix) -> Matrix:
    """Return *matrix* as an immutable float matrix or raise ``ValidationError``."""
    status, message = _diagnose(matrix)
    if status is not MatrixStatus.OK:
        raise ValidationError(ValidationReason(status.value), message)
    return tuple(tuple(float(v) for v in row) for row in matrix)


as_matrix = ensure_valid


def ensure_supported(matrix) -> Matrix:
    """Like ``ensure_valid`` but also enforce the 6 × (3 + 1) size limit."""
    result = ensure_valid(matrix)
    if len(result) > MAX_ROWS:
        raise ValidationError(
            ValidationReason.TOO_MANY_ROWS,
            f"At most {MAX_ROWS} equations are supported, got {len(result)}.",
        )
    if num_variables(result) > MAX_VARIABLES:
        raise ValidationError(
            ValidationReason.TOO_MANY_COLUMNS,
            f"At most {MAX_VARIABLES} variables are supported, "
            f"got {num_variables(result)}.",
        )
    return result


def num_variables(matrix) -> int:
    """An augmented matrix with C columns describes C - 1 variables."""
    return len(matrix[0]) - 1


# ── Primitives ──────────────────────────────────────────────────────────

def clone(matrix) -> Matrix:
    return tuple(tuple(float(v) for v in row) for row in matrix)


def swap_rows(matrix, i: int, j: int) -> Matrix:
    """R_i ↔ R_j"""
    _check_row(matrix, i)
    _check_row(matrix, j)
    result = list(clone(matrix))
    result[i], result[j] = result[j], result[i]
    return tuple(result)


def scale_row(matrix, i: int, k: float) -> Matrix:
    """R_i ← k · R_i

    Raises ``InvalidOperation(SCALAR_ZERO)`` when *k* is zero or within
    tolerance of zero, and ``NON_FINITE_SCALAR`` / ``NON_FINITE_RESULT``
    when *k* or the scaled row is not finite.
    """
    _check_scalar(k)
    if abs(k) < TOLERANCE:
        raise InvalidOperation(
            InvalidOperationReason.SCALAR_ZERO,
            "Scalar cannot be zero for row scaling.",
        )
    _check_row(matrix, i)
    arr = _to_array(matrix)
    with np.errstate(over="ignore", invalid="ignore"):
        arr[i] = arr[i] * k
    return _freeze_finite(arr)


def add_multiple_of_row(matrix, target: int, source: int, k: float) -> Matrix:
    """R_target ← R_target + k · R_source

    ``target == source`` is allowed here (it scales the row by 1 + k);
    whether to forbid it is up to the caller.
    """
    _check_scalar(k)
    _check_row(matrix, target)
    _check_row(matrix, source)
    arr = _to_array(matrix)
    with np.errstate(over="ignore", invalid="ignore"):
        arr[target] = arr[target] + k * arr[source]
    return _freeze_finite(arr)


def is_zero_row(row, tolerance: float = TOLERANCE) -> bool:
    return all(abs(v) < tolerance for v in row)


def clean_matrix(matrix, tolerance: float = TOLERANCE) -> Matrix:
    """Snap entries smaller than *tolerance* to exactly 0.0."""
    arr = _to_array(matrix)
    arr[np.abs(arr) < tolerance] = 0.0
    return _freeze(arr)


def apply_operation(matrix, op: RowOperation,
                    tolerance: Optional[float] = TOLERANCE) -> Matrix:
    """Apply *op* to *matrix* and clean the result.

    Pass ``tolerance=None`` to skip the cleaning pass.
    """
    if isinstance(op, Swap):
        result = swap_rows(matrix, op.row1, op.row2)
    elif isinstance(op, Scale):
        result = scale_row(matrix, op.row, op.scalar)
    elif isinstance(op, AddMultiple):
        result = add_multiple_of_row(matrix, op.target_row, op.source_row, op.scalar)
    else:
        raise TypeError(f"Unknown row operation: {op!r}")
    if tolerance is None:
        return result
    return clean_matrix(result, tolerance)
