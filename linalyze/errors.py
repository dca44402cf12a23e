"""Error kinds raised by the Linalyze core.

Every error derives from ``ValueError`` so callers that already guard
solver calls with ``except ValueError`` keep working.
"""

from enum import Enum


class ValidationReason(str, Enum):
    NOT_RECTANGULAR = "not_rectangular"
    TOO_FEW_ROWS = "too_few_rows"
    TOO_FEW_COLUMNS = "too_few_columns"
    NON_NUMERIC_ENTRY = "non_numeric_entry"
    TOO_MANY_ROWS = "too_many_rows"
    TOO_MANY_COLUMNS = "too_many_columns"


class InvalidOperationReason(str, Enum):
    SCALAR_ZERO = "scalar_zero"
    ROW_INDEX_OUT_OF_RANGE = "row_index_out_of_range"
    NON_FINITE_SCALAR = "non_finite_scalar"
    NON_FINITE_RESULT = "non_finite_result"


class LinalyzeError(ValueError):
    """Base class for all errors raised by the core."""

    def __init__(self, reason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


class ValidationError(LinalyzeError):
    """The augmented matrix is malformed; raised before any computation."""


class InvalidOperation(LinalyzeError):
    """A row operation cannot be applied to the given matrix."""
