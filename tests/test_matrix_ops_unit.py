import math

import numpy as np
import pytest

from linalyze import matrix_ops
from linalyze.errors import (
    InvalidOperation,
    InvalidOperationReason,
    ValidationError,
    ValidationReason,
)
from linalyze.matrix_ops import MatrixStatus
from linalyze.models import AddMultiple, Scale, Swap

M = ((1.0, 2.0, 3.0, 14.0), (2.0, 5.0, 6.0, 30.0), (3.0, 1.0, 1.0, 10.0))


# ── validate ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "matrix,expected",
    [
        ([[1, 2, 3]], MatrixStatus.OK),
        ([[1, 2], [3, 4]], MatrixStatus.OK),
        ([], MatrixStatus.TOO_FEW_ROWS),
        (None, MatrixStatus.TOO_FEW_ROWS),
        ([[1]], MatrixStatus.TOO_FEW_COLUMNS),
        ([[1, 2, 3], [1, 2]], MatrixStatus.NOT_RECTANGULAR),
        ([[1, 2], "ab"], MatrixStatus.NOT_RECTANGULAR),
        ([[1, "2"]], MatrixStatus.NON_NUMERIC_ENTRY),
        ([[1, float("nan")]], MatrixStatus.NON_NUMERIC_ENTRY),
        ([[1, math.inf]], MatrixStatus.NON_NUMERIC_ENTRY),
        ([[True, 2]], MatrixStatus.NON_NUMERIC_ENTRY),
    ],
)
def test_validate_never_raises(matrix, expected) -> None:
    assert matrix_ops.validate(matrix) == expected


def test_validate_accepts_numpy_input() -> None:
    assert matrix_ops.validate(np.array([[1.0, 2.0], [3.0, 4.0]])) == MatrixStatus.OK


def test_ensure_valid_returns_float_tuples() -> None:
    matrix = matrix_ops.ensure_valid([[1, 2], [3, 4]])
    assert matrix == ((1.0, 2.0), (3.0, 4.0))
    assert all(isinstance(v, float) for row in matrix for v in row)


def test_ensure_valid_raises_with_reason() -> None:
    with pytest.raises(ValidationError) as info:
        matrix_ops.ensure_valid([[1, 2, 3], [1, 2]])
    assert info.value.reason is ValidationReason.NOT_RECTANGULAR
    assert "Row 2" in str(info.value)


def test_ensure_supported_limits() -> None:
    with pytest.raises(ValidationError) as info:
        matrix_ops.ensure_supported([[1, 2]] * 7)
    assert info.value.reason is ValidationReason.TOO_MANY_ROWS

    with pytest.raises(ValidationError) as info:
        matrix_ops.ensure_supported([[1, 2, 3, 4, 5]])
    assert info.value.reason is ValidationReason.TOO_MANY_COLUMNS

    assert len(matrix_ops.ensure_supported([[1, 2, 3, 4]] * 6)) == 6


# ── primitives ───────────────────────────────────────────────────────────

def test_clone_is_equal_but_new() -> None:
    copy = matrix_ops.clone(M)
    assert copy == M
    assert copy is not M


def test_swap_rows() -> None:
    result = matrix_ops.swap_rows(M, 0, 2)
    assert result[0] == M[2]
    assert result[2] == M[0]
    assert result[1] == M[1]
    assert matrix_ops.swap_rows(M, 1, 1) == M


def test_swap_is_self_inverse() -> None:
    assert matrix_ops.swap_rows(matrix_ops.swap_rows(M, 0, 1), 0, 1) == M


def test_scale_row() -> None:
    result = matrix_ops.scale_row(M, 1, 0.5)
    assert result[1] == (1.0, 2.5, 3.0, 15.0)
    assert result[0] == M[0]


@pytest.mark.parametrize("k", [3.0, -0.25, 1 / 7, 1e6])
def test_scale_is_invertible(k) -> None:
    back = matrix_ops.scale_row(matrix_ops.scale_row(M, 2, k), 2, 1 / k)
    assert np.allclose(back, M, atol=1e-10)


@pytest.mark.parametrize("k", [0, 0.0, 1e-12, -1e-11])
def test_scale_by_zero_fails_and_leaves_input(k) -> None:
    before = matrix_ops.clone(M)
    with pytest.raises(InvalidOperation) as info:
        matrix_ops.scale_row(M, 0, k)
    assert info.value.reason is InvalidOperationReason.SCALAR_ZERO
    assert M == before


@pytest.mark.parametrize("k", [math.nan, math.inf, -math.inf])
def test_non_finite_scalar_is_rejected(k) -> None:
    for call in (lambda: matrix_ops.scale_row(M, 0, k),
                 lambda: matrix_ops.add_multiple_of_row(M, 1, 0, k)):
        with pytest.raises(InvalidOperation) as info:
            call()
        assert info.value.reason is InvalidOperationReason.NON_FINITE_SCALAR


@pytest.mark.parametrize(
    "call",
    [
        lambda: matrix_ops.scale_row([[1e10, 1, 2], [1, 1, 1]], 0, 1e300),
        lambda: matrix_ops.add_multiple_of_row([[1e10, 1, 2], [1e300, 1, 1]], 0, 1, 1e300),
        lambda: matrix_ops.apply_operation([[1e10, 1, 2], [1, 1, 1]], Scale(0, 1e300)),
    ],
)
def test_overflowing_result_is_rejected(call) -> None:
    with pytest.raises(InvalidOperation) as info:
        call()
    assert info.value.reason is InvalidOperationReason.NON_FINITE_RESULT


def test_add_multiple_of_row() -> None:
    result = matrix_ops.add_multiple_of_row(M, 1, 0, -2)
    assert result[1] == (0.0, 1.0, 0.0, 2.0)
    assert result[0] == M[0]


def test_add_multiple_same_row_is_allowed() -> None:
    doubled = matrix_ops.add_multiple_of_row(M, 0, 0, 1)
    assert doubled[0] == (2.0, 4.0, 6.0, 28.0)
    zeroed = matrix_ops.add_multiple_of_row(M, 0, 0, -1)
    assert matrix_ops.is_zero_row(zeroed[0])


@pytest.mark.parametrize(
    "call",
    [
        lambda: matrix_ops.swap_rows(M, 0, 3),
        lambda: matrix_ops.swap_rows(M, -1, 0),
        lambda: matrix_ops.scale_row(M, 5, 2),
        lambda: matrix_ops.add_multiple_of_row(M, 0, 3, 1),
    ],
)
def test_row_index_out_of_range(call) -> None:
    with pytest.raises(InvalidOperation) as info:
        call()
    assert info.value.reason is InvalidOperationReason.ROW_INDEX_OUT_OF_RANGE


def test_is_zero_row_and_clean_matrix() -> None:
    assert matrix_ops.is_zero_row((0.0, 1e-12, -1e-11))
    assert not matrix_ops.is_zero_row((0.0, 1e-9))
    assert matrix_ops.is_zero_row((0.0, 1e-9), tolerance=1e-8)

    cleaned = matrix_ops.clean_matrix(((1.0, 1e-12), (-1e-15, 2.0)))
    assert cleaned == ((1.0, 0.0), (0.0, 2.0))
    assert math.copysign(1.0, cleaned[1][0]) == 1.0


def test_apply_operation_dispatches_and_cleans() -> None:
    assert matrix_ops.apply_operation(M, Swap(0, 1))[0] == M[1]
    assert matrix_ops.apply_operation(M, Scale(0, 2))[0] == (2.0, 4.0, 6.0, 28.0)
    result = matrix_ops.apply_operation(((0.1, 0.3), (1.0, 3.0)), AddMultiple(0, 1, -0.1))
    assert result[0] == (0.0, 0.0)


def test_apply_operation_rejects_unknown_type() -> None:
    with pytest.raises(TypeError):
        matrix_ops.apply_operation(M, ("swap", 0, 1))


def test_operations_do_not_mutate_list_input() -> None:
    rows = [[1.0, 2.0], [3.0, 4.0]]
    matrix_ops.swap_rows(rows, 0, 1)
    matrix_ops.scale_row(rows, 0, 3)
    matrix_ops.add_multiple_of_row(rows, 1, 0, 5)
    assert rows == [[1.0, 2.0], [3.0, 4.0]]
