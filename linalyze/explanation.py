"""
Step explanation templates.

Turns row operations into plain-language sentences and compact LaTeX
formulas, and matrix rows into equation strings.  Indices are 0-based on
input and shown 1-based (Row 1, R_{1}) on output.  Scalars are shown as a
simplified fraction when one with denominator ≤ 12 matches, otherwise as a
value rounded to four decimals.
"""

from typing import Optional, Sequence

from sympy import Rational, latex

from linalyze.models import (
    TOLERANCE,
    VARIABLE_NAMES,
    AddMultiple,
    RowOperation,
    Scale,
    Swap,
)

_MAX_DENOMINATOR = 12

INITIAL_EXPLANATION = "Initial system"


# ── Number formatting ───────────────────────────────────────────────────

def _closest_fraction(value: float) -> Optional[Rational]:
    for den in range(2, _MAX_DENOMINATOR + 1):
        num = round(value * den)
        if abs(num / den - value) < TOLERANCE:
            return Rational(num, den)
    return None


def _fmt_decimal(value: float) -> str:
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def format_number(value: float) -> str:
    """Format *value* for display: ``3``, ``-2/3`` or ``0.1429``."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    frac = _closest_fraction(value)
    if frac is not None:
        return str(frac)
    return _fmt_decimal(value)


def format_latex_number(value: float) -> str:
    """Like ``format_number`` but renders fractions as ``\\frac{p}{q}``."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    frac = _closest_fraction(value)
    if frac is None:
        return _fmt_decimal(value)
    if frac.q == 1:
        return str(frac.p)
    sign = "-" if frac < 0 else ""
    return sign + latex(abs(frac))


def _latex_signed(value: float) -> str:
    if value >= 0:
        return f"+ {format_latex_number(value)}"
    return f"- {format_latex_number(abs(value))}"


# ── Operations ──────────────────────────────────────────────────────────

def generate_explanation(op: RowOperation) -> str:
    """Plain-language description, e.g. ``Add -2 × Row 1 to Row 2``."""
    if isinstance(op, Swap):
        return f"Swap Row {op.row1 + 1} and Row {op.row2 + 1}"
    if isinstance(op, Scale):
        return f"Multiply Row {op.row + 1} by {format_number(op.scalar)}"
    if isinstance(op, AddMultiple):
        if op.scalar >= 0:
            return (f"Add {format_number(op.scalar)} × Row {op.source_row + 1} "
                    f"to Row {op.target_row + 1}")
        return (f"Subtract {format_number(abs(op.scalar))} × Row {op.source_row + 1} "
                f"from Row {op.target_row + 1}")
    raise TypeError(f"Unknown row operation: {op!r}")


def generate_formula(op: RowOperation) -> str:
    r"""LaTeX notation: ``R_{i} \leftrightarrow R_{j}`` and friends."""
    if isinstance(op, Swap):
        return f"R_{{{op.row1 + 1}}} \\leftrightarrow R_{{{op.row2 + 1}}}"
    if isinstance(op, Scale):
        r = op.row + 1
        return f"R_{{{r}}} \\leftarrow {format_latex_number(op.scalar)} \\cdot R_{{{r}}}"
    if isinstance(op, AddMultiple):
        t, s = op.target_row + 1, op.source_row + 1
        return (f"R_{{{t}}} \\leftarrow R_{{{t}}} "
                f"{_latex_signed(op.scalar)} \\cdot R_{{{s}}}")
    raise TypeError(f"Unknown row operation: {op!r}")


def affected_rows(op: RowOperation) -> tuple[int, ...]:
    """Rows whose contents change (or move) under *op*."""
    if isinstance(op, Swap):
        return (op.row1, op.row2)
    if isinstance(op, Scale):
        return (op.row,)
    if isinstance(op, AddMultiple):
        return (op.target_row,)
    raise TypeError(f"Unknown row operation: {op!r}")


# ── Equations ───────────────────────────────────────────────────────────

def row_to_equation_string(row: Sequence[float],
                           variables: Sequence[str] = VARIABLE_NAMES) -> str:
    """Render ``[1, -2, 0, 4]`` as ``x - 2y = 4``."""
    num_vars = len(row) - 1
    constant = format_number(row[num_vars])
    terms = []
    for i in range(min(num_vars, len(variables))):
        coeff = row[i]
        if abs(coeff) < TOLERANCE:
            continue
        magnitude = abs(coeff)
        body = variables[i] if abs(magnitude - 1) < TOLERANCE else \
            f"{format_number(magnitude)}{variables[i]}"
        if not terms:
            terms.append(body if coeff > 0 else f"-{body}")
        else:
            terms.append(f"{'+' if coeff > 0 else '-'} {body}")
    if not terms:
        return f"0 = {constant}"
    return f"{' '.join(terms)} = {constant}"
