"""
Text input for Linalyze.

Turns a comma/semicolon separated system such as
``"x + 2y + 3z = 14, 2x + 5y + 6z = 30, 3x + y + z = 10"`` into an
augmented matrix, and a toolbar scalar such as ``"-2/3"`` into a float.
Parsing goes through SymPy so implicit multiplication (``2y``), ``^``
exponents and exact fractions behave the way they read.
"""

import math
import re

from sympy import expand, symbols
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    rationalize,
    standard_transformations,
)

from linalyze.models import Matrix

TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor,
    rationalize,  # "0.1" → Rational(1, 10) so coefficients stay exact until the end
)

# Letters recognised as unknowns.
_ALLOWED_VARS = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")

_RESERVED = {
    'sin', 'cos', 'tan', 'log', 'ln', 'exp', 'sqrt',
    'pi', 'PI', 'Pi', 'abs', 'E',
}


def _validate_characters(text: str) -> None:
    """Reject input containing characters outside the allowed set."""
    allowed = set("abcdefghijklmnopqrstuvwxyz"
                  "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
                  "0123456789"
                  " \t+-*/^=().,;")
    bad = {ch for ch in text if ch not in allowed}
    if bad:
        raise ValueError(
            f"Invalid character(s): {' '.join(sorted(bad))}\n"
            f"Only letters, numbers, and math symbols "
            f"(+ - * / ^ = ( ) . , ;) are allowed."
        )


def _detect_variables(text: str) -> list:
    """Return the sorted single-letter variables found in *text*.

    Multi-letter tokens that are not reserved function names count as
    implicit products of their letters (``xy`` → x·y); the linearity check
    rejects those later.
    """
    candidates = set()
    for tok in re.findall(r'[A-Za-z]+', text):
        if tok in _RESERVED:
            continue
        candidates.update(ch for ch in tok if ch in _ALLOWED_VARS)
    if not candidates:
        raise ValueError("No variable found. Include a letter like x, y, or z.")
    return sorted(candidates)


def _expand_implicit_vars(s: str, var_names: set) -> str:
    """Spell out ``as`` as ``a*s`` so Python keywords never reach the parser."""
    def _repl(m):
        tok = m.group(0)
        if all(ch in var_names for ch in tok):
            return '*'.join(tok)
        return tok
    return re.sub(r'[A-Za-z]+', _repl, s)


def _parse_side(expr_str: str, var_symbols: list):
    s = expr_str.strip().replace('^', '**')
    if not s:
        raise ValueError("Both sides of each equation must have expressions.")
    local = {sym.name: sym for sym in var_symbols}
    s = _expand_implicit_vars(s, set(local))
    try:
        return parse_expr(s, local_dict=local, transformations=TRANSFORMATIONS)
    except Exception as e:
        raise ValueError(f"Could not parse expression: '{expr_str}'. Error: {e}")


def _equation_row(eq_str: str, var_symbols: list) -> tuple[float, ...]:
    parts = eq_str.split('=')
    if len(parts) != 2:
        if len(parts) == 1:
            raise ValueError(f"Each equation must contain '='. Problem: {eq_str}")
        raise ValueError(f"Each equation must have exactly one '='. Problem: {eq_str}")
    lhs = _parse_side(parts[0], var_symbols)
    rhs = _parse_side(parts[1], var_symbols)

    combined = expand(lhs - rhs)
    poly = combined.as_poly(*var_symbols)
    if poly is None or poly.total_degree() > 1:
        raise ValueError(f"Equation is not linear: {eq_str.strip()}")

    coeffs = [float(combined.coeff(sym)) for sym in var_symbols]
    constant = float(-combined.subs({sym: 0 for sym in var_symbols}))
    return tuple(coeffs) + (constant,)


def parse_system(text: str) -> tuple[Matrix, list]:
    """Parse linear equations into ``(augmented_matrix, variable_names)``.

    Columns follow the sorted variable names; a variable missing from an
    equation gets a zero coefficient.
    """
    _validate_characters(text)
    equations = [eq.strip() for eq in re.split(r'\s*[;,]\s*', text) if eq.strip()]
    if not equations:
        raise ValueError("Enter at least one equation.")
    var_names = _detect_variables(' '.join(equations))
    var_symbols = list(symbols(var_names))
    matrix = tuple(_equation_row(eq, var_symbols) for eq in equations)
    return matrix, var_names


def parse_scalar(text: str) -> float:
    """Parse ``"3"``, ``"-2/3"`` or ``"0.25"`` into a float."""
    s = str(text).strip()
    if not s:
        raise ValueError("Scalar cannot be empty.")
    _validate_characters(s)
    try:
        value = parse_expr(s.replace('^', '**'), transformations=TRANSFORMATIONS)
    except Exception as e:
        raise ValueError(f"Could not parse scalar: '{text}'. Error: {e}")
    if getattr(value, "free_symbols", None) or not value.is_number:
        raise ValueError(f"Scalar must be a number: '{text}'")
    try:
        result = float(value)
    except (TypeError, ValueError):
        result = math.nan
    if not math.isfinite(result):
        raise ValueError(f"Scalar must be a finite number: '{text}'")
    return result
