"""Linalyze — step-by-step Gauss-Jordan elimination with an undo/redo timeline."""

from linalyze.classifier import classify, extract_solution, parametric_description
from linalyze.elimination import gauss_jordan_steps, solve_system
from linalyze.errors import InvalidOperation, LinalyzeError, ValidationError
from linalyze.models import (
    AddMultiple,
    EliminationMode,
    Phase,
    Scale,
    SolutionType,
    SolverConfig,
    Swap,
)
from linalyze.parsing import parse_scalar, parse_system
from linalyze.playback import AutoSolver
from linalyze.timeline import TimelineStateMachine, replay

__all__ = [
    "AddMultiple",
    "AutoSolver",
    "EliminationMode",
    "InvalidOperation",
    "LinalyzeError",
    "Phase",
    "Scale",
    "SolutionType",
    "SolverConfig",
    "Swap",
    "TimelineStateMachine",
    "ValidationError",
    "classify",
    "extract_solution",
    "gauss_jordan_steps",
    "parametric_description",
    "parse_scalar",
    "parse_system",
    "replay",
    "solve_system",
]
