"""
Linalyze — Entry point.

Solve a linear system from the command line and print the elimination
trace, e.g.::

    python main.py "x + 2y + 3z = 14, 2x + 5y + 6z = 30, 3x + y + z = 10"
    python main.py --matrix "1,1,2; 2,2,4" --ref
"""

import argparse
import logging
import sys

from linalyze.elimination import solve_system
from linalyze.explanation import format_number
from linalyze.matrix_ops import ensure_supported
from linalyze.models import VARIABLE_NAMES, EliminationMode, SolutionType, SolverConfig
from linalyze.parsing import parse_scalar, parse_system


def _parse_matrix(text: str) -> list:
    rows = [r for r in text.split(";") if r.strip()]
    return [[parse_scalar(v) for v in row.split(",")] for row in rows]


def _format_row(row) -> str:
    cells = [format_number(v).rjust(6) for v in row]
    return "[" + " ".join(cells[:-1]) + " |" + cells[-1] + " ]"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linalyze",
        description="Step-by-step Gauss-Jordan elimination.",
    )
    parser.add_argument("equations", nargs="?",
                        help='comma-separated equations, e.g. "x + y = 10, x - y = 2"')
    parser.add_argument("--matrix", help='augmented matrix rows, e.g. "1,1,10; 1,-1,2"')
    parser.add_argument("--ref", action="store_true", help="stop at row echelon form")
    parser.add_argument("--no-pivoting", action="store_true",
                        help="disable partial pivoting")
    parser.add_argument("--plot", metavar="FILE", help="save a figure of the final system")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.matrix:
            matrix = ensure_supported(_parse_matrix(args.matrix))
            variables = list(VARIABLE_NAMES[:len(matrix[0]) - 1])
        elif args.equations:
            matrix, variables = parse_system(args.equations)
            matrix = ensure_supported(matrix)
        else:
            print("Error: give equations or --matrix.", file=sys.stderr)
            return 2
        config = SolverConfig(
            partial_pivoting=not args.no_pivoting,
            mode=EliminationMode.REF if args.ref else EliminationMode.RREF,
        )
        result = solve_system(matrix, config, variables)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for step in result.steps:
        print(f"Step {step.step_index}: {step.explanation}")
        for row in step.matrix:
            print("   " + _format_row(row))

    if result.solution_type is SolutionType.UNIQUE:
        pairs = zip(variables, result.solution)
        print("Unique solution: " + ", ".join(f"{v} = {format_number(x)}" for v, x in pairs))
    elif result.solution_type is SolutionType.INFINITE:
        print(f"Infinite solutions: {result.parametric}")
    else:
        print("No solution: the system is inconsistent.")

    if args.plot:
        from linalyze.graph import build_figure
        build_figure(result.steps[-1]).savefig(args.plot)
    return 0


if __name__ == "__main__":
    sys.exit(main())
