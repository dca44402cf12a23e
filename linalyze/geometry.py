"""
Geometric projection of augmented-matrix rows.

Given a row [a, b, c | d] representing a·x + b·y + c·z = d:
  - normal vector n = (a, b, c)
  - the point of the plane closest to the origin is P = d / ‖n‖² · n
  - the plane's orientation rotates the reference normal (0, 0, 1) onto n

Two-variable rows [a, b | c] are lines a·x + b·y = c and go through the
line path; the plane path is only valid for exactly three variables.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from linalyze.explanation import row_to_equation_string
from linalyze.models import PLANE_COLORS, LineParams, PlaneParams, Projection

# Threshold for degenerate normals and singular systems.
_EPS = 1e-10

Point3 = tuple[float, float, float]


@dataclass(frozen=True)
class PlaneOrientation:
    """Elevation about the x axis followed by azimuth about the z axis."""
    elevation: float = 0.0
    azimuth: float = 0.0

    @property
    def euler(self) -> Point3:
        """XYZ Euler angles in radians."""
        return (self.elevation, 0.0, self.azimuth)

    @property
    def is_identity(self) -> bool:
        return self.elevation == 0.0 and self.azimuth == 0.0


# ── Row → parameters ────────────────────────────────────────────────────

def row_to_plane_params(row: Sequence[float], color: str) -> PlaneParams:
    if len(row) != 4:
        raise ValueError(
            f"Plane parameters need a 3-variable row [a, b, c, d], got "
            f"{len(row)} entries; use row_to_line_params for 2-variable rows."
        )
    a, b, c, d = (float(v) for v in row)
    return PlaneParams(
        normal=(a, b, c),
        constant=d,
        color=color,
        equation=row_to_equation_string(row),
    )


def row_to_line_params(row: Sequence[float], color: str) -> LineParams:
    if len(row) != 3:
        raise ValueError(
            f"Line parameters need a 2-variable row [a, b, c], got {len(row)} entries."
        )
    a, b, c = (float(v) for v in row)
    return LineParams(
        coefficients=(a, b),
        constant=c,
        color=color,
        equation=row_to_equation_string(row),
    )


def matrix_to_planes(matrix, colors: Sequence[str] = PLANE_COLORS) -> tuple[Projection, ...]:
    """Project every row: lines for 2 variables, planes for 3, nothing otherwise."""
    num_vars = len(matrix[0]) - 1
    if num_vars == 3:
        convert = row_to_plane_params
    elif num_vars == 2:
        convert = row_to_line_params
    else:
        return ()
    return tuple(convert(row, colors[i % len(colors)]) for i, row in enumerate(matrix))


# ── Placement ───────────────────────────────────────────────────────────

def plane_position(normal: Sequence[float], constant: float) -> Point3:
    """Point of the plane n·p = d closest to the origin."""
    n = np.asarray(normal, dtype=float)
    norm_sq = float(np.dot(n, n))
    if norm_sq < _EPS:
        return (0.0, 0.0, 0.0)
    x, y, z = (n * (constant / norm_sq)).tolist()
    return (x, y, z)


def plane_orientation(normal: Sequence[float]) -> PlaneOrientation:
    n = np.asarray(normal, dtype=float)
    length = float(np.linalg.norm(n))
    if length < _EPS:
        return PlaneOrientation()
    nx, ny, nz = (n / length).tolist()
    elevation = math.acos(max(-1.0, min(1.0, nz)))
    azimuth = math.atan2(ny, nx)
    return PlaneOrientation(elevation=elevation, azimuth=azimuth)


# ── Intersections ───────────────────────────────────────────────────────

def _cramer(coeffs: np.ndarray, constants: np.ndarray) -> Optional[tuple[float, ...]]:
    det = float(np.linalg.det(coeffs))
    if abs(det) < _EPS:
        return None
    solution = []
    for col in range(coeffs.shape[1]):
        replaced = coeffs.copy()
        replaced[:, col] = constants
        solution.append(float(np.linalg.det(replaced)) / det)
    return tuple(solution)


def find_intersection_point(planes: Sequence[PlaneParams]) -> Optional[Point3]:
    """Unique common point of the first three planes, or ``None``.

    ``None`` means fewer than three planes were given or their normals are
    linearly dependent (parallel or coincident planes).
    """
    if len(planes) < 3:
        return None
    coeffs = np.array([p.normal for p in planes[:3]], dtype=float)
    constants = np.array([p.constant for p in planes[:3]], dtype=float)
    return _cramer(coeffs, constants)


def find_line_intersection(lines: Sequence[LineParams]) -> Optional[tuple[float, float]]:
    """Unique common point of the first two lines, or ``None``."""
    if len(lines) < 2:
        return None
    coeffs = np.array([l.coefficients for l in lines[:2]], dtype=float)
    constants = np.array([l.constant for l in lines[:2]], dtype=float)
    return _cramer(coeffs, constants)


def find_intersection_line(plane_a: PlaneParams,
                           plane_b: PlaneParams) -> Optional[tuple[Point3, Point3]]:
    """Common line of two planes as ``(point, unit_direction)``.

    The point is the one closest to the origin.  Returns ``None`` for
    parallel or coincident planes.
    """
    n1 = np.asarray(plane_a.normal, dtype=float)
    n2 = np.asarray(plane_b.normal, dtype=float)
    direction = np.cross(n1, n2)
    length_sq = float(np.dot(direction, direction))
    if length_sq < _EPS:
        return None
    # p = (d1 (n2 × u) + d2 (u × n1)) / |u|², with u = n1 × n2
    point = (plane_a.constant * np.cross(n2, direction)
             + plane_b.constant * np.cross(direction, n1)) / length_sq
    unit = direction / math.sqrt(length_sq)
    px, py, pz = point.tolist()
    ux, uy, uz = unit.tolist()
    return (px, py, pz), (ux, uy, uz)


def line_segment(point: Sequence[float], direction: Sequence[float],
                 extent: float = 10.0) -> tuple[Point3, Point3]:
    """Endpoints ``point ± extent · direction`` for drawing a finite segment."""
    p = np.asarray(point, dtype=float)
    u = np.asarray(direction, dtype=float)
    start = (p - extent * u).tolist()
    end = (p + extent * u).tolist()
    return (start[0], start[1], start[2]), (end[0], end[1], end[2])
