"""
Graph builder for Linalyze.

Produces a themed matplotlib Figure for one snapshot (or bare matrix):
  - 1 variable  : each equation a·x = c as a vertical line
  - 2 variables : each equation a·x + b·y = c as a line in the plane
  - 3 variables : each equation as a translucent plane in 3-D
The common point is marked when every equation passes through it.
"""

import numpy as np
from matplotlib.figure import Figure

from linalyze.geometry import find_intersection_point, find_line_intersection, matrix_to_planes
from linalyze.models import PLANE_COLORS

# ── palette ────────────────────────────────────────────────────────────────
_DARK_GRAPH = {
    "C_BG":    "#0f0f0f",
    "C_AX":    "#181818",
    "C_GRID":  "#252525",
    "C_TICK":  "#666666",
    "C_SPINE": "#333333",
    "C_DOT":   "#fbbf24",   # intersection point
    "C_TEXT":  "#cccccc",
}
_LIGHT_GRAPH = {
    "C_BG":    "#ffffff",
    "C_AX":    "#f7f7f7",
    "C_GRID":  "#e0e0e0",
    "C_TICK":  "#555555",
    "C_SPINE": "#bbbbbb",
    "C_DOT":   "#d97706",
    "C_TEXT":  "#222222",
}

C_BG = _DARK_GRAPH["C_BG"]
C_AX = _DARK_GRAPH["C_AX"]
C_GRID = _DARK_GRAPH["C_GRID"]
C_TICK = _DARK_GRAPH["C_TICK"]
C_SPINE = _DARK_GRAPH["C_SPINE"]
C_DOT = _DARK_GRAPH["C_DOT"]
C_TEXT = _DARK_GRAPH["C_TEXT"]

_EPS = 1e-10
_FIT_TOL = 1e-6
_EXTENT = 6.0


def set_theme(name: str) -> None:
    """Switch the module palette to ``"dark"`` or ``"light"``."""
    if name not in ("dark", "light"):
        raise ValueError(f"Unknown theme: {name!r}")
    palette = _DARK_GRAPH if name == "dark" else _LIGHT_GRAPH
    globals().update(palette)


def _style_axes(ax, fig):
    fig.patch.set_facecolor(C_BG)
    ax.set_facecolor(C_AX)
    ax.tick_params(colors=C_TICK, labelsize=9)
    ax.xaxis.label.set_color(C_TEXT)
    ax.yaxis.label.set_color(C_TEXT)
    ax.title.set_color(C_TEXT)
    for spine in ax.spines.values():
        spine.set_edgecolor(C_SPINE)
    ax.grid(True, color=C_GRID, linewidth=0.8, linestyle="--", alpha=0.7)
    ax.axhline(0, color=C_SPINE, linewidth=0.8)
    ax.axvline(0, color=C_SPINE, linewidth=0.8)


def _legend(ax):
    ax.legend(fontsize=8, facecolor=C_AX, edgecolor=C_SPINE, labelcolor=C_TEXT)


def _text_figure(title: str, message: str) -> Figure:
    fig = Figure(figsize=(7, 3.4), dpi=100)
    ax = fig.add_subplot(111)
    fig.patch.set_facecolor(C_BG)
    ax.set_facecolor(C_AX)
    ax.set_axis_off()
    ax.text(0.5, 0.6, title, ha="center", va="center", color=C_TEXT, fontsize=12)
    ax.text(0.5, 0.4, message, ha="center", va="center", color=C_TICK, fontsize=9)
    return fig


def _satisfies_all(matrix, point) -> bool:
    p = np.asarray(point, dtype=float)
    for row in matrix:
        if abs(float(np.dot(row[:-1], p)) - row[-1]) > _FIT_TOL:
            return False
    return True


def build_figure(snapshot) -> Figure:
    """Figure for a ``Snapshot``/``SolverStep`` or a plain augmented matrix."""
    matrix = getattr(snapshot, "matrix", snapshot)
    num_vars = len(matrix[0]) - 1
    if num_vars == 1:
        return _build_single_var(matrix)
    if num_vars == 2:
        return _build_lines(matrix)
    if num_vars == 3:
        return _build_planes(matrix)
    return _text_figure("Not graphable",
                        f"{num_vars} variables cannot be drawn in 2-D or 3-D.")


# ── One variable ────────────────────────────────────────────────────────────

def _build_single_var(matrix) -> Figure:
    fig = Figure(figsize=(7, 3.4), dpi=100)
    ax = fig.add_subplot(111)
    _style_axes(ax, fig)
    drawn = 0
    for i, (a, c) in enumerate(matrix):
        if abs(a) < _EPS:
            continue
        color = PLANE_COLORS[i % len(PLANE_COLORS)]
        ax.axvline(c / a, color=color, linewidth=2, label=f"R{i + 1}: x = {c / a:g}")
        drawn += 1
    ax.set_xlim(-_EXTENT, _EXTENT)
    ax.set_xlabel("x", color=C_TEXT)
    ax.set_title("Equations in one variable", color=C_TEXT, fontsize=10)
    if drawn:
        _legend(ax)
    fig.tight_layout(pad=1.2)
    return fig


# ── Two variables ───────────────────────────────────────────────────────────

def _build_lines(matrix) -> Figure:
    lines = matrix_to_planes(matrix)
    point = find_line_intersection(lines)
    if point is not None and not _satisfies_all(matrix, point):
        point = None

    cx, cy = point if point is not None else (0.0, 0.0)
    x_range = np.linspace(cx - _EXTENT, cx + _EXTENT, 400)

    fig = Figure(figsize=(7, 3.8), dpi=100)
    ax = fig.add_subplot(111)
    _style_axes(ax, fig)

    for i, line in enumerate(lines):
        a, b = line.coefficients
        label = f"R{i + 1}: {line.equation}"
        if abs(b) >= _EPS:
            ax.plot(x_range, (line.constant - a * x_range) / b,
                    color=line.color, linewidth=2, label=label)
        elif abs(a) >= _EPS:
            ax.axvline(line.constant / a, color=line.color, linewidth=2, label=label)

    if point is not None:
        ax.scatter([point[0]], [point[1]], color=C_DOT, s=90, zorder=5,
                   label=f"Intersection: ({point[0]:g}, {point[1]:g})")
        ax.set_title(f"One solution at ({point[0]:g}, {point[1]:g})",
                     color=C_TEXT, fontsize=9)
    else:
        ax.set_title("No single common point", color=C_TEXT, fontsize=9)

    ax.set_xlim(cx - _EXTENT, cx + _EXTENT)
    ax.set_ylim(cy - _EXTENT, cy + _EXTENT)
    ax.set_xlabel("x", color=C_TEXT)
    ax.set_ylabel("y", color=C_TEXT)
    _legend(ax)
    fig.tight_layout(pad=1.2)
    return fig


# ── Three variables ─────────────────────────────────────────────────────────

def _plane_surface(normal, constant, grid):
    """Mesh for n·p = d, solved for the coordinate with the largest |n|."""
    n = np.asarray(normal, dtype=float)
    axis = int(np.argmax(np.abs(n)))
    u, v = np.meshgrid(grid, grid)
    others = [k for k in range(3) if k != axis]
    w = (constant - n[others[0]] * u - n[others[1]] * v) / n[axis]
    coords = [None, None, None]
    coords[others[0]], coords[others[1]], coords[axis] = u, v, w
    return coords


def _build_planes(matrix) -> Figure:
    planes = matrix_to_planes(matrix)
    point = find_intersection_point(planes)
    if point is not None and not _satisfies_all(matrix, point):
        point = None

    fig = Figure(figsize=(7, 5), dpi=100)
    fig.patch.set_facecolor(C_BG)
    ax = fig.add_subplot(111, projection="3d")
    ax.set_facecolor(C_AX)

    grid = np.linspace(-_EXTENT, _EXTENT, 12)
    for plane in planes:
        if np.dot(plane.normal, plane.normal) < _EPS:
            continue
        xs, ys, zs = _plane_surface(plane.normal, plane.constant, grid)
        zs = np.clip(zs, -3 * _EXTENT, 3 * _EXTENT)
        ax.plot_surface(xs, ys, zs, color=plane.color, alpha=0.35, linewidth=0)

    if point is not None:
        ax.scatter([point[0]], [point[1]], [point[2]], color=C_DOT, s=60)
        ax.set_title(f"Planes meet at ({point[0]:g}, {point[1]:g}, {point[2]:g})",
                     color=C_TEXT, fontsize=9)
    else:
        ax.set_title("No single common point", color=C_TEXT, fontsize=9)

    for axis in (ax.xaxis, ax.yaxis, ax.zaxis):
        axis.label.set_color(C_TEXT)
        axis.set_tick_params(colors=C_TICK, labelsize=8)
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_zlabel("z")
    return fig
