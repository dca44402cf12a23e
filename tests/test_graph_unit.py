import numpy as np
import pytest
from matplotlib.figure import Figure

from linalyze import graph
from linalyze.timeline import TimelineStateMachine


@pytest.fixture(autouse=True)
def _dark_theme():
    yield
    graph.set_theme("dark")


def _title(fig: Figure) -> str:
    return fig.axes[0].get_title()


def test_set_theme_and_text_figure_and_style_axes() -> None:
    graph.set_theme("light")
    assert graph.C_BG == graph._LIGHT_GRAPH["C_BG"]
    graph.set_theme("dark")
    assert graph.C_BG == graph._DARK_GRAPH["C_BG"]

    fig = Figure(figsize=(4, 2))
    ax = fig.add_subplot(111)
    graph._style_axes(ax, fig)
    assert ax.get_xlabel() == ""

    txt_fig = graph._text_figure("Title", "Message")
    assert isinstance(txt_fig, Figure)
    assert [t.get_text() for t in txt_fig.axes[0].texts] == ["Title", "Message"]


def test_unknown_theme() -> None:
    with pytest.raises(ValueError):
        graph.set_theme("solarized")


def test_satisfies_all() -> None:
    matrix = ((1.0, 1.0, 10.0), (1.0, -1.0, 2.0))
    assert graph._satisfies_all(matrix, (6, 4))
    assert not graph._satisfies_all(matrix, (5, 5))


def test_plane_surface_solves_for_dominant_axis() -> None:
    grid = np.linspace(-1, 1, 3)
    xs, ys, zs = graph._plane_surface((1.0, 0.0, 0.0), 2.0, grid)
    assert np.allclose(xs, 2.0)
    xs, ys, zs = graph._plane_surface((1.0, 1.0, 2.0), 4.0, grid)
    assert np.allclose(xs + ys + 2 * zs, 4.0)


# ── build_figure ────────────────────────────────────────────────────────

def test_build_figure_planes_with_common_point() -> None:
    fig = graph.build_figure([[1, 2, 3, 14], [2, 5, 6, 30], [3, 1, 1, 10]])
    assert isinstance(fig, Figure)
    assert _title(fig) == "Planes meet at (1.75, 2, 2.75)"


def test_build_figure_parallel_planes() -> None:
    fig = graph.build_figure([[1, 1, 1, 1], [1, 1, 1, 2], [0, 0, 1, 0]])
    assert _title(fig) == "No single common point"


def test_build_figure_lines() -> None:
    fig = graph.build_figure([[1, 1, 10], [1, -1, 2]])
    assert _title(fig) == "One solution at (6, 4)"
    labels = [line.get_label() for line in fig.axes[0].get_lines()]
    assert any("R1: x + y = 10" in label for label in labels)


def test_build_figure_vertical_line() -> None:
    fig = graph.build_figure([[1, 0, 2], [0, 1, 3]])
    assert _title(fig) == "One solution at (2, 3)"


def test_build_figure_overdetermined_without_common_point() -> None:
    fig = graph.build_figure([[1, 1, 10], [1, -1, 2], [1, 0, 0]])
    assert _title(fig) == "No single common point"


def test_build_figure_single_variable() -> None:
    fig = graph.build_figure([[2, 4], [1, 1]])
    assert _title(fig) == "Equations in one variable"


def test_build_figure_too_many_variables() -> None:
    fig = graph.build_figure([[1, 2, 3, 4, 5]])
    assert fig.axes[0].texts[0].get_text() == "Not graphable"


def test_build_figure_accepts_snapshot() -> None:
    snapshot = TimelineStateMachine([[1, 1, 10], [1, -1, 2]]).present
    assert _title(graph.build_figure(snapshot)) == "One solution at (6, 4)"


def test_build_figure_light_theme() -> None:
    graph.set_theme("light")
    fig = graph.build_figure([[1, 1, 10], [1, -1, 2]])
    assert fig.axes[0].get_facecolor()[:3] == pytest.approx((247 / 255,) * 3, abs=1e-3)
