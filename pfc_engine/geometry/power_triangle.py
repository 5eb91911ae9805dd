"""
Power-triangle geometry (before / target) for a rectangular canvas.

Produces a declarative DrawingPlan in canvas pixel coordinates; drawing it is left
to an adapter (see pfc_engine.report.triangle_plot). No graphics API is imported here.

Mapping:
  sx = (W - 2m) / max(P, eps)
  sy = (H - 2m) / max(Q1, Q2, eps)
  X(p) = m + p*sx
  Y(q) = H - m - q*sy          (larger Q draws upward)

Both triangles share sx and sy so their heights are directly comparable.
Negative P/Q are clamped to 0: the diagram shows magnitudes only.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple

EPS = 1e-6
DEFAULT_MARGIN_PX = 20.0

DEFAULT_CSS_WIDTH = 480
DEFAULT_CSS_HEIGHT = 280


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Segment:
    start: Point
    end: Point
    role: str            # "axis_p", "axis_q", "delta_q"
    dashed: bool = False


@dataclass(frozen=True)
class Triangle:
    vertices: Tuple[Point, Point, Point]
    role: str            # "before", "target"


@dataclass(frozen=True)
class Label:
    text: str
    at: Point            # text baseline origin
    role: str


@dataclass(frozen=True)
class DrawingPlan:
    width: float
    height: float
    margin: float
    axes: Tuple[Segment, Segment]
    before: Triangle
    target: Triangle
    delta_q: Segment
    labels: Tuple[Label, ...]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def canvas_extent(css_width: float, css_height: float, device_pixel_ratio: float = 1.0) -> Tuple[int, int]:
    """
    Physical pixel size of the canvas backing store.

    A zero CSS size (element not laid out yet) falls back to 480 x 280.
    """
    if device_pixel_ratio <= 0:
        raise ValueError("device_pixel_ratio must be > 0.")
    w = css_width or DEFAULT_CSS_WIDTH
    h = css_height or DEFAULT_CSS_HEIGHT
    # halves round up
    return math.floor(w * device_pixel_ratio + 0.5), math.floor(h * device_pixel_ratio + 0.5)


def map_power_triangles(
    p_w: float,
    q1_var: float,
    q2_var: float,
    canvas_width: float,
    canvas_height: float,
    system_label: str,
    margin: float = DEFAULT_MARGIN_PX,
) -> DrawingPlan:
    """Map (P, Q1, Q2) onto the canvas. Pure: same inputs give an identical plan."""
    if canvas_width <= 0 or canvas_height <= 0:
        raise ValueError("canvas dimensions must be > 0.")

    p = max(float(p_w), 0.0)
    q1 = max(float(q1_var), 0.0)
    q2 = max(float(q2_var), 0.0)

    W, H, m = float(canvas_width), float(canvas_height), float(margin)
    draw_w, draw_h = W - 2 * m, H - 2 * m

    max_p = max(p, EPS)
    max_q = max(q1, q2, EPS)
    sx, sy = draw_w / max_p, draw_h / max_q

    def X(v: float) -> float:
        return m + v * sx

    def Y(v: float) -> float:
        return H - m - v * sy

    origin = Point(X(0), Y(0))
    p_end = Point(X(p), Y(0))
    top_before = Point(X(p), Y(q1))
    top_target = Point(X(p), Y(q2))

    axes = (
        Segment(Point(m, H - m), Point(m + draw_w, H - m), role="axis_p"),
        Segment(Point(m, H - m), Point(m, H - (m + draw_h)), role="axis_q"),
    )

    mid_y = (Y(q1) + Y(q2)) / 2
    labels = (
        Label("P", Point(X(p) - 10, Y(0) + 14), role="axis_p"),
        Label("Q", Point(X(0) - 12, Y(max_q) + 4), role="axis_q"),
        Label("Before (Q₁)", Point(X(p) - 70, Y(q1) - 6), role="before"),
        Label("Target (Q₂)", Point(X(p) - 86, Y(q2) - 6), role="target"),
        Label("ΔQ", Point(X(p) + 6, mid_y + 4), role="delta_q"),
        Label(system_label, Point(m + 6, H - (m + draw_h) + 14), role="system"),
    )

    return DrawingPlan(
        width=W,
        height=H,
        margin=m,
        axes=axes,
        before=Triangle((origin, p_end, top_before), role="before"),
        target=Triangle((origin, p_end, top_target), role="target"),
        delta_q=Segment(top_before, top_target, role="delta_q", dashed=True),
        labels=labels,
    )
