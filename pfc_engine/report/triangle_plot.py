"""
Render a DrawingPlan with matplotlib.

The axes are set up in canvas pixels with Y pointing down, so plan coordinates are
used verbatim. Styling is looked up by primitive role.
"""

from __future__ import annotations

import os
from typing import Dict, Tuple

import matplotlib.pyplot as plt

from pfc_engine.geometry.power_triangle import DrawingPlan, Triangle

RGBA = Tuple[float, float, float, float]


def _rgba(r: int, g: int, b: int, a: float = 1.0) -> RGBA:
    return (r / 255.0, g / 255.0, b / 255.0, a)


BACKGROUND = _rgba(2, 6, 23)

STROKE: Dict[str, RGBA] = {
    "axis_p": _rgba(148, 163, 184),
    "axis_q": _rgba(148, 163, 184),
    "before": _rgba(59, 130, 246, 0.9),
    "target": _rgba(34, 211, 238, 0.9),
    "delta_q": _rgba(250, 204, 21, 0.95),
}

FILL: Dict[str, RGBA] = {
    "before": _rgba(59, 130, 246, 0.18),
    "target": _rgba(34, 211, 238, 0.18),
}

LABEL_COLOR: Dict[str, RGBA] = {
    "axis_p": _rgba(203, 213, 225),
    "axis_q": _rgba(203, 213, 225),
    "before": STROKE["before"],
    "target": STROKE["target"],
    "delta_q": STROKE["delta_q"],
    "system": _rgba(148, 163, 184),
}

LABEL_FONT_PX = 12.0


def _draw_triangle(ax, tri: Triangle) -> None:
    xs = [p.x for p in tri.vertices]
    ys = [p.y for p in tri.vertices]
    ax.fill(xs, ys, color=FILL[tri.role], linewidth=0)
    ax.plot(xs + xs[:1], ys + ys[:1], color=STROKE[tri.role], linewidth=2)


def draw_plan(plan: DrawingPlan, dpi: int = 100):
    """Return a matplotlib Figure with the plan drawn on it (caller closes it)."""
    fig = plt.figure(figsize=(plan.width / dpi, plan.height / dpi), dpi=dpi)
    fig.patch.set_facecolor(BACKGROUND)
    ax = fig.add_axes([0.0, 0.0, 1.0, 1.0])
    ax.set_facecolor(BACKGROUND)
    ax.set_xlim(0, plan.width)
    ax.set_ylim(plan.height, 0)
    ax.axis("off")

    for seg in plan.axes:
        ax.plot([seg.start.x, seg.end.x], [seg.start.y, seg.end.y], color=STROKE[seg.role], linewidth=1.25)

    _draw_triangle(ax, plan.before)
    _draw_triangle(ax, plan.target)

    dq = plan.delta_q
    ax.plot(
        [dq.start.x, dq.end.x],
        [dq.start.y, dq.end.y],
        color=STROKE[dq.role],
        linewidth=2,
        linestyle=(0, (5, 4)) if dq.dashed else "-",
    )

    font_pt = LABEL_FONT_PX * 72.0 / dpi
    for lbl in plan.labels:
        ax.text(lbl.at.x, lbl.at.y, lbl.text, color=LABEL_COLOR.get(lbl.role, LABEL_COLOR["system"]),
                fontsize=font_pt, va="baseline", ha="left")
    return fig


def write_triangle_png(plan: DrawingPlan, out_dir: str, filename: str = "power_triangle.png", dpi: int = 100) -> str:
    os.makedirs(out_dir, exist_ok=True)
    fig = draw_plan(plan, dpi=dpi)
    path = os.path.join(out_dir, filename)
    fig.savefig(path, dpi=dpi, facecolor=fig.get_facecolor())
    plt.close(fig)
    return filename
