from __future__ import annotations

from pathlib import Path as FilePath
from typing import Iterable

import matplotlib

matplotlib.use("Agg")  # ensure headless, deterministic output
import matplotlib.pyplot as plt
from matplotlib.lines import Line2D
from matplotlib.patches import FancyBboxPatch, Polygon, Rectangle

from .primitives import DrawSurface, Line, Path, Primitive, Rect, Text

DPI = 100
FALLBACK_FONT = "DejaVu Sans"

_HA = {"start": "left", "middle": "center", "end": "right"}
_VA = {"auto": "baseline", "middle": "center"}


def save_chart(surface: DrawSurface, out_path: str, width: int, height: int) -> None:
    """
    Write the surface's primitives to `out_path`.

    The format follows the file suffix (svg, png, pdf); coordinates are pixels
    with the origin at the top-left, like the primitives themselves.
    """

    width = max(1, int(width))
    height = max(1, int(height))
    fig = plt.figure(figsize=(width / DPI, height / DPI), dpi=DPI)
    ax = fig.add_axes((0, 0, 1, 1))
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.axis("off")

    try:
        draw_primitives(ax, surface.flatten())
        FilePath(out_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(out_path, dpi=DPI)
    finally:
        plt.close(fig)


def draw_primitives(ax: plt.Axes, primitives: Iterable[Primitive]) -> None:
    for zorder, item in enumerate(primitives, start=1):
        if isinstance(item, Rect):
            _draw_rect(ax, item, zorder)
        elif isinstance(item, Path):
            _draw_path(ax, item, zorder)
        elif isinstance(item, Text):
            _draw_text(ax, item, zorder)
        elif isinstance(item, Line):
            ax.add_line(
                Line2D(
                    [item.x1, item.x2],
                    [item.y1, item.y2],
                    color=item.stroke,
                    linewidth=item.stroke_width,
                    linestyle=_linestyle(item.dash),
                    zorder=zorder,
                )
            )
        else:
            raise TypeError(f"Unsupported primitive type: {type(item)}")


def _draw_rect(ax: plt.Axes, rect: Rect, zorder: int) -> None:
    common = dict(
        facecolor=_color(rect.fill),
        edgecolor=_color(rect.stroke),
        linewidth=rect.stroke_width,
        alpha=rect.opacity,
        zorder=zorder,
    )
    if rect.rx > 0 and rect.width > 0 and rect.height > 0:
        rounding = min(rect.rx, rect.width / 2, rect.height / 2)
        patch = FancyBboxPatch(
            (rect.x, rect.y),
            rect.width,
            rect.height,
            boxstyle=f"round,pad=0,rounding_size={rounding}",
            **common,
        )
    else:
        patch = Rectangle((rect.x, rect.y), rect.width, rect.height, **common)
    ax.add_patch(patch)


def _draw_path(ax: plt.Axes, path: Path, zorder: int) -> None:
    if len(path.points) < 2:
        return
    if path.closed:
        ax.add_patch(
            Polygon(
                list(path.points),
                closed=True,
                facecolor=_color(path.fill),
                edgecolor=_color(path.stroke),
                linewidth=path.stroke_width,
                linestyle=_linestyle(path.dash),
                alpha=path.opacity,
                zorder=zorder,
            )
        )
        return
    xs, ys = zip(*path.points)
    ax.add_line(
        Line2D(
            xs,
            ys,
            color=_color(path.stroke),
            linewidth=path.stroke_width,
            linestyle=_linestyle(path.dash),
            alpha=path.opacity,
            zorder=zorder,
        )
    )


def _draw_text(ax: plt.Axes, text: Text, zorder: int) -> None:
    weight = int(text.font_weight) if text.font_weight.isdigit() else text.font_weight
    ax.text(
        text.x,
        text.y,
        text.text,
        ha=_HA[text.anchor],
        va=_VA[text.baseline],
        fontsize=text.font_size * 72 / DPI,
        fontfamily=[text.font_family, FALLBACK_FONT],
        fontweight=weight,
        color=_color(text.fill),
        zorder=zorder,
    )


def _color(value: str) -> str:
    return "none" if not value or value == "none" else value


def _linestyle(dash: tuple[float, ...]):
    if not dash:
        return "solid"
    return (0, tuple(dash))
