from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal, Union

from matplotlib import colors as mcolors

Point = tuple[float, float]
Anchor = Literal["start", "middle", "end"]
Baseline = Literal["auto", "middle"]

AVERAGE_GLYPH_WIDTH = 8.0  # px per character at the default label size
DARKER_FACTOR = 0.7


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str = "none"
    stroke: str = "none"
    stroke_width: float = 0.0
    opacity: float = 1.0
    rx: float = 0.0
    css_class: str = ""

    def translated(self, dx: float, dy: float) -> "Rect":
        return replace(self, x=self.x + dx, y=self.y + dy)


@dataclass(frozen=True)
class Path:
    """Polyline or polygon; `closed` paths are filled with `fill`."""

    points: tuple[Point, ...]
    closed: bool = False
    fill: str = "none"
    stroke: str = "none"
    stroke_width: float = 0.0
    dash: tuple[float, ...] = ()
    opacity: float = 1.0
    css_class: str = ""

    def translated(self, dx: float, dy: float) -> "Path":
        return replace(self, points=tuple((x + dx, y + dy) for x, y in self.points))

    @property
    def d(self) -> str:
        """SVG path data, e.g. `M0,0 L10,0 Z`."""
        if not self.points:
            return ""
        head, *tail = self.points
        parts = [f"M{_fmt(head[0])},{_fmt(head[1])}"]
        parts.extend(f"L{_fmt(x)},{_fmt(y)}" for x, y in tail)
        if self.closed:
            parts.append("Z")
        return " ".join(parts)


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    font_size: float = 12
    font_family: str = "sans-serif"
    font_weight: str = "normal"
    fill: str = "#333333"
    anchor: Anchor = "start"
    baseline: Baseline = "auto"
    css_class: str = ""

    def translated(self, dx: float, dy: float) -> "Text":
        return replace(self, x=self.x + dx, y=self.y + dy)


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str = "#e0e0e0"
    stroke_width: float = 1.0
    dash: tuple[float, ...] = ()
    css_class: str = ""

    def translated(self, dx: float, dy: float) -> "Line":
        return replace(self, x1=self.x1 + dx, y1=self.y1 + dy, x2=self.x2 + dx, y2=self.y2 + dy)


Primitive = Union[Rect, Path, Text, Line]


@dataclass
class Region:
    """Named group of primitives sharing one translation offset."""

    name: str
    offset: Point = (0.0, 0.0)
    items: list[Primitive] = field(default_factory=list)

    def add(self, primitive: Primitive) -> Primitive:
        self.items.append(primitive)
        return primitive


class DrawSurface:
    """
    Ordered collection of regions acting as the output sink.

    Regions are created on first use and keep their creation order, so the
    stacking of the flattened output is fixed by the order in which the
    composer first touches them.
    """

    def __init__(self, region_names: tuple[str, ...] = ()):
        self._regions: dict[str, Region] = {}
        for name in region_names:
            self.region(name)

    def region(self, name: str) -> Region:
        if name not in self._regions:
            self._regions[name] = Region(name)
        return self._regions[name]

    def move(self, name: str, dx: float, dy: float) -> None:
        self.region(name).offset = (dx, dy)

    def clear(self, *names: str) -> None:
        """Drop drawn content of the named regions, or of every region."""
        targets = names or tuple(self._regions)
        for name in targets:
            if name in self._regions:
                self._regions[name].items.clear()

    @property
    def regions(self) -> list[Region]:
        return list(self._regions.values())

    def flatten(self) -> list[Primitive]:
        """All primitives in drawing order, in absolute coordinates."""
        result: list[Primitive] = []
        for region in self._regions.values():
            dx, dy = region.offset
            result.extend(item.translated(dx, dy) for item in region.items)
        return result

    def __len__(self) -> int:
        return sum(len(region.items) for region in self._regions.values())


def darker(color: str, k: float = 1.0) -> str:
    """Scale RGB channels by 0.7**k, mirroring CSS-style "darker" helpers."""
    try:
        r, g, b = mcolors.to_rgb(color)
    except ValueError:
        return "#333333"
    factor = DARKER_FACTOR**k
    return mcolors.to_hex((r * factor, g * factor, b * factor))


def estimate_text_width(text: str, font_size: float = 12) -> float:
    return len(text) * AVERAGE_GLYPH_WIDTH * font_size / 12


def truncate_label(text: str, max_width: float, min_width: float = 30) -> str:
    """
    Fit `text` into `max_width` px using the average glyph width.

    Returns an empty string when the space is narrower than `min_width`.
    A truncated label always ends in as much of the ellipsis as fits.
    """

    if max_width < min_width:
        return ""
    max_chars = int(max_width // AVERAGE_GLYPH_WIDTH)
    if len(text) <= max_chars:
        return text
    if max_chars <= 3:
        return "..."[:max_chars]
    return text[: max_chars - 3] + "..."


def _fmt(value: float) -> str:
    return f"{value:g}"
