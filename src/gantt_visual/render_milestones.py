from __future__ import annotations

import logging
import math
from typing import Iterable

from .models import Milestone
from .primitives import Path, Rect, Region, Text, estimate_text_width
from .scales import BandScale, TimeScale
from .settings import VisualSettings

logger = logging.getLogger(__name__)

IMPORTANT_KEYWORDS = ("completion", "delivery", "release", "launch", "final", "go-live")

DIAMOND_SIZE = 12
STAR_OUTER_RADIUS = 10
STAR_INNER_RADIUS = STAR_OUTER_RADIUS * 0.4
STAR_POINTS = 5

DIAMOND_FILL, DIAMOND_STROKE = "#FFD700", "#DAA520"
STAR_FILL, STAR_STROKE = "#FF6347", "#CD5C5C"

LABEL_OFFSET = (18, -8)  # label group position relative to the glyph centre
LABEL_FONT_SIZE = 11


def is_important(milestone: Milestone) -> bool:
    name = milestone.name.lower()
    return any(keyword in name for keyword in IMPORTANT_KEYWORDS) or milestone.progress == 100


def diamond_points(cx: float, cy: float, size: float = DIAMOND_SIZE) -> tuple[tuple[float, float], ...]:
    return ((cx, cy - size), (cx + size, cy), (cx, cy + size), (cx - size, cy))


def star_points(
    cx: float,
    cy: float,
    outer: float = STAR_OUTER_RADIUS,
    inner: float = STAR_INNER_RADIUS,
    points: int = STAR_POINTS,
) -> tuple[tuple[float, float], ...]:
    """Vertices of a star with its first tip pointing straight up."""
    vertices = []
    for i in range(points * 2):
        angle = i * math.pi / points - math.pi / 2
        radius = outer if i % 2 == 0 else inner
        vertices.append((cx + math.cos(angle) * radius, cy + math.sin(angle) * radius))
    return tuple(vertices)


class MilestoneRenderer:
    """Draws a diamond or a star per milestone, plus a boxed label."""

    def __init__(self, region: Region, settings: VisualSettings, time_scale: TimeScale, row_scale: BandScale):
        self.region = region
        self.settings = settings
        self.time_scale = time_scale
        self.row_scale = row_scale

    def render(self, milestones: Iterable[Milestone]) -> None:
        for milestone in milestones:
            cy = self.row_scale.center(milestone.id)
            if cy is None:
                logger.debug("Milestone %r has no row; skipped", milestone.id)
                continue
            cx = self.time_scale(milestone.date)

            if is_important(milestone):
                self.region.add(
                    Path(
                        points=star_points(cx, cy),
                        closed=True,
                        fill=STAR_FILL,
                        stroke=STAR_STROKE,
                        stroke_width=2,
                        css_class="milestone-star",
                    )
                )
            else:
                self.region.add(
                    Path(
                        points=diamond_points(cx, cy),
                        closed=True,
                        fill=DIAMOND_FILL,
                        stroke=DIAMOND_STROKE,
                        stroke_width=2,
                        css_class="milestone-diamond",
                    )
                )
            self._render_label(milestone, cx, cy)

    def _render_label(self, milestone: Milestone, cx: float, cy: float) -> None:
        if not milestone.name:
            return
        text_x = cx + LABEL_OFFSET[0] + 4
        baseline_y = cy + LABEL_OFFSET[1] + 12
        text_width = estimate_text_width(milestone.name, LABEL_FONT_SIZE)
        text_height = LABEL_FONT_SIZE * 1.2

        self.region.add(
            Rect(
                x=text_x - 2,
                y=baseline_y - LABEL_FONT_SIZE - 1,
                width=text_width + 4,
                height=text_height + 2,
                fill="#ffffff",
                stroke="#dddddd",
                stroke_width=1,
                opacity=0.9,
                rx=3,
                css_class="milestone-label-bg",
            )
        )
        self.region.add(
            Text(
                x=text_x,
                y=baseline_y,
                text=milestone.name,
                font_size=LABEL_FONT_SIZE,
                font_family=self.settings.font.font_family,
                font_weight="600",
                fill="#333333",
                css_class="milestone-label",
            )
        )
