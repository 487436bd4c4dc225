from __future__ import annotations

import math
from typing import Iterable

from .models import Task
from .phases import PhasePalette
from .primitives import Rect, Region, Text, darker, truncate_label
from .scales import BandScale, TimeScale
from .settings import VisualSettings

BAR_RADIUS = 3
LABEL_INSET = 8
PROGRESS_LABEL_OFFSET = 25
PROGRESS_FONT_SIZE = 10


def clamp_progress(progress: float) -> float:
    return min(100.0, max(0.0, progress))


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class TaskRenderer:
    """Draws one bar per task with an optional progress overlay and labels."""

    def __init__(
        self,
        region: Region,
        settings: VisualSettings,
        time_scale: TimeScale,
        row_scale: BandScale,
        palette: PhasePalette | None = None,
    ):
        self.region = region
        self.settings = settings
        self.time_scale = time_scale
        self.row_scale = row_scale
        self.palette = palette or settings.palette()

    def render(self, tasks: Iterable[Task]) -> None:
        bandwidth = self.row_scale.bandwidth
        bar_height = bandwidth * (self.settings.layout.bar_height / 100)
        bar_offset = (bandwidth - bar_height) / 2

        for task in tasks:
            band_y = self.row_scale(task.id)
            if band_y is None:
                continue

            x = self.time_scale(task.start)
            width = max(0.0, self.time_scale(task.end) - x)
            bar_y = band_y + bar_offset
            color = self.palette.color(task.phase)

            self.region.add(
                Rect(
                    x=x,
                    y=bar_y,
                    width=width,
                    height=bar_height,
                    fill=color,
                    stroke=darker(color, 0.3),
                    stroke_width=1,
                    opacity=0.8,
                    rx=BAR_RADIUS,
                    css_class="task-bar-bg",
                )
            )

            progress = clamp_progress(task.progress)
            if progress > 0:
                self.region.add(
                    Rect(
                        x=x,
                        y=bar_y,
                        width=width * progress / 100,
                        height=bar_height,
                        fill=darker(color, 0.5),
                        opacity=0.9,
                        rx=BAR_RADIUS,
                        css_class="progress-bar",
                    )
                )

            label = truncate_label(task.name, width - LABEL_INSET * 2)
            if label:
                self.region.add(
                    Text(
                        x=x + LABEL_INSET,
                        y=band_y + bandwidth / 2,
                        text=label,
                        font_size=self.settings.font.font_size,
                        font_family=self.settings.font.font_family,
                        font_weight="500",
                        fill="white",
                        baseline="middle",
                        css_class="task-label",
                    )
                )

            if progress > 0:
                self.region.add(
                    Text(
                        x=x + width - PROGRESS_LABEL_OFFSET,
                        y=band_y + bandwidth / 2 + 4,
                        text=f"{round_half_up(progress)}%",
                        font_size=PROGRESS_FONT_SIZE,
                        font_family=self.settings.font.font_family,
                        font_weight="bold",
                        fill="white",
                        css_class="progress-text",
                    )
                )
