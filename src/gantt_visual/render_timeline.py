from __future__ import annotations

from .primitives import Line, Region, Text
from .scales import HEADER_HEIGHT, TimeScale, month_bands
from .settings import VisualSettings

MONTH_LABEL_Y = 40
GRID_COLOR = "#e0e0e0"


class TimelineRenderer:
    """Month header labels and optional month grid lines."""

    def __init__(self, region: Region, settings: VisualSettings):
        self.region = region
        self.settings = settings

    def render(self, time_scale: TimeScale, chart_height: float) -> None:
        months = month_bands(time_scale)

        for month in months:
            x0 = time_scale(month.start)
            x1 = time_scale(month.end)
            self.region.add(
                Text(
                    x=x0 + (x1 - x0) / 2,
                    y=MONTH_LABEL_Y,
                    text=month.label,
                    font_size=self.settings.font.font_size,
                    font_family=self.settings.font.font_family,
                    anchor="middle",
                    css_class="month-header",
                )
            )

        if not self.settings.timeline.show_grid:
            return

        for month in months:
            x = time_scale(month.start)
            self.region.add(
                Line(
                    x1=x,
                    y1=HEADER_HEIGHT,
                    x2=x,
                    y2=HEADER_HEIGHT + chart_height,
                    stroke=GRID_COLOR,
                    stroke_width=1,
                    dash=(2, 2),
                    css_class="grid-line",
                )
            )
