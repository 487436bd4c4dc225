from __future__ import annotations

import logging
import math
from datetime import datetime

from .models import GanttData, RenderModel
from .primitives import DrawSurface, Rect, Text, truncate_label
from .render_dependencies import DependencyRenderer
from .render_milestones import MilestoneRenderer
from .render_tasks import TaskRenderer
from .render_timeline import TimelineRenderer
from .scales import HEADER_HEIGHT, BandScale, compute_layout
from .settings import DEFAULT_SETTINGS, VisualSettings

logger = logging.getLogger(__name__)

# Stacking order: later regions draw on top of earlier ones.
REGIONS = (
    "background",
    "status",
    "diagnostic",
    "task_list",
    "timeline",
    "tasks",
    "milestones",
    "dependencies",
)
CHART_BODY_REGIONS = ("tasks", "milestones", "dependencies")
TASK_LIST_INSET = 4


def _pixels(value: float) -> int:
    """Whole non-negative pixels; NaN and infinities count as zero."""
    if not math.isfinite(value):
        return 0
    return max(0, math.floor(value))


class GanttVisual:
    """
    Composes one full Gantt frame onto a DrawSurface.

    Every call to `render` clears all regions first, so repeated calls with
    the same input leave the surface in the same state.
    """

    def __init__(self, surface: DrawSurface | None = None):
        self.surface = surface if surface is not None else DrawSurface(REGIONS)
        for name in REGIONS:
            self.surface.region(name)
        self.viewport_width = 0
        self.viewport_height = 0

    def set_viewport(self, width: float, height: float) -> None:
        self.viewport_width = _pixels(width)
        self.viewport_height = _pixels(height)

    def render(
        self,
        data: GanttData,
        settings: VisualSettings = DEFAULT_SETTINGS,
        now: datetime | None = None,
    ) -> RenderModel | None:
        self.clear()

        width, height = self.viewport_width, self.viewport_height
        self.surface.region("background").add(
            Rect(x=0, y=0, width=width, height=height, fill="#fafafa", stroke="#dddddd", stroke_width=1)
        )

        has_data = data is not None and not data.is_empty
        status = f"{len(data.tasks)} tasks" if has_data else "No data"
        self.surface.region("status").add(
            Text(
                x=10,
                y=20,
                text=f"Gantt Status: {status} | Viewport: {width}x{height}",
                font_size=12,
                font_weight="bold",
                fill="#333333",
                css_class="status",
            )
        )

        if not has_data:
            self._diagnostic("No parsed tasks to render")
            return None
        if width == 0 or height == 0:
            self._diagnostic(f"Zero-size viewport ({width}x{height})")
            return None

        layout = compute_layout(data.tasks, width, height, settings.layout, data.milestones, now=now)
        model = RenderModel(
            tasks=list(data.tasks),
            milestones=list(data.milestones),
            time_scale=layout.time_scale,
            row_scale=layout.row_scale,
            chart_width=layout.chart_width,
            chart_height=layout.chart_height,
            task_list_width=layout.task_list_width,
        )

        self.surface.move("task_list", 0, HEADER_HEIGHT)
        self.surface.move("timeline", model.task_list_width, 0)
        for name in CHART_BODY_REGIONS:
            self.surface.move(name, model.task_list_width, HEADER_HEIGHT)

        TimelineRenderer(self.surface.region("timeline"), settings).render(model.time_scale, model.chart_height)
        self._render_task_list(model, settings)

        palette = settings.palette()
        TaskRenderer(self.surface.region("tasks"), settings, model.time_scale, model.row_scale, palette).render(
            model.tasks
        )
        MilestoneRenderer(self.surface.region("milestones"), settings, model.time_scale, model.row_scale).render(
            model.milestones
        )
        edges = DependencyRenderer(self.surface.region("dependencies"), model.time_scale, model.row_scale).render(
            model.tasks
        )

        logger.debug(
            "Rendered %d tasks, %d milestones, %d dependencies",
            len(model.tasks),
            len(model.milestones),
            len(edges),
        )
        return model

    def clear(self) -> None:
        self.surface.clear(*REGIONS)

    def _render_task_list(self, model: RenderModel, settings: VisualSettings) -> None:
        region = self.surface.region("task_list")
        row_scale: BandScale = model.row_scale
        max_width = model.task_list_width - TASK_LIST_INSET * 2
        names = {milestone.id: milestone.name for milestone in model.milestones}
        names.update((task.id, task.name) for task in model.tasks)

        for row_id in row_scale.domain:
            center = row_scale.center(row_id)
            label = truncate_label(names.get(row_id, ""), max_width, min_width=0)
            if center is None or not label:
                continue
            region.add(
                Text(
                    x=TASK_LIST_INSET,
                    y=center,
                    text=label,
                    font_size=settings.font.font_size,
                    font_family=settings.font.font_family,
                    baseline="middle",
                    css_class="task-label",
                )
            )

    def _diagnostic(self, message: str) -> None:
        self.surface.region("diagnostic").add(
            Text(x=12, y=38, text=f"[Gantt] {message}", font_size=12, fill="#888888", css_class="diagnostic")
        )
