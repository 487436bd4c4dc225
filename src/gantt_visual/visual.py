from __future__ import annotations

import logging
from datetime import datetime
from typing import Mapping

from .models import GanttData
from .normalize import DataTable, normalize
from .primitives import DrawSurface
from .render_gantt import GanttVisual
from .settings import DEFAULT_SETTINGS, VisualSettings

logger = logging.getLogger(__name__)


class Visual:
    """
    Host-facing entry point: one `update` per data or viewport change.

    Rendering failures are logged and suppressed so a bad frame never
    propagates into the host; the next update redraws from scratch.
    """

    def __init__(self, surface: DrawSurface | None = None):
        self.gantt = GanttVisual(surface)
        self.last_data: GanttData | None = None

    @property
    def surface(self) -> DrawSurface:
        return self.gantt.surface

    def update(
        self,
        table: DataTable | None,
        width: float,
        height: float,
        settings: VisualSettings = DEFAULT_SETTINGS,
        role_map: Mapping[str, int] | None = None,
        now: datetime | None = None,
    ) -> DrawSurface:
        self.gantt.set_viewport(width, height)

        data = normalize(table, role_map) if table is not None else GanttData()
        self.last_data = data
        logger.debug(
            "Update: %d tasks, %d milestones, viewport %sx%s",
            len(data.tasks),
            len(data.milestones),
            self.gantt.viewport_width,
            self.gantt.viewport_height,
        )

        try:
            self.gantt.render(data, settings, now=now)
        except Exception:
            logger.exception("Gantt render failed")
        return self.surface
