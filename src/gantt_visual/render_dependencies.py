from __future__ import annotations

from typing import Iterable

from .models import DependencyEdge, Task, extract_dependencies
from .primitives import Path, Point, Region
from .scales import BandScale, TimeScale

SAME_ROW_TOLERANCE = 5
ELBOW_OFFSET = 20  # horizontal run out of the predecessor before turning
TARGET_GAP = 8  # connector stops this far before the successor bar
ARROW_SIZE = 6
CONNECTOR_COLOR = "#666666"


def route_connector(source: Point, target: Point) -> tuple[Point, ...]:
    """
    Finish-to-start route from a predecessor end to a successor start.

    Rows within SAME_ROW_TOLERANCE get a straight segment, others an elbow.
    """

    sx, sy = source
    tx, ty = target
    if abs(sy - ty) < SAME_ROW_TOLERANCE:
        return ((sx, sy), (tx - TARGET_GAP, ty))
    mid_x = sx + ELBOW_OFFSET
    return ((sx, sy), (mid_x, sy), (mid_x, ty), (tx - TARGET_GAP, ty))


def arrowhead(target: Point, size: float = ARROW_SIZE) -> tuple[Point, ...]:
    tx, ty = target
    return ((tx - size, ty - size / 2), (tx, ty), (tx - size, ty + size / 2))


class DependencyRenderer:
    """Draws dashed connectors with arrowheads between dependent tasks."""

    def __init__(self, region: Region, time_scale: TimeScale, row_scale: BandScale):
        self.region = region
        self.time_scale = time_scale
        self.row_scale = row_scale

    def render(self, tasks: Iterable[Task]) -> list[DependencyEdge]:
        task_list = list(tasks)
        lookup = {task.id: task for task in task_list}
        edges = extract_dependencies(task_list)

        drawn: list[DependencyEdge] = []
        for edge in edges:
            source_task = lookup[edge.source_id]
            target_task = lookup[edge.target_id]
            source_y = self.row_scale.center(source_task.id)
            target_y = self.row_scale.center(target_task.id)
            if source_y is None or target_y is None:
                continue

            source = (self.time_scale(source_task.end), source_y)
            target = (self.time_scale(target_task.start), target_y)

            self.region.add(
                Path(
                    points=route_connector(source, target),
                    stroke=CONNECTOR_COLOR,
                    stroke_width=2,
                    dash=(5, 5),
                    opacity=0.7,
                    css_class="dependency-line",
                )
            )
            self.region.add(
                Path(
                    points=arrowhead(target),
                    closed=True,
                    fill=CONNECTOR_COLOR,
                    opacity=0.7,
                    css_class="dependency-arrow",
                )
            )
            drawn.append(edge)
        return drawn
