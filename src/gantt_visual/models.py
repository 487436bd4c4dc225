from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:  # pragma: no cover
    from .scales import BandScale, TimeScale


@dataclass(frozen=True)
class Task:
    """Scheduled activity that renders as a bar on the timeline."""

    id: str
    name: str
    start: datetime
    end: datetime
    phase: str = ""
    progress: float = 0.0
    dependencies: tuple[str, ...] = ()


@dataclass(frozen=True)
class Milestone:
    """Zero-duration checkpoint that renders as a diamond or a star."""

    id: str
    name: str
    date: datetime
    phase: str = ""
    progress: float = 0.0


@dataclass(frozen=True)
class DependencyEdge:
    """Finish-to-start connector from `source_id` to `target_id`."""

    source_id: str
    target_id: str


@dataclass
class GanttData:
    """Normalized output of one ingestion pass."""

    tasks: list[Task] = field(default_factory=list)
    milestones: list[Milestone] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.tasks


@dataclass
class RenderModel:
    """
    Geometry for a single render pass.

    Rebuilt on every call to the composer and dropped afterwards; renderers
    only see the scales for the duration of that call.
    """

    tasks: list[Task]
    milestones: list[Milestone]
    time_scale: "TimeScale"
    row_scale: "BandScale"
    chart_width: float
    chart_height: float
    task_list_width: float


def extract_dependencies(tasks: Iterable[Task]) -> list[DependencyEdge]:
    """
    Materialize finish-to-start edges from each task's dependency ids.

    Ids that do not resolve to a task in `tasks` are dropped without error.
    """

    task_list = list(tasks)
    known = {task.id for task in task_list}
    edges: list[DependencyEdge] = []
    for task in task_list:
        for dep_id in task.dependencies:
            if dep_id in known:
                edges.append(DependencyEdge(source_id=dep_id, target_id=task.id))
    return edges
