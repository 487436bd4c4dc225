from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Sequence

import matplotlib.dates as mdates
from dateutil.relativedelta import relativedelta

from .models import Milestone, Task
from .settings import LayoutSettings

logger = logging.getLogger(__name__)

HEADER_HEIGHT = 60  # timeline header band above the chart body
TASK_LIST_RATIO = 0.3
TASK_LIST_MIN_WIDTH = 100
TASK_LIST_MAX_WIDTH = 200
MAX_PADDING_RATIO = 0.49
MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

ONE_DAY = timedelta(days=1)
ONE_HOUR = timedelta(hours=1)


class TimeScale:
    """Linear mapping from instants onto a horizontal pixel range."""

    def __init__(self, domain: tuple[datetime, datetime], output_range: tuple[float, float]):
        start, end = domain
        if end <= start:
            raise ValueError(f"time domain must be increasing, got {start} .. {end}")
        self._domain = (start, end)
        self._range = output_range
        self._start_num = mdates.date2num(start)
        self._span_num = mdates.date2num(end) - self._start_num

    @property
    def domain(self) -> tuple[datetime, datetime]:
        return self._domain

    @property
    def range(self) -> tuple[float, float]:
        return self._range

    def __call__(self, instant: datetime) -> float:
        r0, r1 = self._range
        t = (mdates.date2num(instant) - self._start_num) / self._span_num
        return r0 + t * (r1 - r0)


class BandScale:
    """
    Discrete mapping from ids to evenly spaced vertical bands.

    Padding is a ratio of the step, applied between bands and at both ends,
    with the bands centred inside the output range.
    """

    def __init__(self, domain: Sequence[str], output_range: tuple[float, float], padding: float = 0.0):
        self._domain = list(dict.fromkeys(domain))
        self._index = {key: idx for idx, key in enumerate(self._domain)}
        self._range = output_range
        self._padding = padding

        r0, r1 = output_range
        n = len(self._domain)
        self._step = (r1 - r0) / max(1.0, n - padding + padding * 2)
        self._start = r0 + (r1 - r0 - self._step * (n - padding)) * 0.5
        self._bandwidth = self._step * (1 - padding)

    @property
    def domain(self) -> list[str]:
        return list(self._domain)

    @property
    def bandwidth(self) -> float:
        return self._bandwidth

    @property
    def step(self) -> float:
        return self._step

    @property
    def padding(self) -> float:
        return self._padding

    def __call__(self, key: str) -> float | None:
        idx = self._index.get(key)
        if idx is None:
            return None
        return self._start + self._step * idx

    def center(self, key: str) -> float | None:
        top = self(key)
        if top is None:
            return None
        return top + self._bandwidth / 2

    def __contains__(self, key: str) -> bool:
        return key in self._index


@dataclass(frozen=True)
class MonthBand:
    start: datetime
    end: datetime
    label: str


@dataclass
class Layout:
    time_scale: TimeScale
    row_scale: BandScale
    chart_width: float
    chart_height: float
    task_list_width: float


def task_list_width_for(viewport_width: float) -> float:
    return min(TASK_LIST_MAX_WIDTH, max(TASK_LIST_MIN_WIDTH, viewport_width * TASK_LIST_RATIO))


def padding_ratio(layout: LayoutSettings) -> float:
    return max(0.0, min(MAX_PADDING_RATIO, layout.padding / max(1, layout.row_height)))


def time_domain(tasks: Iterable[Task], now: datetime | None = None) -> tuple[datetime, datetime]:
    """
    Domain spanning all tasks, guarded against empty or inverted intervals.
    """

    task_list = list(tasks)
    starts = [task.start for task in task_list if task.start is not None]
    ends = [task.end for task in task_list if task.end is not None]
    domain_start = min(starts) if starts else None
    domain_end = max(ends) if ends else None

    if domain_start is None and domain_end is None:
        today = now or datetime.now()
        return today, today + ONE_DAY
    if domain_end is None:
        return domain_start, domain_start + ONE_DAY
    if domain_start is None:
        return domain_end - ONE_DAY, domain_end
    if domain_end <= domain_start:
        return domain_start, domain_start + ONE_HOUR
    return domain_start, domain_end


def row_domain(tasks: Iterable[Task], milestones: Iterable[Milestone] = ()) -> list[str]:
    """Task ids in order, followed by milestone ids that have no task row of their own."""
    ids = [task.id for task in tasks]
    ids.extend(milestone.id for milestone in milestones)
    return list(dict.fromkeys(ids))


def compute_layout(
    tasks: Sequence[Task],
    viewport_width: float,
    viewport_height: float,
    layout: LayoutSettings,
    milestones: Sequence[Milestone] = (),
    now: datetime | None = None,
) -> Layout:
    task_list_width = task_list_width_for(viewport_width)
    chart_width = max(0, viewport_width - task_list_width)
    chart_height = max(0, viewport_height - HEADER_HEIGHT)

    time_scale = TimeScale(time_domain(tasks, now=now), (0, chart_width))
    row_scale = BandScale(row_domain(tasks, milestones), (0, chart_height), padding=padding_ratio(layout))

    logger.debug(
        "Layout: chart %sx%s, task list %s, %d rows, domain %s .. %s",
        chart_width,
        chart_height,
        task_list_width,
        len(row_scale.domain),
        *time_scale.domain,
    )
    return Layout(
        time_scale=time_scale,
        row_scale=row_scale,
        chart_width=chart_width,
        chart_height=chart_height,
        task_list_width=task_list_width,
    )


def month_bands(time_scale: TimeScale) -> list[MonthBand]:
    """Calendar months touched by the time domain, each labelled `Jan`, `Feb`, ..."""

    start, end = time_scale.domain
    bands: list[MonthBand] = []
    current = start
    while current <= end:
        month_start = datetime(current.year, current.month, 1)
        next_month = month_start + relativedelta(months=1)
        bands.append(MonthBand(start=month_start, end=next_month, label=MONTH_ABBREVIATIONS[month_start.month - 1]))
        current = next_month
    return bands
