from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Mapping, Sequence

from dateutil import parser as date_parser

from .models import GanttData, Milestone, Task

logger = logging.getLogger(__name__)

ROLES = ("id", "name", "phase", "startDate", "endDate", "milestone", "dependencies", "progress")
"""Logical column roles understood by the normalizer."""

UNRESOLVED = -1

SPREADSHEET_EPOCH = datetime(1899, 12, 30)
UNIX_EPOCH = datetime(1970, 1, 1)
EPOCH_MS_THRESHOLD = 1e11  # larger magnitudes are epoch milliseconds, smaller ones day serials
PARSE_DEFAULT = datetime(2000, 1, 1)  # fills fields a free-form date string leaves out

_DMY_RE = re.compile(r"^(\d{1,2})[./-](\d{1,2})[./-](\d{2,4})$")
_DEPENDENCY_SPLIT_RE = re.compile(r"[;,]")
_TRUE_TOKENS = {"true", "1", "yes", "y", "t"}
_FALSE_TOKENS = {"false", "0", "no", "n", "f"}

Cell = Any


@dataclass(frozen=True)
class Column:
    """Column metadata as supplied by the host table."""

    display_name: str = ""
    query_name: str = ""
    roles: frozenset[str] = frozenset()


@dataclass
class DataTable:
    """Ordered rows of loosely typed cells plus their column metadata."""

    columns: list[Column] = field(default_factory=list)
    rows: list[Sequence[Cell]] = field(default_factory=list)


def find_column_index(columns: Sequence[Column], role: str) -> int:
    """
    Resolve `role` to a column index, or UNRESOLVED.

    Tried in order: exact role tag, query-name suffix, display name.
    """

    role_lc = role.lower()

    for idx, column in enumerate(columns):
        if role in column.roles:
            return idx

    for idx, column in enumerate(columns):
        query = column.query_name
        if not query:
            continue
        last = query.split(".")[-1] or query
        if last.lower() == role_lc or query.lower().endswith("." + role_lc):
            return idx

    for idx, column in enumerate(columns):
        if column.display_name and column.display_name.strip().lower() == role_lc:
            return idx

    return UNRESOLVED


def resolve_columns(columns: Sequence[Column]) -> dict[str, int]:
    return {role: find_column_index(columns, role) for role in ROLES}


def parse_date(value: Cell) -> datetime | None:
    """
    Best-effort conversion of a cell into a naive datetime.

    Returns None when the value cannot be interpreted as an instant.
    """

    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _as_naive_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    if isinstance(value, (int, float)):
        return _parse_numeric_date(value)

    if isinstance(value, str):
        return _parse_text_date(value)

    return None


def _parse_numeric_date(value: int | float) -> datetime | None:
    if not math.isfinite(value):
        return None
    try:
        if abs(value) > EPOCH_MS_THRESHOLD:
            return UNIX_EPOCH + timedelta(milliseconds=value)
        serial_days = math.floor(value + 0.5)
        return SPREADSHEET_EPOCH + timedelta(days=serial_days)
    except OverflowError:
        return None


def _parse_text_date(value: str) -> datetime | None:
    text = value.strip()
    if not text:
        return None

    match = _DMY_RE.match(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        if year < 100:
            year += 2000
        try:
            return datetime(year, month, day)
        except ValueError:
            return None

    try:
        parsed = date_parser.parse(text, default=PARSE_DEFAULT)
    except (ValueError, OverflowError):
        return None
    return _as_naive_utc(parsed)


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def coerce_bool(value: Cell) -> bool:
    """Interpret booleans, numbers and yes/no style tokens."""

    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        token = value.strip().lower()
        if token in _TRUE_TOKENS:
            return True
        if token in _FALSE_TOKENS:
            return False
    return bool(value)


def parse_progress(value: Cell) -> float:
    """Numeric progress; missing or malformed values become 0."""

    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, str) and not value.strip():
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return number


def split_dependencies(value: Cell) -> tuple[str, ...]:
    """Split a `;` or `,` separated id list, dropping blanks and repeats."""

    text = cell_text(value)
    if not text:
        return ()
    tokens = (token.strip() for token in _DEPENDENCY_SPLIT_RE.split(text))
    return tuple(dict.fromkeys(token for token in tokens if token))


def cell_text(value: Cell) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize(table: DataTable, role_map: Mapping[str, int] | None = None) -> GanttData:
    """
    Convert raw table rows into tasks and milestones.

    Rows whose start and end both fail to parse are skipped. Every other
    malformed cell falls back to a default so a single bad row never aborts
    the pass.
    """

    columns = dict(resolve_columns(table.columns))
    if role_map is not None:
        columns.update(role_map)

    data = GanttData()
    for row_idx, row in enumerate(table.rows):

        def cell(role: str) -> Cell:
            idx = columns.get(role, UNRESOLVED)
            if idx is None or idx < 0 or idx >= len(row):
                return None
            return row[idx]

        start = parse_date(cell("startDate"))
        end = parse_date(cell("endDate"))
        if start is None and end is None:
            logger.debug("Skipping row %d: no usable start or end date", row_idx)
            continue
        if start is None:
            start = end
        if end is None:
            end = start
        if end < start:
            end = start

        item_id = cell_text(cell("id")).strip()
        if not item_id:
            item_id = f"item_{len(data.tasks) + len(data.milestones)}"
        name = cell_text(cell("name"))
        phase = cell_text(cell("phase"))
        progress = parse_progress(cell("progress"))

        if coerce_bool(cell("milestone")):
            data.milestones.append(Milestone(id=item_id, name=name, date=start, phase=phase, progress=progress))
            continue

        data.tasks.append(
            Task(
                id=item_id,
                name=name,
                start=start,
                end=end,
                phase=phase,
                progress=progress,
                dependencies=split_dependencies(cell("dependencies")),
            )
        )

    logger.debug("Normalized %d tasks and %d milestones", len(data.tasks), len(data.milestones))
    return data
