from __future__ import annotations

import csv
from pathlib import Path
from typing import Any

import yaml

from .normalize import ROLES, Column, DataTable
from .validation import YamlPath, assert_allowed_keys


class TableValidationError(Exception):
    """Raised when a table file does not describe columns and rows."""


def load_table(path: str) -> DataTable:
    """Load a DataTable from a `.csv` file or a YAML document."""

    if Path(path).suffix.lower() == ".csv":
        return _load_csv(path)

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    return parse_table(raw)


def _load_csv(path: str) -> DataTable:
    with open(path, "r", encoding="utf-8", newline="") as fh:
        reader = csv.reader(fh)
        try:
            header = next(reader)
        except StopIteration:
            raise TableValidationError(f"{path}: empty CSV file") from None
        rows = [row for row in reader if any(cell.strip() for cell in row)]
    columns = [Column(display_name=name.strip()) for name in header]
    return DataTable(columns=columns, rows=rows)


def parse_table(data: Any) -> DataTable:
    """
    Build a DataTable from a parsed YAML document.

    Rows are either lists (positional) or mappings keyed by column name.
    """

    path = YamlPath()
    if not isinstance(data, dict):
        raise TableValidationError(f"{path}: expected mapping at top level")
    assert_allowed_keys(data, {"columns", "rows"}, path, TableValidationError)

    columns_raw = data.get("columns")
    if not isinstance(columns_raw, list) or not columns_raw:
        raise TableValidationError(f"{path}: missing required non-empty list 'columns'")
    columns = [_parse_column(col, path.child(f"columns[{idx}]")) for idx, col in enumerate(columns_raw)]

    rows_raw = data.get("rows")
    if rows_raw is None:
        rows_raw = []
    if not isinstance(rows_raw, list):
        raise TableValidationError(f"{path}.rows: expected list")

    names = [column.display_name for column in columns]
    rows = [_parse_row(row, names, path.child(f"rows[{idx}]")) for idx, row in enumerate(rows_raw)]
    return DataTable(columns=columns, rows=rows)


def _parse_column(data: Any, path: YamlPath) -> Column:
    if isinstance(data, str):
        return Column(display_name=data)
    if not isinstance(data, dict):
        raise TableValidationError(f"{path}: expected column name or mapping")
    assert_allowed_keys(data, {"name", "query_name", "roles"}, path, TableValidationError)

    name = data.get("name", "")
    query_name = data.get("query_name", "")
    if not isinstance(name, str) or not isinstance(query_name, str):
        raise TableValidationError(f"{path}: name and query_name must be strings")

    roles_raw = data.get("roles", [])
    if isinstance(roles_raw, str):
        roles_raw = [roles_raw]
    if not isinstance(roles_raw, list):
        raise TableValidationError(f"{path}.roles: expected list of role names")
    unknown = sorted(str(role) for role in roles_raw if role not in ROLES)
    if unknown:
        raise TableValidationError(f"{path}.roles: unknown roles {unknown}")

    return Column(display_name=name, query_name=query_name, roles=frozenset(roles_raw))


def _parse_row(data: Any, names: list[str], path: YamlPath) -> list[Any]:
    if isinstance(data, list):
        if len(data) > len(names):
            raise TableValidationError(f"{path}: {len(data)} cells for {len(names)} columns")
        return data + [None] * (len(names) - len(data))
    if isinstance(data, dict):
        assert_allowed_keys(data, set(names), path, TableValidationError)
        return [data.get(name) for name in names]
    raise TableValidationError(f"{path}: expected list or mapping")
