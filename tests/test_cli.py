import datetime as dt

import pytest

from gantt_visual.__main__ import main
from gantt_visual.normalize import normalize
from gantt_visual.parse_table import TableValidationError, load_table, parse_table

TABLE_YAML = """\
columns:
  - name: Key
    query_name: Tasks.id
  - name: Task
    roles: [name]
  - Phase
  - name: Begin
    roles: [startDate]
  - name: Finish
    roles: [endDate]
  - name: Milestone
  - name: Dependencies
  - name: Progress
rows:
  - [A, Requirements, REQUIREMENTS, "15.03.2024", "20.03.2024", no, null, 100]
  - [B, Design, DESIGN, 2024-03-21, 2024-04-02, no, A, 50]
  - Key: M
    Task: Design sign-off
    Begin: 2024-04-03
    Milestone: yes
"""


@pytest.fixture
def table_file(tmp_path):
    path = tmp_path / "tasks.yaml"
    path.write_text(TABLE_YAML, encoding="utf-8")
    return path


def test_load_yaml_table(table_file):
    table = load_table(str(table_file))

    assert [column.display_name for column in table.columns][:3] == ["Key", "Task", "Phase"]
    assert table.columns[3].roles == frozenset({"startDate"})
    assert table.rows[1][3] == dt.date(2024, 3, 21)
    assert table.rows[2][0] == "M"
    assert table.rows[2][4] is None

    data = normalize(table)
    assert [task.id for task in data.tasks] == ["A", "B"]
    assert data.tasks[1].dependencies == ("A",)
    assert data.tasks[1].start == dt.datetime(2024, 3, 21)
    assert [milestone.name for milestone in data.milestones] == ["Design sign-off"]


def test_load_csv_table(tmp_path):
    path = tmp_path / "tasks.csv"
    path.write_text(
        "id,name,startDate,endDate,dependencies\n"
        "A,First,01.01.2024,03.01.2024,\n"
        ",,,,\n"
        "B,Second,04.01.2024,06.01.2024,A\n",
        encoding="utf-8",
    )

    data = normalize(load_table(str(path)))

    assert [task.id for task in data.tasks] == ["A", "B"]
    assert data.tasks[1].dependencies == ("A",)


@pytest.mark.parametrize(
    "document",
    [
        ["not", "a", "mapping"],
        {"rows": []},
        {"columns": ["a"], "rows": [["x", "y"]]},
        {"columns": ["a"], "rows": [{"b": 1}]},
        {"columns": [{"name": "a", "roles": ["owner"]}]},
        {"columns": ["a"], "extra": True},
    ],
)
def test_invalid_tables_raise(document):
    with pytest.raises(TableValidationError):
        parse_table(document)


def test_cli_renders_svg(table_file, tmp_path):
    out_file = tmp_path / "out" / "chart.svg"

    code = main([str(table_file), "--out", str(out_file), "--width", "1000", "--height", "400", "--no-view"])

    assert code == 0
    assert out_file.exists()
    assert out_file.stat().st_size > 0


def test_cli_uses_settings_file(table_file, tmp_path):
    settings_file = tmp_path / "settings.yaml"
    settings_file.write_text("timeline:\n  show_grid: false\n", encoding="utf-8")
    out_file = tmp_path / "chart.png"

    code = main([str(table_file), "--settings", str(settings_file), "--out", str(out_file), "--no-view"])

    assert code == 0
    assert out_file.read_bytes()[:4] == b"\x89PNG"


def test_cli_reports_invalid_table(tmp_path, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text("columns: nope\n", encoding="utf-8")

    code = main([str(path), "--out", str(tmp_path / "x.svg"), "--no-view"])

    assert code == 2
    assert "Error:" in capsys.readouterr().err


def test_cli_reports_missing_file(tmp_path, capsys):
    code = main([str(tmp_path / "missing.yaml"), "--no-view"])

    assert code == 1
    assert "file not found" in capsys.readouterr().err
