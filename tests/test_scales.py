from datetime import datetime, timedelta

import pytest

from gantt_visual.models import Milestone, Task
from gantt_visual.scales import (
    HEADER_HEIGHT,
    BandScale,
    TimeScale,
    compute_layout,
    month_bands,
    padding_ratio,
    row_domain,
    task_list_width_for,
    time_domain,
)
from gantt_visual.settings import LayoutSettings

NOW = datetime(2024, 5, 1, 9, 0)


def _task(task_id, start, end, **kwargs):
    return Task(id=task_id, name=task_id, start=start, end=end, **kwargs)


def test_empty_task_list_gets_one_day_domain():
    start, end = time_domain([], now=NOW)

    assert start == NOW
    assert end - start == timedelta(days=1)


def test_zero_length_domain_is_widened_by_one_hour():
    moment = datetime(2024, 1, 1)
    start, end = time_domain([_task("A", moment, moment)])

    assert start == moment
    assert end == moment + timedelta(hours=1)


def test_domain_with_only_start_extends_one_day_forward():
    moment = datetime(2024, 2, 10)

    assert time_domain([_task("A", moment, None)]) == (moment, moment + timedelta(days=1))


def test_domain_with_only_end_extends_one_day_back():
    moment = datetime(2024, 2, 10)

    assert time_domain([_task("A", None, moment)]) == (moment - timedelta(days=1), moment)


def test_domain_spans_all_tasks():
    tasks = [
        _task("A", datetime(2024, 1, 5), datetime(2024, 1, 10)),
        _task("B", datetime(2024, 1, 1), datetime(2024, 1, 7)),
    ]

    assert time_domain(tasks) == (datetime(2024, 1, 1), datetime(2024, 1, 10))


def test_single_task_layout_in_800_by_400_viewport():
    task = _task("A", datetime(2024, 1, 1), datetime(2024, 1, 10))

    layout = compute_layout([task], 800, 400, LayoutSettings())

    assert layout.task_list_width == 200
    assert layout.chart_width == 600
    assert layout.chart_height == 400 - HEADER_HEIGHT
    assert layout.time_scale(task.start) == pytest.approx(0)
    assert layout.time_scale(task.end) == pytest.approx(600)
    # padding 10 / row height 40 -> ratio 0.25 of a 272px step
    assert layout.row_scale.step == pytest.approx(272)
    assert layout.row_scale.bandwidth == pytest.approx(204)
    assert layout.row_scale("A") == pytest.approx(68)
    assert layout.row_scale.center("A") == pytest.approx(170)


def test_task_list_width_is_clamped():
    assert task_list_width_for(200) == 100
    assert task_list_width_for(500) == pytest.approx(150)
    assert task_list_width_for(1000) == 200


def test_small_viewport_never_goes_negative():
    layout = compute_layout([], 50, 30, LayoutSettings(), now=NOW)

    assert layout.chart_width == 0
    assert layout.chart_height == 0


def test_padding_ratio_is_capped_below_half():
    assert padding_ratio(LayoutSettings(row_height=40, padding=10)) == pytest.approx(0.25)
    assert padding_ratio(LayoutSettings(row_height=40, padding=100)) == pytest.approx(0.49)
    assert padding_ratio(LayoutSettings(row_height=0, padding=10)) == pytest.approx(0.49)
    assert padding_ratio(LayoutSettings(row_height=40, padding=0)) == 0


def test_band_scale_without_padding_splits_range_evenly():
    scale = BandScale(["A", "B", "C"], (0, 300))

    assert scale.bandwidth == pytest.approx(100)
    assert [scale(key) for key in "ABC"] == pytest.approx([0, 100, 200])
    assert scale("missing") is None
    assert scale.center("missing") is None
    assert "B" in scale


def test_band_scale_keeps_positive_bands_at_max_padding():
    scale = BandScale([str(i) for i in range(10)], (0, 100), padding=0.49)

    assert scale.bandwidth > 0
    assert scale("0") > 0
    assert scale("9") + scale.bandwidth < 100


def test_milestones_get_rows_after_tasks():
    tasks = [_task("A", datetime(2024, 1, 1), datetime(2024, 1, 2))]
    milestones = [
        Milestone(id="M", name="Review", date=datetime(2024, 1, 2)),
        Milestone(id="A", name="Shares task row", date=datetime(2024, 1, 2)),
    ]

    assert row_domain(tasks, milestones) == ["A", "M"]

    layout = compute_layout(tasks, 800, 400, LayoutSettings(), milestones)
    assert layout.row_scale.domain == ["A", "M"]
    assert layout.row_scale("M") > layout.row_scale("A")


def test_time_scale_rejects_inverted_domain():
    moment = datetime(2024, 1, 1)
    with pytest.raises(ValueError):
        TimeScale((moment, moment), (0, 100))


def test_time_scale_is_linear():
    scale = TimeScale((datetime(2024, 1, 1), datetime(2024, 1, 11)), (0, 1000))

    assert scale(datetime(2024, 1, 6)) == pytest.approx(500)
    assert scale(datetime(2024, 1, 1, 12)) == pytest.approx(50)
    assert scale.domain == (datetime(2024, 1, 1), datetime(2024, 1, 11))


def test_month_bands_walk_calendar_months():
    scale = TimeScale((datetime(2024, 1, 15), datetime(2024, 3, 2)), (0, 100))

    bands = month_bands(scale)

    assert [band.label for band in bands] == ["Jan", "Feb", "Mar"]
    assert bands[0].start == datetime(2024, 1, 1)
    assert bands[0].end == datetime(2024, 2, 1)
    assert bands[-1].end == datetime(2024, 4, 1)


def test_month_bands_cross_year_boundary():
    scale = TimeScale((datetime(2023, 12, 20), datetime(2024, 1, 5)), (0, 100))

    assert [band.label for band in month_bands(scale)] == ["Dec", "Jan"]


def test_month_labels_cover_full_year_in_english():
    scale = TimeScale((datetime(2024, 1, 1), datetime(2024, 12, 31)), (0, 1200))

    assert [band.label for band in month_bands(scale)] == [
        "Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
    ]
