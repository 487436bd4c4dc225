import pytest

from gantt_visual.phases import DEFAULT_PHASE_COLOR, PhasePalette
from gantt_visual.settings import (
    DEFAULT_SETTINGS,
    SettingsValidationError,
    VisualSettings,
    load_settings,
    settings_from_mapping,
)


def test_defaults():
    settings = VisualSettings()

    assert settings == DEFAULT_SETTINGS
    assert settings.layout.row_height == 40
    assert settings.layout.padding == 10
    assert settings.font.font_family == "Segoe UI"
    assert settings.timeline.show_grid is True


def test_load_settings_from_yaml(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "layout:\n"
        "  row_height: 30\n"
        "  padding: 4\n"
        "font:\n"
        "  font_size: 14\n"
        "phases:\n"
        "  labels:\n"
        "    QA: Quality assurance\n"
        "  colors:\n"
        "    QA: '#00ff00'\n"
        "timeline:\n"
        "  show_grid: false\n",
        encoding="utf-8",
    )

    settings = load_settings(str(path))

    assert settings.layout.row_height == 30
    assert settings.layout.padding == 4
    assert settings.layout.bar_height == 60
    assert settings.font.font_size == 14
    assert settings.font.font_family == "Segoe UI"
    assert settings.timeline.show_grid is False
    assert settings.palette().color("QA") == "#00ff00"
    assert settings.palette().label("QA") == "Quality assurance"


def test_empty_document_gives_defaults():
    assert settings_from_mapping(None) == VisualSettings()


@pytest.mark.parametrize(
    "document",
    [
        {"layout": {"row_height": "tall"}},
        {"layout": {"padding": -1}},
        {"layout": {"gap": 3}},
        {"fonts": {}},
        {"timeline": {"show_grid": "yes"}},
        {"phases": {"colors": {"QA": 7}}},
        {"font": {"font_family": ""}},
        ["not", "a", "mapping"],
    ],
)
def test_invalid_settings_raise(document):
    with pytest.raises(SettingsValidationError):
        settings_from_mapping(document)


def test_phase_color_lookup_order():
    palette = PhasePalette.from_settings({"Design": "#111111", "QA": "#222222"}, {})

    assert palette.color("Design") == "#111111"
    assert palette.color("qa") == "#222222"
    assert palette.color("testing") == "#9370DB"
    assert palette.color("Unknown") == DEFAULT_PHASE_COLOR
    assert palette.color("") == DEFAULT_PHASE_COLOR


def test_phase_palette_edits_return_new_palettes():
    palette = PhasePalette()

    added = palette.with_phase("QA", "#abcdef")
    renamed = added.renamed("QA", "Quality")
    removed = renamed.without_phase("QA")

    assert palette.phases() == []
    assert added.color("QA") == "#abcdef"
    assert added.label("QA") == "QA"
    assert renamed.label("QA") == "Quality"
    assert removed.phases() == []
    assert removed.label("QA") == "QA"
    assert removed.color("QA") == DEFAULT_PHASE_COLOR


def test_phases_lists_union_of_labels_and_colors():
    palette = PhasePalette(colors={"A": "#000000", "B": "#111111"}, labels={"B": "Bee", "C": "Sea"})

    assert palette.phases() == ["B", "C", "A"]
