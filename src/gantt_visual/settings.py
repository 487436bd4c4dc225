from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import yaml

from .phases import PhasePalette
from .validation import YamlPath, assert_allowed_keys


class SettingsValidationError(Exception):
    """Raised when a settings document has unknown keys or mistyped values."""


@dataclass(frozen=True)
class LayoutSettings:
    row_height: float = 40
    bar_height: float = 60  # percent of the row band
    padding: float = 10


@dataclass(frozen=True)
class FontSettings:
    font_family: str = "Segoe UI"
    font_size: float = 12


@dataclass(frozen=True)
class PhaseSettings:
    labels: Mapping[str, str] = field(default_factory=dict)
    colors: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TimelineSettings:
    show_grid: bool = True


@dataclass(frozen=True)
class VisualSettings:
    """
    Read-only configuration snapshot for one render pass.

    Hosts replace the whole snapshot between updates instead of mutating it.
    """

    layout: LayoutSettings = field(default_factory=LayoutSettings)
    font: FontSettings = field(default_factory=FontSettings)
    phases: PhaseSettings = field(default_factory=PhaseSettings)
    timeline: TimelineSettings = field(default_factory=TimelineSettings)

    def palette(self) -> PhasePalette:
        return PhasePalette.from_settings(self.phases.colors, self.phases.labels)


DEFAULT_SETTINGS = VisualSettings()


def load_settings(path: str) -> VisualSettings:
    """Load a VisualSettings snapshot from a YAML file."""

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    return settings_from_mapping(raw)


def settings_from_mapping(data: Any) -> VisualSettings:
    path = YamlPath()
    if data is None:
        return VisualSettings()
    if not isinstance(data, dict):
        raise SettingsValidationError(f"{path}: expected mapping at top level")
    assert_allowed_keys(data, {"layout", "font", "phases", "timeline"}, path, SettingsValidationError)

    layout_raw = _section(data, "layout", path)
    assert_allowed_keys(layout_raw, {"row_height", "bar_height", "padding"}, path.child("layout"), SettingsValidationError)
    layout = LayoutSettings(
        row_height=_number(layout_raw, "row_height", LayoutSettings.row_height, path.child("layout")),
        bar_height=_number(layout_raw, "bar_height", LayoutSettings.bar_height, path.child("layout")),
        padding=_number(layout_raw, "padding", LayoutSettings.padding, path.child("layout")),
    )

    font_raw = _section(data, "font", path)
    assert_allowed_keys(font_raw, {"font_family", "font_size"}, path.child("font"), SettingsValidationError)
    font_family = font_raw.get("font_family", FontSettings.font_family)
    if not isinstance(font_family, str) or not font_family.strip():
        raise SettingsValidationError(f"{path.child('font').child('font_family')}: expected non-empty string")
    font = FontSettings(
        font_family=font_family,
        font_size=_number(font_raw, "font_size", FontSettings.font_size, path.child("font")),
    )

    phases_raw = _section(data, "phases", path)
    assert_allowed_keys(phases_raw, {"labels", "colors"}, path.child("phases"), SettingsValidationError)
    phases = PhaseSettings(
        labels=_string_map(phases_raw.get("labels"), path.child("phases").child("labels")),
        colors=_string_map(phases_raw.get("colors"), path.child("phases").child("colors")),
    )

    timeline_raw = _section(data, "timeline", path)
    assert_allowed_keys(timeline_raw, {"show_grid"}, path.child("timeline"), SettingsValidationError)
    show_grid = timeline_raw.get("show_grid", TimelineSettings.show_grid)
    if not isinstance(show_grid, bool):
        raise SettingsValidationError(f"{path.child('timeline').child('show_grid')}: expected boolean")

    return VisualSettings(layout=layout, font=font, phases=phases, timeline=TimelineSettings(show_grid=show_grid))


def _section(data: dict[str, Any], key: str, path: YamlPath) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SettingsValidationError(f"{path.child(key)}: expected mapping")
    return value


def _number(data: dict[str, Any], key: str, default: float, path: YamlPath) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SettingsValidationError(f"{path.child(key)}: expected number")
    if value < 0:
        raise SettingsValidationError(f"{path.child(key)}: expected non-negative number")
    return value


def _string_map(value: Any, path: YamlPath) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SettingsValidationError(f"{path}: expected mapping of strings")
    result: dict[str, str] = {}
    for key, item in value.items():
        if not isinstance(item, str):
            raise SettingsValidationError(f"{path.child(str(key))}: expected string")
        result[str(key)] = item
    return result
