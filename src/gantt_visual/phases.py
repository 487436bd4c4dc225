from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

DEFAULT_PHASE_COLOR = "#666666"

REFERENCE_PHASE_COLORS: Mapping[str, str] = MappingProxyType(
    {
        "Phase A": "#8B4513",
        "Phase B": "#4682B4",
        "Phase C": "#CD853F",
        "Phase D": "#9370DB",
        "REQUIREMENTS": "#8B4513",
        "DESIGN": "#4682B4",
        "DEVELOPMENT": "#CD853F",
        "TESTING": "#9370DB",
    }
)
"""Built-in colours used when settings do not override a phase."""


@dataclass(frozen=True)
class PhasePalette:
    """
    Immutable phase -> colour/label table.

    Colour lookup order: exact key, upper-cased key, then the default colour.
    """

    colors: Mapping[str, str] = field(default_factory=dict)
    labels: Mapping[str, str] = field(default_factory=dict)
    default_color: str = DEFAULT_PHASE_COLOR

    @classmethod
    def from_settings(cls, colors: Mapping[str, str], labels: Mapping[str, str]) -> "PhasePalette":
        merged = dict(REFERENCE_PHASE_COLORS)
        merged.update(colors)
        return cls(colors=MappingProxyType(merged), labels=MappingProxyType(dict(labels)))

    def color(self, phase: str) -> str:
        if phase in self.colors:
            return self.colors[phase]
        upper = phase.upper()
        if upper in self.colors:
            return self.colors[upper]
        return self.default_color

    def label(self, phase: str) -> str:
        return self.labels.get(phase) or phase

    def phases(self) -> list[str]:
        """Union of labelled and coloured phase keys, labels first."""
        return list(dict.fromkeys([*self.labels, *self.colors]))

    def with_phase(self, phase: str, color: str = "#CCCCCC", label: str | None = None) -> "PhasePalette":
        colors = dict(self.colors)
        labels = dict(self.labels)
        colors[phase] = color
        labels[phase] = label or phase
        return PhasePalette(MappingProxyType(colors), MappingProxyType(labels), self.default_color)

    def renamed(self, phase: str, label: str) -> "PhasePalette":
        labels = dict(self.labels)
        labels[phase] = label
        return PhasePalette(self.colors, MappingProxyType(labels), self.default_color)

    def without_phase(self, phase: str) -> "PhasePalette":
        colors = {key: value for key, value in self.colors.items() if key != phase}
        labels = {key: value for key, value in self.labels.items() if key != phase}
        return PhasePalette(MappingProxyType(colors), MappingProxyType(labels), self.default_color)
