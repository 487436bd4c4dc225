from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class YamlPath:
    """Helper to produce readable YAML path strings like columns[0].roles."""

    parts: tuple[str, ...] = ()

    def child(self, segment: str) -> "YamlPath":
        return YamlPath(self.parts + (segment,))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return ".".join(self.parts) if self.parts else "root"


def assert_allowed_keys(
    data: dict[str, Any],
    allowed: set[str],
    path: YamlPath,
    error: type[Exception],
) -> None:
    extras = sorted(str(key) for key in set(data.keys()) - allowed)
    if extras:
        raise error(f"{path}: unexpected fields {extras}")
