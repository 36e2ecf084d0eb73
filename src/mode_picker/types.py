"""Shared types for mode-picker."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class ModeKind(str, Enum):
    """Whether a mode is the single major mode or an independent minor mode."""

    MAJOR = "major"
    MINOR = "minor"

    @classmethod
    def from_string(cls, value: str) -> "ModeKind":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown mode kind: {value!r}") from None


@dataclass
class ModeInfo:
    """Everything the host knows about one mode.

    Attributes:
        name: Mode name (e.g. "flyspell-mode").
        kind: Major or minor.
        doc: Documentation text rendered by "describe".
        file: Path of the definition, if known.
        line: Line of the definition inside ``file``.
        active: Current state for minor modes. None means the mode has no
            boolean state and counts as inactive.
        toggle: False when the mode cannot be switched by name.
    """

    name: str
    kind: ModeKind = ModeKind.MINOR
    doc: str = ""
    file: str | None = None
    line: int | None = None
    active: bool | None = None
    toggle: bool = True

    @property
    def is_toggleable(self) -> bool:
        return self.kind is ModeKind.MINOR and self.toggle and isinstance(self.active, bool)


class ModeHost(Protocol):
    """Narrow interface the mode sources and actions use to reach the host."""

    def current_major_mode(self) -> str: ...

    def all_minor_modes(self) -> list[str]: ...

    def is_active(self, name: str) -> bool: ...

    def set_active(self, name: str, on: bool) -> None: ...

    def set_default_major_mode(self, name: str) -> None: ...

    def lookup(self, name: str) -> ModeInfo: ...
