"""Mode hosts: the table of known modes and their current state.

ModeTable keeps modes in memory; YamlModeHost loads the table from a YAML
state file and writes it back after every change.

State file layout:

    major_mode: text-mode
    default_major_mode: fundamental-mode
    modes:
      text-mode: {kind: major, doc: "...", file: lisp/text-mode.el, line: 42}
      show-paren-mode: {kind: minor, active: true}
      outline-minor-mode: {kind: minor, toggle: false}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from . import config
from .types import ModeInfo, ModeKind

logger = logging.getLogger(__name__)


class ModeError(RuntimeError):
    """Base error for host operations."""


class ModeNotFoundError(ModeError):
    """Raised when a name does not refer to a known mode."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown mode: {name}")


class ModeNotToggleableError(ModeError):
    """Raised when a mode has no toggle or no boolean state."""

    def __init__(self, name: str, reason: str = "has no toggle"):
        self.name = name
        super().__init__(f"Cannot toggle {name}: {reason}")


class ModeStateError(ModeError):
    """Raised when the state file cannot be read."""


def _mode_from_dict(name: str, data: Any) -> ModeInfo:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ModeStateError(f"Mode entry for {name} must be a mapping")
    try:
        kind = ModeKind.from_string(str(data.get("kind", "minor")))
        line = int(data["line"]) if data.get("line") is not None else None
    except (TypeError, ValueError) as e:
        raise ModeStateError(f"Invalid entry for {name}: {e}") from e
    active = data.get("active")
    return ModeInfo(
        name=name,
        kind=kind,
        doc=str(data.get("doc", "") or ""),
        file=data.get("file"),
        line=line,
        active=active if isinstance(active, bool) else None,
        toggle=bool(data.get("toggle", True)),
    )


def _mode_to_dict(info: ModeInfo) -> dict[str, Any]:
    data: dict[str, Any] = {"kind": info.kind.value}
    if info.doc:
        data["doc"] = info.doc
    if info.file:
        data["file"] = info.file
    if info.line is not None:
        data["line"] = info.line
    if info.active is not None:
        data["active"] = info.active
    if not info.toggle:
        data["toggle"] = False
    return data


class ModeTable:
    """In-memory mode host."""

    def __init__(
        self,
        modes: list[ModeInfo],
        major_mode: str,
        default_major_mode: str | None = None,
    ):
        self._modes: dict[str, ModeInfo] = {m.name: m for m in modes}
        if major_mode not in self._modes:
            self._modes[major_mode] = ModeInfo(name=major_mode, kind=ModeKind.MAJOR)
        self._major_mode = major_mode
        self._default_major_mode = default_major_mode

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModeTable":
        """Build a table from the state file layout."""
        if not isinstance(data, dict):
            raise ModeStateError("Mode state must be a mapping")
        major = data.get("major_mode")
        if not major:
            raise ModeStateError("Mode state has no major_mode")
        raw_modes = data.get("modes") or {}
        if not isinstance(raw_modes, dict):
            raise ModeStateError("'modes' must be a mapping of name to settings")
        modes = [_mode_from_dict(str(name), entry) for name, entry in raw_modes.items()]
        return cls(modes, str(major), data.get("default_major_mode"))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"major_mode": self._major_mode}
        if self._default_major_mode:
            data["default_major_mode"] = self._default_major_mode
        data["modes"] = {name: _mode_to_dict(info) for name, info in self._modes.items()}
        return data

    # ModeHost protocol

    def current_major_mode(self) -> str:
        return self._major_mode

    @property
    def default_major_mode(self) -> str | None:
        return self._default_major_mode

    def all_minor_modes(self) -> list[str]:
        return [name for name, info in self._modes.items() if info.kind is ModeKind.MINOR]

    def is_active(self, name: str) -> bool:
        info = self._modes.get(name)
        if info is None or info.kind is not ModeKind.MINOR:
            return False
        return info.active is True

    def lookup(self, name: str) -> ModeInfo:
        try:
            return self._modes[name]
        except KeyError:
            raise ModeNotFoundError(name) from None

    def set_active(self, name: str, on: bool) -> None:
        info = self.lookup(name)
        if info.kind is not ModeKind.MINOR:
            raise ModeNotToggleableError(name, "it is a major mode")
        if not info.toggle:
            raise ModeNotToggleableError(name)
        if not isinstance(info.active, bool):
            raise ModeNotToggleableError(name, "it has no on/off state")
        if info.active == on:
            return
        info.active = on
        logger.debug("%s -> %s", name, "on" if on else "off")
        self._changed()

    def set_default_major_mode(self, name: str) -> None:
        info = self.lookup(name)
        if info.kind is not ModeKind.MAJOR:
            raise ModeError(f"{name} is not a major mode")
        self._default_major_mode = name
        self._changed()

    def _changed(self) -> None:
        """Hook for subclasses that persist state."""


class YamlModeHost(ModeTable):
    """Mode host backed by a YAML state file."""

    def __init__(self, path: Path, table: ModeTable):
        super().__init__(
            list(table._modes.values()),
            table.current_major_mode(),
            table.default_major_mode,
        )
        self.path = path

    @classmethod
    def load(cls, path: Path | None = None) -> "YamlModeHost":
        """Load the state file.

        Raises:
            ModeStateError: If the file is missing or malformed.
        """
        path = path or config.get_state_path()
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise ModeStateError(f"Mode state file not found: {path}") from None
        except (yaml.YAMLError, OSError) as e:
            raise ModeStateError(f"Cannot read mode state {path}: {e}") from e
        return cls(path, ModeTable.from_dict(data or {}))

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def _changed(self) -> None:
        self.save()
