"""Candidate sources for the picker.

A Source is an independent, named group of candidates with its own action
menu. Sources are produced by zero-argument builder callables right before a
session opens, so their candidate lists are a snapshot of that moment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

from .errors import UnknownAction

logger = logging.getLogger(__name__)

Action = Callable[[list[Any]], object]
Transformer = Callable[[list["Candidate"]], Iterable["Candidate"]]
SourceBuilder = Callable[[], "Source"]


@dataclass(frozen=True)
class Candidate:
    """A selectable row: what is shown and what actions receive."""

    display: str
    value: Any = None

    def __post_init__(self):
        if self.value is None:
            object.__setattr__(self, "value", self.display)

    @classmethod
    def coerce(cls, raw: Any) -> "Candidate":
        """Build a Candidate from a string, a (display, value) pair, or a Candidate."""
        if isinstance(raw, Candidate):
            return raw
        if isinstance(raw, tuple) and len(raw) == 2:
            return cls(display=str(raw[0]), value=raw[1])
        return cls(display=str(raw), value=raw)


def sort_by_display(candidates: list[Candidate]) -> list[Candidate]:
    """Alphabetical transformer used by the mode sources."""
    return sorted(candidates, key=lambda c: c.display)


@dataclass
class Source:
    """A named candidate group plus its action configuration.

    Attributes:
        name: Header shown above the group; unique within a session.
        candidates: Ordered candidates (strings, pairs or Candidates).
        actions: Ordered (label, action) pairs; the first is the default.
        transformer: Optional one-time reordering applied at construction.
        persistent_action: Optional action that runs without closing.
        nomark: Disable marking; the cursor row is the only selection.
    """

    name: str
    candidates: Sequence[Any]
    actions: Sequence[tuple[str, Action]] | dict[str, Action]
    transformer: Transformer | None = None
    persistent_action: Action | None = None
    nomark: bool = False
    _menu: dict[str, Action] = field(init=False, repr=False)

    def __post_init__(self):
        if not self.name:
            raise ValueError("Source name cannot be empty")

        items = self.actions.items() if isinstance(self.actions, dict) else self.actions
        menu: dict[str, Action] = {}
        for label, action in items:
            if not callable(action):
                raise TypeError(f"Action '{label}' in source '{self.name}' is not callable")
            menu[label] = action
        if not menu:
            raise ValueError(f"Source '{self.name}' must have at least one action")
        self._menu = menu
        self.actions = list(menu.items())

        if self.persistent_action is not None and not callable(self.persistent_action):
            raise TypeError(f"Persistent action of source '{self.name}' is not callable")

        coerced = [Candidate.coerce(raw) for raw in self.candidates]
        if self.transformer is not None:
            coerced = list(self.transformer(coerced))
        self.candidates = _dedupe(self.name, coerced)

    @property
    def action_labels(self) -> list[str]:
        return list(self._menu)

    @property
    def default_label(self) -> str:
        return next(iter(self._menu))

    def get_action(self, label: str) -> Action:
        """Return the action bound to ``label``.

        Raises:
            UnknownAction: If the label is not in this source's menu.
        """
        try:
            return self._menu[label]
        except KeyError:
            raise UnknownAction(self.name, label, self.action_labels) from None

    def is_persistent(self, action: Action) -> bool:
        return self.persistent_action is not None and action is self.persistent_action


def _dedupe(source_name: str, candidates: list[Candidate]) -> list[Candidate]:
    seen: set[Any] = set()
    unique: list[Candidate] = []
    for cand in candidates:
        try:
            key = cand.value
            hash(key)
        except TypeError:
            key = cand.display
        if key in seen:
            logger.debug("Dropping duplicate candidate %r from %s", cand.display, source_name)
            continue
        seen.add(key)
        unique.append(cand)
    return unique
