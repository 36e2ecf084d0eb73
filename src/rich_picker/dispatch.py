"""Action dispatch for picker sources."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from .errors import ActionFailure
from .sources import Action, Source

logger = logging.getLogger(__name__)


@dataclass
class Notice:
    """A user-facing, non-blocking notification."""

    level: str  # "info", "warning" or "error"
    message: str


NoticeFn = Callable[[Notice], None]


@dataclass
class DispatchResult:
    """Outcome of one dispatched action."""

    source_name: str
    label: str
    values: list[Any] = field(default_factory=list)
    persistent: bool = False
    error: ActionFailure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ActionDispatcher:
    """Runs source actions and turns their failures into notices."""

    def __init__(self, notify: NoticeFn | None = None):
        self._notify = notify

    def dispatch(self, source: Source, label: str, values: Sequence[Any]) -> DispatchResult:
        """Look up ``label`` in the source menu and run it once with ``values``.

        Raises:
            UnknownAction: If ``label`` is not in the source's menu.
            ValueError: If ``values`` is empty.
        """
        action = source.get_action(label)
        return self.invoke(source, label, action, values)

    def invoke(
        self,
        source: Source,
        label: str,
        action: Action,
        values: Sequence[Any],
        *,
        persistent: bool | None = None,
    ) -> DispatchResult:
        """Run ``action`` with the full ordered list of selected values.

        ``persistent`` defaults to whether ``action`` is the source's
        persistent action.
        """
        if not values:
            raise ValueError("dispatch requires at least one selected candidate")

        selected = list(values)
        result = DispatchResult(
            source_name=source.name,
            label=label,
            values=selected,
            persistent=source.is_persistent(action) if persistent is None else persistent,
        )
        logger.debug("Dispatching %r on %s with %r", label, source.name, selected)
        try:
            action(selected)
        except Exception as exc:
            failure = ActionFailure(source.name, label, exc)
            logger.warning("Action %r on %s failed: %s", label, source.name, exc, exc_info=True)
            result.error = failure
            if self._notify is not None:
                self._notify(Notice("error", str(failure)))
        return result
