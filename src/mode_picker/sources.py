"""The three mode sources shown by the picker.

Each builder queries the host when it runs, so the lists reflect host state
at the moment the picker opens.
"""

from __future__ import annotations

from typing import Any, Callable

from rich_picker import Action, Source, SourceBuilder, sort_by_display

from .actions import ActionContext, ActionSet
from .config import (
    SOURCE_ACTIVE_MINOR,
    SOURCE_INACTIVE_MINOR,
    SOURCE_MAJOR,
    ConfigError,
    get_action_menu,
    get_persistent_action,
    get_source_ids,
)
from .types import ModeHost

MAJOR_SOURCE_NAME = "Major mode"
ACTIVE_SOURCE_NAME = "Active minor modes"
INACTIVE_SOURCE_NAME = "Inactive minor modes"

Menu = list[tuple[str, Action]]
ModeSourceFactory = Callable[[ModeHost, Menu, "Action | None"], Source]


def build_major_mode_source(host: ModeHost, menu: Menu, persistent: Action | None) -> Source:
    return Source(
        name=MAJOR_SOURCE_NAME,
        candidates=[host.current_major_mode()],
        actions=menu,
        persistent_action=persistent,
        nomark=True,
    )


def build_active_minor_source(host: ModeHost, menu: Menu, persistent: Action | None) -> Source:
    names = host.all_minor_modes()
    return Source(
        name=ACTIVE_SOURCE_NAME,
        candidates=[name for name in names if host.is_active(name)],
        actions=menu,
        transformer=sort_by_display,
        persistent_action=persistent,
    )


def build_inactive_minor_source(host: ModeHost, menu: Menu, persistent: Action | None) -> Source:
    names = host.all_minor_modes()
    active = {name for name in names if host.is_active(name)}
    return Source(
        name=INACTIVE_SOURCE_NAME,
        candidates=[name for name in names if name not in active],
        actions=menu,
        transformer=sort_by_display,
        persistent_action=persistent,
    )


SOURCE_FACTORIES: dict[str, ModeSourceFactory] = {
    SOURCE_MAJOR: build_major_mode_source,
    SOURCE_ACTIVE_MINOR: build_active_minor_source,
    SOURCE_INACTIVE_MINOR: build_inactive_minor_source,
}


def make_source_builder(source_id: str, cfg: dict[str, Any], ctx: ActionContext) -> SourceBuilder:
    """Return a zero-argument builder for a configured source id.

    Configuration problems (unknown source or action ids) surface when the
    builder runs, so the session drops only the affected source.
    """

    def builder() -> Source:
        factory = SOURCE_FACTORIES.get(source_id)
        if factory is None:
            raise ConfigError(
                f"Unknown source '{source_id}' (known: {', '.join(SOURCE_FACTORIES)})"
            )
        actions = ActionSet(ctx)
        menu = actions.menu(get_action_menu(cfg, source_id))
        persistent_id = get_persistent_action(cfg, source_id)
        persistent = actions.get(persistent_id) if persistent_id else None
        return factory(ctx.host, menu, persistent)

    builder.source_id = source_id  # type: ignore[attr-defined]
    return builder


def make_source_builders(cfg: dict[str, Any], ctx: ActionContext) -> list[SourceBuilder]:
    """Builders for every source listed in the config, in order."""
    return [make_source_builder(source_id, cfg, ctx) for source_id in get_source_ids(cfg)]
