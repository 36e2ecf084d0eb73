"""Mode actions available to the picker menus.

Every action receives the full list of selected mode names. Actions are
built per source from a factory registry so the configuration can refer
to them by id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from rich.console import Console

from rich_picker import Action

from .config import ConfigError
from .host import ModeError
from .types import ModeHost
from .views import open_definition, show_description, wait_for_continue

ACTION_DESCRIBE = "describe"
ACTION_FIND_DEFINITION = "find-definition"
ACTION_TURN_ON = "turn-on"
ACTION_TURN_OFF = "turn-off"
ACTION_TOGGLE = "toggle"
ACTION_SET_DEFAULT = "set-default"


class ModeToggleError(ModeError):
    """Raised when one or more modes in a batch could not be switched."""

    def __init__(self, failures: list[str]):
        self.failures = failures
        super().__init__("; ".join(failures))


@dataclass
class ActionContext:
    """What actions need from the outside world."""

    host: ModeHost
    console: Console = field(default_factory=lambda: Console(highlight=False))
    pause: bool = True
    base_dir: Path | None = None


ActionFactory = Callable[[ActionContext], Action]


def describe(ctx: ActionContext) -> Action:
    def _describe(names: list[str]) -> None:
        for name in names:
            info = ctx.host.lookup(name)
            show_description(info, ctx.host.is_active(name), out=ctx.console, pause=False)
        if ctx.pause:
            wait_for_continue(out=ctx.console)

    return _describe


def find_definition(ctx: ActionContext) -> Action:
    def _find(names: list[str]) -> None:
        for name in names:
            open_definition(ctx.host.lookup(name), ctx.base_dir)

    return _find


def _switch_all(ctx: ActionContext, names: list[str], state: Callable[[str], bool]) -> None:
    failures: list[str] = []
    for name in names:
        try:
            on = state(name)
            ctx.host.set_active(name, on)
        except ModeError as e:
            failures.append(str(e))
            continue
        ctx.console.print(f"{name} {'[green]enabled[/green]' if on else '[dim]disabled[/dim]'}")
    if failures:
        raise ModeToggleError(failures)


def turn_on(ctx: ActionContext) -> Action:
    return lambda names: _switch_all(ctx, names, lambda _name: True)


def turn_off(ctx: ActionContext) -> Action:
    return lambda names: _switch_all(ctx, names, lambda _name: False)


def toggle(ctx: ActionContext) -> Action:
    return lambda names: _switch_all(ctx, names, lambda name: not ctx.host.is_active(name))


def set_default(ctx: ActionContext) -> Action:
    def _set_default(names: list[str]) -> None:
        if len(names) != 1:
            raise ModeError(f"Only one default major mode can be set, got {len(names)}")
        name = names[0]
        ctx.host.set_default_major_mode(name)
        ctx.console.print(f"Default major mode: [bold]{name}[/bold]")

    return _set_default


ACTION_FACTORIES: dict[str, ActionFactory] = {
    ACTION_DESCRIBE: describe,
    ACTION_FIND_DEFINITION: find_definition,
    ACTION_TURN_ON: turn_on,
    ACTION_TURN_OFF: turn_off,
    ACTION_TOGGLE: toggle,
    ACTION_SET_DEFAULT: set_default,
}


class ActionSet:
    """Builds each action id at most once so identical ids share one callable."""

    def __init__(self, ctx: ActionContext):
        self._ctx = ctx
        self._built: dict[str, Action] = {}

    def get(self, action_id: str) -> Action:
        """Return the action for ``action_id``.

        Raises:
            ConfigError: If no factory is registered under that id.
        """
        if action_id not in self._built:
            try:
                factory = ACTION_FACTORIES[action_id]
            except KeyError:
                raise ConfigError(
                    f"Unknown action id '{action_id}' "
                    f"(known: {', '.join(sorted(ACTION_FACTORIES))})"
                ) from None
            self._built[action_id] = factory(self._ctx)
        return self._built[action_id]

    def menu(self, entries: list[tuple[str, str]]) -> list[tuple[str, Action]]:
        return [(label, self.get(action_id)) for label, action_id in entries]
