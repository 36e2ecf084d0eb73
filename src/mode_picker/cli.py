"""CLI interface for mode-picker.

With no command, opens the interactive picker over the major mode, the
active minor modes and the inactive minor modes.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn

import yaml
from rich.console import Console

from rich_picker import AllSourcesFailure, InteractivePicker, SelectionSession, get_theme

from . import __version__, config
from .actions import ActionContext, ModeToggleError, turn_off, turn_on
from .host import ModeError, ModeStateError, YamlModeHost
from .sources import make_source_builders
from .views import show_description

console = Console(highlight=False)


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(msg: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {msg}")
    sys.exit(1)


def _state_path(args, cfg: dict | None = None) -> Path:
    if args.state:
        return Path(args.state).expanduser()
    return config.get_state_path(cfg)


def _load_host(args, cfg: dict) -> YamlModeHost:
    path = _state_path(args, cfg)
    try:
        return YamlModeHost.load(path)
    except ModeStateError as e:
        _fail(str(e))


def _open_session(args, cfg: dict, host: YamlModeHost, *, pause: bool = True) -> SelectionSession:
    ctx = ActionContext(host=host, console=console, pause=pause, base_dir=host.path.parent)
    try:
        builders = make_source_builders(cfg, ctx)
        return SelectionSession.open(builders)
    except config.ConfigError as e:
        _fail(str(e))
    except AllSourcesFailure as e:
        console.print(f"[red]Error:[/red] {e}")
        for failure in e.failures:
            console.print(f"  [dim]{failure}[/dim]")
        sys.exit(1)


def cmd_pick(args):
    """Open the interactive mode picker."""
    cfg = config.load_config()
    host = _load_host(args, cfg)
    session = _open_session(args, cfg, host)
    picker = InteractivePicker(
        session,
        title="Modes",
        console=console,
        theme=get_theme(cfg.get("theme")),
        prompt="mode",
    )
    picker.show()


def cmd_list(args):
    """Print the mode groups without opening the picker."""
    cfg = config.load_config()
    host = _load_host(args, cfg)
    session = _open_session(args, cfg, host, pause=False)

    for failure in session.build_failures:
        console.print(f"[yellow]Warning:[/yellow] {failure}")

    for source in session.sources:
        console.print(f"[bold]{source.name}[/bold] ({len(source.candidates)})")
        if not source.candidates:
            console.print("  [dim](none)[/dim]")
        for cand in source.candidates:
            console.print(f"  {cand.display}")
        console.print()
    session.cancel()


def cmd_describe(args):
    """Describe one mode."""
    cfg = config.load_config()
    host = _load_host(args, cfg)
    try:
        info = host.lookup(args.name)
    except ModeError as e:
        _fail(str(e))
    show_description(info, host.is_active(args.name), out=console, pause=False)


def _switch(args, on: bool) -> None:
    cfg = config.load_config()
    host = _load_host(args, cfg)
    ctx = ActionContext(host=host, console=console, pause=False)
    action = turn_on(ctx) if on else turn_off(ctx)
    try:
        action(list(args.names))
    except ModeToggleError as e:
        for failure in e.failures:
            console.print(f"[red]Error:[/red] {failure}")
        sys.exit(1)


def cmd_on(args):
    """Turn minor modes on."""
    _switch(args, True)


def cmd_off(args):
    """Turn minor modes off."""
    _switch(args, False)


def cmd_config(args):
    """Show or initialize the config file."""
    config_path = config.get_config_path()

    if args.init:
        if config_path.exists() and not args.force:
            print(f"Already exists: {config_path}")
            print("Use --force to overwrite.")
            return
        config.save_config(config.DEFAULT_CONFIG)
        print(f"Wrote default config: {config_path}")
        return

    status = "" if config_path.exists() else " (not created, showing defaults)"
    print(f"Config: {config_path}{status}")
    print(f"State:  {_state_path(args)}")
    print()
    print(yaml.dump(config.load_config(), default_flow_style=False, sort_keys=False).rstrip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mode-picker",
        description="Inspect and toggle major/minor modes",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--state", help="Mode state file (default from config)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.set_defaults(func=cmd_pick)

    subparsers = parser.add_subparsers(dest="command")

    list_p = subparsers.add_parser("list", help="List major, active and inactive modes")
    list_p.set_defaults(func=cmd_list)

    describe_p = subparsers.add_parser("describe", help="Describe a mode")
    describe_p.add_argument("name", help="Mode name")
    describe_p.set_defaults(func=cmd_describe)

    on_p = subparsers.add_parser("on", help="Turn minor modes on")
    on_p.add_argument("names", nargs="+", help="Minor mode names")
    on_p.set_defaults(func=cmd_on)

    off_p = subparsers.add_parser("off", help="Turn minor modes off")
    off_p.add_argument("names", nargs="+", help="Minor mode names")
    off_p.set_defaults(func=cmd_off)

    config_p = subparsers.add_parser("config", help="Show or initialize configuration")
    config_p.add_argument("--init", action="store_true", help="Write the default config file")
    config_p.add_argument("--force", action="store_true", help="Overwrite an existing config")
    config_p.set_defaults(func=cmd_config)

    return parser


def main(argv: list[str] | None = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.debug or config.is_debug())

    try:
        args.func(args)
    except KeyboardInterrupt:
        print()
        sys.exit(130)


if __name__ == "__main__":
    main()
