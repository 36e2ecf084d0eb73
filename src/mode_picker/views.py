"""Terminal views for mode descriptions and definitions."""

from __future__ import annotations

import os
import shlex
import subprocess
from pathlib import Path

import readchar
from rich.console import Console, Group
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel

from .types import ModeInfo, ModeKind

console = Console(highlight=False)


def wait_for_continue(
    prompt: str = "[dim]Press Enter to continue...[/dim]",
    out: Console | None = None,
) -> None:
    """Wait for Enter, q, or Ctrl+C before returning."""
    (out or console).print(prompt)
    while True:
        try:
            key = readchar.readkey()
        except (KeyboardInterrupt, EOFError):
            return
        if key in ("\r", "\n", readchar.key.ENTER, "q", "Q", "\x03"):
            return


def _status_line(info: ModeInfo, active: bool) -> str:
    if info.kind is ModeKind.MAJOR:
        return "[bold]major mode[/bold]"
    if not info.is_toggleable:
        return "minor mode [dim](not toggleable)[/dim]"
    if active:
        return "minor mode [green]● enabled[/green]"
    return "minor mode [dim]○ disabled[/dim]"


def describe_panel(info: ModeInfo, active: bool = False) -> Panel:
    """Build the Rich panel shown by the describe action."""
    parts = [_status_line(info, active)]
    if info.file:
        where = info.file if info.line is None else f"{info.file}:{info.line}"
        parts.append(f"[dim]Defined in {escape(where)}[/dim]")
    header = "\n".join(parts)

    body = Markdown(info.doc) if info.doc.strip() else "[dim]Not documented.[/dim]"
    return Panel(
        Group(header, "", body),
        title=f"[bold]{escape(info.name)}[/bold]",
        title_align="left",
        border_style="color(24)",
    )


def show_description(
    info: ModeInfo,
    active: bool = False,
    *,
    out: Console | None = None,
    pause: bool = True,
) -> None:
    """Print a mode description, optionally waiting for a key afterwards."""
    target = out or console
    target.print(describe_panel(info, active))
    if pause:
        wait_for_continue(out=target)


def editor_command(path: Path, line: int | None = None) -> list[str]:
    """Build the $EDITOR command that opens ``path`` at ``line``."""
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR") or "vim"
    cmd = shlex.split(editor)
    if line is not None:
        cmd.append(f"+{line}")
    cmd.append(str(path))
    return cmd


def open_definition(info: ModeInfo, base_dir: Path | None = None) -> None:
    """Open the file defining a mode in $EDITOR.

    Raises:
        FileNotFoundError: If the mode has no recorded or existing definition.
    """
    if not info.file:
        raise FileNotFoundError(f"No definition recorded for {info.name}")
    path = Path(os.path.expanduser(info.file))
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    if not path.exists():
        raise FileNotFoundError(f"Definition of {info.name} not found: {path}")
    subprocess.run(editor_command(path, info.line), check=False)
