"""Pytest fixtures for mode-picker tests."""

import io

import pytest
import yaml
from rich.console import Console

from mode_picker import config
from mode_picker.actions import ActionContext
from mode_picker.host import ModeTable
from mode_picker.types import ModeInfo, ModeKind


@pytest.fixture
def console():
    """A Rich console writing to a buffer."""
    return Console(file=io.StringIO(), width=100, highlight=False, color_system=None)


@pytest.fixture
def mode_table():
    """text-mode with three minor modes; show-paren and abbrev are on."""
    modes = [
        ModeInfo("text-mode", ModeKind.MAJOR, doc="Major mode for editing text."),
        ModeInfo("fundamental-mode", ModeKind.MAJOR),
        ModeInfo("show-paren-mode", doc="Highlight matching parens.", active=True),
        ModeInfo("flyspell-mode", doc="On-the-fly spell checking.", active=False),
        ModeInfo("abbrev-mode", active=True),
    ]
    return ModeTable(modes, "text-mode")


@pytest.fixture
def ctx(mode_table, console):
    """Action context that never waits for a key."""
    return ActionContext(host=mode_table, console=console, pause=False)


@pytest.fixture
def config_env(tmp_path, monkeypatch):
    """Point the config dir at a temp directory and clear env overrides."""
    config_dir = tmp_path / "mode-picker"
    config_dir.mkdir()
    monkeypatch.setattr(config, "get_config_dir", lambda: config_dir)
    monkeypatch.delenv("MODE_PICKER_STATE", raising=False)
    monkeypatch.delenv("MODE_PICKER_DEBUG", raising=False)
    monkeypatch.delenv("MODE_PICKER_THEME", raising=False)
    return config_dir


@pytest.fixture
def state_file(tmp_path, mode_table):
    """A YAML state file holding the mode_table fixture."""
    path = tmp_path / "modes.yaml"
    path.write_text(yaml.dump(mode_table.to_dict(), sort_keys=False))
    return path
