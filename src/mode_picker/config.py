"""YAML-based configuration for mode-picker.

Config lives at ``$XDG_CONFIG_HOME/mode-picker/config.yaml`` (default
``~/.config/mode-picker/config.yaml``) and controls:

- ``sources``: which mode sources the picker shows, in order
- ``actions``: per-source ordered menus of label -> action id; the first
  entry is the default action
- ``persistent_action``: per-source action id run by the preview key
- ``state_file``, ``theme``, ``debug``
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml

SOURCE_MAJOR = "major"
SOURCE_ACTIVE_MINOR = "active-minor"
SOURCE_INACTIVE_MINOR = "inactive-minor"

# Default config
DEFAULT_CONFIG: dict[str, Any] = {
    "state_file": "~/.config/mode-picker/modes.yaml",
    "debug": False,
    "theme": "default",
    "sources": [SOURCE_MAJOR, SOURCE_ACTIVE_MINOR, SOURCE_INACTIVE_MINOR],
    "actions": {
        SOURCE_MAJOR: {
            "Describe mode": "describe",
            "Find definition": "find-definition",
            "Set as default": "set-default",
        },
        SOURCE_ACTIVE_MINOR: {
            "Turn off": "turn-off",
            "Describe mode": "describe",
            "Find definition": "find-definition",
        },
        SOURCE_INACTIVE_MINOR: {
            "Turn on": "turn-on",
            "Describe mode": "describe",
            "Find definition": "find-definition",
        },
    },
    "persistent_action": {
        SOURCE_MAJOR: "describe",
        SOURCE_ACTIVE_MINOR: "describe",
        SOURCE_INACTIVE_MINOR: "describe",
    },
}


class ConfigError(ValueError):
    """Raised when configuration values are structurally invalid."""


def get_config_dir() -> Path:
    """Get the mode-picker config directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(xdg_config) / "mode-picker"


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.yaml"


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _merge_config(data: dict[str, Any]) -> dict[str, Any]:
    cfg = _deep_merge(copy.deepcopy(DEFAULT_CONFIG), data)
    # A user menu replaces the default one so entries can be dropped or reordered.
    user_actions = data.get("actions")
    if isinstance(user_actions, dict):
        for source_id, menu in user_actions.items():
            cfg["actions"][source_id] = menu
    return cfg


def load_config() -> dict[str, Any]:
    """Load the config file merged over the defaults.

    Missing or malformed files yield the defaults.
    """
    config_path = get_config_path()
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            return copy.deepcopy(DEFAULT_CONFIG)
        return _merge_config(data)
    except FileNotFoundError:
        return copy.deepcopy(DEFAULT_CONFIG)
    except (yaml.YAMLError, OSError):
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(cfg: dict[str, Any]) -> None:
    """Save the config file."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        yaml.dump(cfg, f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def get_state_path(cfg: dict[str, Any] | None = None) -> Path:
    """Resolve the mode state file (MODE_PICKER_STATE wins over config)."""
    override = os.environ.get("MODE_PICKER_STATE")
    if override:
        return Path(os.path.expanduser(override))
    if cfg is None:
        cfg = load_config()
    raw = cfg.get("state_file") or DEFAULT_CONFIG["state_file"]
    return Path(os.path.expanduser(str(raw)))


def is_debug(cfg: dict[str, Any] | None = None) -> bool:
    """Check the MODE_PICKER_DEBUG env var, then the ``debug`` key."""
    raw = os.environ.get("MODE_PICKER_DEBUG")
    if raw is not None:
        return raw.strip().lower() in {"1", "true", "yes", "on"}
    if cfg is None:
        cfg = load_config()
    return bool(cfg.get("debug", False))


def get_source_ids(cfg: dict[str, Any]) -> list[str]:
    """Return the configured source ids in display order."""
    sources = cfg.get("sources", [])
    if not isinstance(sources, list) or not all(isinstance(s, str) for s in sources):
        raise ConfigError("'sources' must be a list of source ids")
    return list(sources)


def get_action_menu(cfg: dict[str, Any], source_id: str) -> list[tuple[str, str]]:
    """Return the (label, action id) menu configured for a source."""
    menu = cfg.get("actions", {}).get(source_id)
    if not isinstance(menu, dict) or not menu:
        raise ConfigError(f"No action menu configured for source '{source_id}'")
    return [(str(label), str(action_id)) for label, action_id in menu.items()]


def get_persistent_action(cfg: dict[str, Any], source_id: str) -> str | None:
    """Return the persistent action id for a source, if any."""
    value = (cfg.get("persistent_action") or {}).get(source_id)
    return str(value) if value else None
