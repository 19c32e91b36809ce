"""3-layer configuration system for Compass.

Loads and merges configuration from:
1. Default settings (built-in)
2. Config file (YAML)
3. CLI parameters (override)
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Optional

import yaml

from ..errors import ConfigurationError

DEFAULT_CONFIG: dict = {
    "catalogs": [],
    "plugins": [],
    "logging": {
        "level": "INFO",
        "json": False,
    },
}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts. Arrays are replaced, not merged."""
    result = {}
    for key in base:
        result[key] = base[key]
    for key, value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = value
    return result


def load_config_file(config_path: Path) -> dict:
    """Load a YAML config file. A missing or malformed file is fatal."""
    if not config_path.is_file():
        raise ConfigurationError(f"Config file not found: {config_path}")
    try:
        content = config_path.read_text(encoding="utf-8-sig")  # utf-8-sig strips BOM
        data = yaml.safe_load(content) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Unable to read config file {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    # A single `catalog:` is shorthand for a one-element `catalogs:` list
    catalog = data.pop("catalog", None)
    if catalog:
        data["catalogs"] = [catalog, *_as_path_list(data.get("catalogs"), "catalogs")]

    return _resolve_paths(data, config_path.parent)


def _as_path_list(value, key: str) -> list:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigurationError(f"'{key}' must be a path or a list of paths")
    return value


def _resolve_path(base_dir: Path, value, what: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{what} must be a path, got {value!r}")
    return str(base_dir / value)


def _resolve_paths(data: dict, base_dir: Path) -> dict:
    """Resolve catalog and plan directory paths relative to the config file."""
    resolved = dict(data)
    resolved["catalogs"] = [
        _resolve_path(base_dir, path, "Catalog path")
        for path in _as_path_list(data.get("catalogs"), "catalogs")
        if path
    ]
    plugins = data.get("plugins") or []
    if not isinstance(plugins, list):
        raise ConfigurationError("'plugins' must be a list")
    resolved_plugins = []
    for entry in plugins:
        if isinstance(entry, dict) and entry.get("evaluations-dir"):
            entry = {
                **entry,
                "evaluations-dir": _resolve_path(
                    base_dir, entry["evaluations-dir"], f"Plugin '{entry.get('id')}' evaluations-dir"
                ),
            }
        resolved_plugins.append(entry)
    resolved["plugins"] = resolved_plugins
    return resolved


def get_plugin_configs(config: dict) -> list[dict]:
    """Return the validated plugin entries of a config."""
    plugins = config.get("plugins") or []
    if not isinstance(plugins, list):
        raise ConfigurationError("'plugins' must be a list")

    result: list[dict] = []
    seen: set[str] = set()
    for index, entry in enumerate(plugins):
        if not isinstance(entry, dict) or not entry.get("id"):
            raise ConfigurationError(f"Plugin entry {index} has no 'id'")
        plugin_id = str(entry["id"])
        if plugin_id in seen:
            raise ConfigurationError(f"Plugin '{plugin_id}' is configured more than once")
        seen.add(plugin_id)
        result.append({
            "id": plugin_id,
            "type": entry.get("type"),
            "evaluations-dir": entry.get("evaluations-dir") or "",
        })
    return result


def get_effective_config(
    config_path: Optional[Path] = None,
    cli_overrides: Optional[dict] = None,
) -> dict:
    """Get the fully resolved configuration."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is not None:
        config = deep_merge(config, load_config_file(config_path))

    if cli_overrides:
        config = deep_merge(config, cli_overrides)

    config["_config_path"] = str(config_path) if config_path else ""

    return config
