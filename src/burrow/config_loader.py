"""Load BurrowConfig from burrow.yaml or burrow.toml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from burrow._errors import ConfigError
from burrow.config import BurrowConfig

CONFIG_FILENAMES: tuple[str, ...] = ("burrow.yaml", "burrow.yml", "burrow.toml")

_KNOWN_KEYS: frozenset[str] = frozenset({
    "routes_dir",
    "build_dir",
    "host",
    "port",
    "plugins",
    "reload_interval",
})


def load_config(root: Path, **overrides: object) -> BurrowConfig:
    """Load BurrowConfig from root, optionally merging burrow.yaml.

    Looks for burrow.yaml, burrow.yml, or burrow.toml in root. If found,
    loads and merges with overrides. Overrides take precedence; ``None``
    overrides are ignored so CLI defaults don't mask file values.

    Raises:
        ConfigError: If a config file exists but cannot be parsed.

    """
    file_config = _read_burrow_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    # Normalize field types the file formats can't express
    if "build_dir" in merged and not isinstance(merged["build_dir"], Path):
        merged["build_dir"] = Path(str(merged["build_dir"]))
    if "plugins" in merged:
        plugins = merged["plugins"]
        if isinstance(plugins, str) or not isinstance(plugins, (list, tuple)):
            msg = f"'plugins' must be a list of plugin names, got {type(plugins).__name__}"
            raise ConfigError(msg)
        merged["plugins"] = tuple(str(p) for p in plugins)
    return BurrowConfig(root=root, **merged)


def find_config_file(root: Path) -> Path | None:
    """Return the first config file present in root, or None."""
    for name in CONFIG_FILENAMES:
        path = root / name
        if path.is_file():
            return path
    return None


def _read_burrow_config(root: Path) -> dict[str, object]:
    """Read burrow config from yaml/toml if present. Returns empty dict otherwise."""
    path = find_config_file(root)
    if path is None:
        return {}
    if path.suffix == ".toml":
        return _parse_toml(path)
    return _parse_yaml(path)


def _parse_yaml(path: Path) -> dict[str, object]:
    """Parse YAML config."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Failed to read config file {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Config file {path} must contain a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    return _flatten_burrow_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    """Parse TOML config."""
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Failed to read config file {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_burrow_section(data)


def _flatten_burrow_section(data: dict[str, object]) -> dict[str, object]:
    """Extract burrow.* keys into top-level config."""
    result: dict[str, object] = {}
    section = data.get("burrow")
    if isinstance(section, dict):
        for k, v in section.items():
            if k in _KNOWN_KEYS:
                result[k] = v
    for k, v in data.items():
        if k != "burrow" and k in _KNOWN_KEYS:
            result[k] = v
    return result
