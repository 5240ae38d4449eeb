"""
Configuration management for TrackSmith.

Settings live in a nested dictionary. User files (YAML or JSON) are merged
over ``DEFAULT_CONFIG`` so a file only needs the keys it changes. Values are
addressed with dotted keys such as ``"network.precision"``.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "crs": {
        "wkt_version": "WKT2_2019",
        "default": "EPSG:4326",
    },
    "network": {
        "directed": True,
        # Decimal places used to match line endpoints; None means exact match
        "precision": None,
        "simplify": False,
        "weight": "length",
    },
    "tracks": {
        "key": ["name", "year"],
        "time_col": "time",
        "x": "long",
        "y": "lat",
        "crs": "EPSG:4326",
        "min_points": 2,
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s %(name)s %(levelname)s: %(message)s",
    },
}

_MISSING = object()


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class ConfigManager:
    """
    Nested configuration with dotted-key access.

    Parameters
    ----------
    values : dict, optional
        Settings merged over the defaults.
    source : Path, optional
        File the settings were read from, kept for log messages.
    """

    def __init__(
        self, values: dict[str, Any] | None = None, source: Path | None = None
    ):
        self._values = _deep_merge(DEFAULT_CONFIG, values or {})
        self.source = source

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key.

        Parameters
        ----------
        key : str
            Dotted path, e.g. ``"tracks.min_points"``
        default : any
            Returned when the key does not exist

        Returns
        -------
        any
            Stored value or ``default``
        """
        node: Any = self._values
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a dotted key, creating intermediate sections as needed."""
        parts = key.split(".")
        node = self._values
        for part in parts[:-1]:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise KeyError(f"Cannot set '{key}': '{part}' is not a section")
        node[parts[-1]] = value

    def section(self, name: str) -> dict[str, Any]:
        """Return a copy of a top-level section."""
        return copy.deepcopy(self._values.get(name, {}))

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._values)

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def __repr__(self) -> str:
        source = f", source={self.source}" if self.source else ""
        return f"ConfigManager(sections={list(self._values)}{source})"


def load_config(path: str | Path) -> ConfigManager:
    """
    Load configuration from a YAML or JSON file.

    Parameters
    ----------
    path : str or Path
        Path to a ``.yaml``, ``.yml`` or ``.json`` file

    Returns
    -------
    ConfigManager
        Settings from the file merged over the defaults

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    ValueError
        If the suffix is unsupported or the file is not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    with open(path) as f:
        if suffix in (".yaml", ".yml"):
            values = yaml.safe_load(f)
        elif suffix == ".json":
            values = json.load(f)
        else:
            raise ValueError(
                f"Unsupported config file format: {suffix}. Use .yaml, .yml, or .json"
            )

    if values is None:
        values = {}
    if not isinstance(values, dict):
        raise ValueError(f"Config file {path} must contain a mapping at top level")

    logger.info(f"Loaded config from {path}")
    return ConfigManager(values, source=path)


_global_config: ConfigManager | None = None


def get_config() -> ConfigManager:
    """Return the process-wide configuration, creating it on first use."""
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager()
    return _global_config


def set_config(config: ConfigManager | None) -> None:
    """Replace the process-wide configuration (None resets to defaults)."""
    global _global_config
    _global_config = config


def resolve_config(config: ConfigManager | None) -> ConfigManager:
    return config if config is not None else get_config()


def configure_logging(
    level: str | int | None = None, config: ConfigManager | None = None
) -> None:
    """Configure root logging for scripts and examples.

    Library modules never call this; it is meant for entry points.
    """
    config = resolve_config(config)
    level = level or config.get("logging.level", "INFO")
    logging.basicConfig(level=level, format=config.get("logging.format"))
