"""
Runtime configuration for trafficreg.

Settings come from three layers, highest priority first:

    1. Command-line flags (``--file``, ``--log-level`` ...)
    2. An optional JSON settings file (default ``trafficreg.json``)
    3. The dataclass defaults below

Package Location: src/trafficreg/config.py
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .records.models import TrafficRegError

DEFAULT_CONFIG_FILE = Path("trafficreg.json")

_PATH_KEYS = ("data_file", "log_file")


class ConfigError(TrafficRegError):
    """The settings file exists but cannot be used."""


@dataclass
class RegistryConfig:
    """Runtime configuration for the store, shell and CLI.

    Parameters
    ----------
    data_file:
        Backing text file holding one signal record per line.
    log_level:
        Level name for the ``trafficreg`` logger.
    log_file:
        When set, logs are appended here instead of stderr.
    json_logs:
        Emit single-line JSON log records.
    """

    data_file: Path = Path("traffic_signals.txt")
    log_level: str = "WARNING"
    log_file: Optional[Path] = None
    json_logs: bool = False

    def __post_init__(self) -> None:
        for key in _PATH_KEYS:
            value = getattr(self, key)
            if value is not None and not isinstance(value, Path):
                setattr(self, key, Path(value).expanduser())

    def merged(self, **overrides: Any) -> "RegistryConfig":
        """Return a copy with every non-``None`` override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


def load_config(path: Optional[Path] = None) -> RegistryConfig:
    """Read a JSON settings file into a ``RegistryConfig``.

    Args:
        path: Settings file.  ``None`` means ``DEFAULT_CONFIG_FILE``.

    Returns:
        Config populated from the file; defaults when the file is missing.
        Unknown keys are ignored.

    Raises:
        ConfigError: The file is not valid JSON or not a JSON object.
    """
    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_FILE
    if not cfg_path.exists():
        return RegistryConfig()

    try:
        with cfg_path.open(encoding="utf-8") as fh:
            raw = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Failed to parse {cfg_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{cfg_path} must contain a JSON object")

    known = {f.name for f in fields(RegistryConfig)}
    values: Dict[str, Any] = {k: v for k, v in raw.items() if k in known}
    return RegistryConfig(**values)
