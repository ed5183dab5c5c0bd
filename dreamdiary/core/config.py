#!/usr/bin/env python3
"""
config.py
-------------------
YAML configuration for the dream diary.

A config file is optional; missing keys fall back to the defaults in
paths.py. Example ``dreamdiary.yaml``::

    db_path: ~/dreams/dreamdiary.db
    log_dir: ~/dreams/logs
    per_page: 12
    overflow_pool_size: 10
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

# --- Third party imports ---
import yaml

# --- Local imports ---
from .exceptions import ConfigError
from .paths import CONFIG_PATH, DB_PATH, LOG_DIR

DEFAULT_PER_PAGE = 12
DEFAULT_OVERFLOW_POOL_SIZE = 10


@dataclass(frozen=True)
class DiaryConfig:
    """
    Runtime settings.

    Attributes:
        db_path: SQLite database file
        log_dir: Directory for rotating log files
        per_page: Default page size for dream listings
        overflow_pool_size: How many random dreams feed the overflow sampler
    """

    db_path: Path = DB_PATH
    log_dir: Path = LOG_DIR
    per_page: int = DEFAULT_PER_PAGE
    overflow_pool_size: int = DEFAULT_OVERFLOW_POOL_SIZE

    def with_overrides(self, **overrides: Any) -> "DiaryConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **_coerce(changes))


def _coerce(raw: Dict[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(DiaryConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown config key(s): {', '.join(unknown)}")

    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if key in ("db_path", "log_dir"):
            if not isinstance(value, (str, Path)):
                raise ConfigError(f"'{key}' must be a path, got {type(value).__name__}")
            values[key] = Path(value).expanduser()
        else:
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"'{key}' must be a positive integer, got {value!r}")
            values[key] = value
    return values


def load_config(path: Optional[Union[str, Path]] = None) -> DiaryConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Config file. Defaults to CONFIG_PATH; a missing default file
            yields the built-in defaults, a missing explicit file is an error.

    Returns:
        DiaryConfig with file values applied over the defaults

    Raises:
        ConfigError: If the file is unreadable, not a mapping, or invalid
    """
    explicit = path is not None
    config_path = Path(path).expanduser() if explicit else CONFIG_PATH

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        return DiaryConfig()

    try:
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}")

    if raw is None:
        return DiaryConfig()
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must contain a mapping: {config_path}")

    return DiaryConfig(**_coerce(raw))
