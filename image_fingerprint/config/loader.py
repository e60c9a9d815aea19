"""
Configuration loader: TOML file merged over defaults, then validated.
"""

from __future__ import annotations

import copy
import tomllib
from pathlib import Path
from typing import Any

from image_fingerprint.config.defaults import DEFAULTS
from image_fingerprint.services.canvas import RESAMPLE_FILTERS

LOG_LEVELS = {"debug", "info", "warning", "error", "critical"}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two dictionaries without mutating the originals."""
    merged: dict[str, Any] = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path) -> dict[str, Any]:
    """
    Load a TOML config file and merge it over defaults.
    Missing files return defaults; malformed files raise ValueError.
    """
    if path.is_dir():
        raise IsADirectoryError(f"Config path points to a directory: {path}")

    user_config: dict[str, Any] = {}
    if path.exists():
        try:
            with path.open("rb") as fh:
                user_config = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"Invalid config file {path}: {exc}") from exc

    config = _deep_merge(DEFAULTS, user_config)
    validate_config(config, source=path)
    return config


def _section(config: dict[str, Any], name: str, where: str) -> dict[str, Any]:
    section = config.get(name)
    if not isinstance(section, dict):
        raise ValueError(f"{where}: [{name}] must be a table")
    return section


def validate_config(config: dict[str, Any], source: Path | None = None) -> None:
    """Check the known keys; raise ValueError naming the first bad one."""
    where = str(source) if source is not None else "config"

    resample_filter = _section(config, "resample", where).get("filter")
    if not isinstance(resample_filter, str) or resample_filter.lower() not in RESAMPLE_FILTERS:
        choices = ", ".join(RESAMPLE_FILTERS)
        raise ValueError(f"{where}: resample.filter must be one of {choices}, got {resample_filter!r}")

    batch = _section(config, "batch", where)
    max_workers = batch.get("max_workers")
    if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
        raise ValueError(f"{where}: batch.max_workers must be a positive integer, got {max_workers!r}")
    recursive = batch.get("recursive")
    if not isinstance(recursive, bool):
        raise ValueError(f"{where}: batch.recursive must be true or false, got {recursive!r}")

    level = _section(config, "logging", where).get("level")
    if not isinstance(level, str) or level.lower() not in LOG_LEVELS:
        choices = ", ".join(sorted(LOG_LEVELS))
        raise ValueError(f"{where}: logging.level must be one of {choices}, got {level!r}")
