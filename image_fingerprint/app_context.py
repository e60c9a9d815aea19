"""
Application bootstrap helpers.

Responsibilities:
- Locate/load configuration.
- Configure logging under the config directory.
- Build the rendering backend from the configured resample filter.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from image_fingerprint.config.loader import load_config
from image_fingerprint.logging.setup import setup_logging
from image_fingerprint.services.canvas import DEFAULT_FILTER, PillowBackend

ENV_CONFIG_DIR = "IMAGE_FINGERPRINT_CONFIG_DIR"

LOGGER = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Settings and collaborators shared by the command-line entry points."""

    config: dict[str, Any]
    config_path: Path
    log_path: Path
    backend: PillowBackend
    max_workers: int
    recursive: bool


def default_config_dir() -> Path:
    """Return the directory to hold config files, honoring env override."""
    override = os.getenv(ENV_CONFIG_DIR)
    if override:
        return Path(override)
    return Path.home() / ".image_fingerprint"


def default_config_path() -> Path:
    return default_config_dir() / "config.toml"


def build_backend(config: dict[str, Any]) -> PillowBackend:
    """Create the Pillow backend from a config dict; unknown filter names raise ValueError."""
    name = str(config.get("resample", {}).get("filter", DEFAULT_FILTER))
    return PillowBackend(resample_filter=name)


def initialize_app(config_path: Path | None = None, log_dir: Path | None = None) -> AppContext:
    """
    Load configuration, set up logging, and return an AppContext.
    """
    config_path = config_path or default_config_path()
    config = load_config(config_path)

    log_dir = log_dir or config_path.parent / "logs"
    log_path = setup_logging(log_dir=log_dir, level=config["logging"]["level"])

    backend = build_backend(config)
    batch_cfg = config["batch"]
    context = AppContext(
        config=config,
        config_path=config_path,
        log_path=log_path,
        backend=backend,
        max_workers=batch_cfg["max_workers"],
        recursive=batch_cfg["recursive"],
    )
    LOGGER.debug("Loaded config from %s (filter=%s)", config_path, backend.filter_name)
    return context
