"""Configuration file handling."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from .cmdline import KERNEL_CMDLINE, read_kernel_cmdline
from .errors import ConfigError
from .log import LEVELS

CONFIG_ENV = "BACKLIGHT_DETECT_CONFIG"
CONFIG_FILE = Path.home() / ".config/backlight-detect/config.json"

DEFAULTS: dict[str, Any] = {
    "acpi_backlight": None,
    "sysfs_root": "/",
    "cmdline_file": str(KERNEL_CMDLINE),
    "log_level": None,
    "modern_generation": None,
}


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV)
    return Path(override) if override else CONFIG_FILE


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration from file, falling back to defaults."""
    config = dict(DEFAULTS)
    p = Path(path) if path is not None else config_path()

    if p.exists():
        try:
            with open(p) as f:
                data = json.load(f)
        except (OSError, ValueError):
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Top-level config must be a mapping")
        config.update(data)

    validate(config)
    return config


def validate(cfg: dict[str, Any]) -> None:
    for key in ("acpi_backlight", "log_level"):
        value = cfg.get(key)
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"{key} must be a string")

    for key in ("sysfs_root", "cmdline_file"):
        if not isinstance(cfg.get(key), str) or not cfg[key]:
            raise ConfigError(f"{key} must be a non-empty string")

    level = cfg.get("log_level")
    if level is not None and level.lower() not in LEVELS:
        raise ConfigError(f"log_level must be one of: {', '.join(LEVELS)}")

    modern = cfg.get("modern_generation")
    if modern is not None and not isinstance(modern, bool):
        raise ConfigError("modern_generation must be true, false or null")


def backlight_option(cfg: dict[str, Any]) -> str | None:
    """Resolve the acpi_backlight token: config file first, then the kernel command line."""
    token = cfg.get("acpi_backlight")
    if token:
        return token
    return read_kernel_cmdline(cfg.get("cmdline_file", KERNEL_CMDLINE))
