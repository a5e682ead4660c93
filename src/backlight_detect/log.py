"""Event logging for backlight-detect.

Pretty human-readable lines on a terminal, Loki-style JSON lines otherwise.
Everything goes to stderr so stdout stays clean for command output.
"""

from __future__ import annotations

import json
import os
import sys
from datetime import datetime

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}
DEFAULT_LEVEL = "warn"
LEVEL_ENV = "BACKLIGHT_DETECT_LOG"

_threshold = LEVELS.get(os.environ.get(LEVEL_ENV, "").lower(), LEVELS[DEFAULT_LEVEL])


def set_level(level: str) -> None:
    """Set the minimum level that gets emitted."""
    global _threshold
    if level.lower() not in LEVELS:
        raise ValueError(f"Unknown log level: {level}")
    _threshold = LEVELS[level.lower()]


def get_level() -> str:
    return next(name for name, value in LEVELS.items() if value == _threshold)


def is_enabled(level: str) -> bool:
    return LEVELS.get(level, 0) >= _threshold


def _log_json(level: str, msg: str, **kwargs) -> None:
    """Output a JSON log line (Loki-style)."""
    entry = {"ts": datetime.now().isoformat(), "level": level, "msg": msg, **kwargs}
    print(json.dumps(entry, default=str), file=sys.stderr, flush=True)


def _log_pretty(level: str, msg: str, **kwargs) -> None:
    """Output a human-readable log line with rich formatting."""
    from rich.console import Console

    console = Console(stderr=True)

    ts = datetime.now().strftime("%H:%M:%S")
    level_colors = {"debug": "dim", "info": "green", "error": "red", "warn": "yellow"}
    color = level_colors.get(level, "white")

    fields = " ".join(f"[cyan]{k}[/]={v}" for k, v in kwargs.items())
    console.print(f"[dim]{ts}[/] [bold {color}]{msg}[/] {fields}".rstrip(), highlight=False)


def log(level: str, msg: str, **kwargs) -> None:
    """Log an event - pretty for TTY, JSON for pipes."""
    if not is_enabled(level):
        return
    if sys.stderr.isatty():
        _log_pretty(level, msg, **kwargs)
    else:
        _log_json(level, msg, **kwargs)
