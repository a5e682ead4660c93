"""Plugin loading for extra quirk rules."""

from __future__ import annotations

import importlib.metadata
from pathlib import Path

from ..log import log
from .base import QuirkDatabase, QuirkRule
from .table import default_database

ENTRY_POINT_GROUP = "backlight_detect.quirks"


def load_plugin_rules() -> list[QuirkRule]:
    """
    Load quirk rules from entry points.

    Plugins can register via pyproject.toml:

    [project.entry-points."backlight_detect.quirks"]
    my_quirks = "my_package.quirks:RULES"

    The entry point may be a list of QuirkRule or a callable returning one.
    """
    rules: list[QuirkRule] = []
    try:
        eps = importlib.metadata.entry_points(group=ENTRY_POINT_GROUP)
    except Exception as e:
        log("debug", "quirk_plugins_unavailable", error=str(e))
        return rules

    for ep in eps:
        try:
            loaded = ep.load()
            if callable(loaded):
                loaded = loaded()
            plugin_rules = list(loaded)
        except Exception as e:
            log("warn", "quirk_plugin_failed", plugin=ep.name, error=str(e))
            continue
        if not all(isinstance(rule, QuirkRule) for rule in plugin_rules):
            log("warn", "quirk_plugin_invalid", plugin=ep.name)
            continue
        rules.extend(plugin_rules)
    return rules


def load_database(root: str | Path = "/", plugins: bool = True) -> QuirkDatabase:
    """Built-in rules, with plugin rules evaluated first."""
    database = default_database(root)
    if plugins:
        extra = load_plugin_rules()
        if extra:
            database = database.prepend(extra)
    return database
