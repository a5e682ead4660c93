"""
Hardware quirks forcing a backlight interface on known machines.

To add a rule from another package:

    from backlight_detect.protocol import BacklightType
    from backlight_detect.quirks import FixedAction, QuirkRule, dmi_match

    RULES = [
        QuirkRule(
            (dmi_match("sys_vendor", "ACME"), dmi_match("product_name", "Laptop 1")),
            FixedAction(BacklightType.NATIVE),
            ident="ACME Laptop 1",
        ),
    ]

and expose RULES via the "backlight_detect.quirks" entry point group.
"""

from .base import (
    FieldMatch,
    FixedAction,
    GatedAction,
    MatchKind,
    QuirkDatabase,
    QuirkRule,
    dmi_exact_match,
    dmi_match,
)
from .loader import load_database, load_plugin_rules
from .table import builtin_rules, default_database

__all__ = [
    "FieldMatch",
    "FixedAction",
    "GatedAction",
    "MatchKind",
    "QuirkDatabase",
    "QuirkRule",
    "builtin_rules",
    "default_database",
    "dmi_exact_match",
    "dmi_match",
    "load_database",
    "load_plugin_rules",
]
