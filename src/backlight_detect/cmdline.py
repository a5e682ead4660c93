"""Parsing of the acpi_backlight= command line option."""

from __future__ import annotations

import shlex
from pathlib import Path

from .log import log
from .protocol import BacklightType

KERNEL_CMDLINE = Path("/proc/cmdline")
OPTION_NAME = "acpi_backlight"

# Exact, case-sensitive tokens
OPTION_VALUES = {
    "vendor": BacklightType.VENDOR,
    "video": BacklightType.VIDEO,
    "native": BacklightType.NATIVE,
    "nvidia_wmi_ec": BacklightType.NVIDIA_WMI_EC,
    "none": BacklightType.NONE,
}


def parse_backlight_option(token: str | None) -> BacklightType:
    """
    Map an acpi_backlight= value to a backlight type.

    Unknown or empty values fall back to autodetection (UNDEFINED).
    """
    if not token:
        return BacklightType.UNDEFINED
    result = OPTION_VALUES.get(token, BacklightType.UNDEFINED)
    if result is BacklightType.UNDEFINED:
        log("warn", "unknown_backlight_option", value=token, valid=",".join(OPTION_VALUES))
    return result


def read_kernel_cmdline(path: str | Path = KERNEL_CMDLINE) -> str | None:
    """Return the value of the last acpi_backlight= token, if any."""
    try:
        text = Path(path).read_text()
    except OSError as e:
        log("debug", "cmdline_unreadable", path=str(path), error=str(e))
        return None

    try:
        words = shlex.split(text)
    except ValueError:
        # Unbalanced quotes
        words = text.split()

    value = None
    prefix = OPTION_NAME + "="
    for word in words:
        if word.startswith(prefix):
            value = word[len(prefix):]
    return value
