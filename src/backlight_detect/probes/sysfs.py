"""DMI identity and platform traits read from sysfs."""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path

from ..log import log
from ..protocol import SystemIdentity

DMI_ID_DIR = "sys/class/dmi/id"
ACPI_DEVICES = "sys/bus/acpi/devices"

# ChromeOS embedded controller
CROS_EC_HIDS = ("GOOG0004", "GOOG000C")

# Windows 8 shipped in 2012; firmware from then on targets it
MODERN_FIRMWARE_YEAR = 2012


def _read(path: Path) -> str | None:
    try:
        value = path.read_text().strip()
    except OSError:
        return None
    return value or None


class SysfsIdentityProvider:
    """Reads the DMI strings the kernel exports in /sys/class/dmi/id."""

    def __init__(self, root: str | Path = "/"):
        self._dmi_dir = Path(root) / DMI_ID_DIR

    def identity(self) -> SystemIdentity:
        values = {name: _read(self._dmi_dir / name) for name in SystemIdentity.field_names()}
        if not any(values.values()):
            log("debug", "dmi_unavailable", path=str(self._dmi_dir))
        return SystemIdentity(**values)

    def bios_date(self) -> date | None:
        """Parse the BIOS release date (MM/DD/YYYY)."""
        raw = _read(self._dmi_dir / "bios_date")
        if raw is None:
            return None
        match = re.fullmatch(r"(\d{1,2})/(\d{1,2})/(\d{4})", raw)
        if not match:
            return None
        month, day, year = (int(g) for g in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None


class SysfsPlatform:
    """
    Platform generation heuristics from sysfs.

    The firmware _OSI level is not visible from userspace, so the BIOS
    release date stands in for it unless configured explicitly.
    """

    def __init__(self, root: str | Path = "/", modern_generation: bool | None = None):
        self._root = Path(root)
        self._modern_generation = modern_generation

    def is_modern_generation(self) -> bool:
        if self._modern_generation is not None:
            return self._modern_generation
        bios_date = SysfsIdentityProvider(self._root).bios_date()
        return bios_date is not None and bios_date.year >= MODERN_FIRMWARE_YEAR

    def acpi_device_present(self, hid: str) -> bool:
        devices = self._root / ACPI_DEVICES
        try:
            return any(entry.name.startswith(hid + ":") for entry in devices.iterdir())
        except OSError:
            return False

    def fixed_function_controller_present(self) -> bool:
        return any(self.acpi_device_present(hid) for hid in CROS_EC_HIDS)
