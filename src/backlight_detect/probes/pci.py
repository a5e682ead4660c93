"""PCI bus lookups through sysfs."""

from __future__ import annotations

from pathlib import Path

from ..log import log

PCI_DEVICES = "sys/bus/pci/devices"

PCI_VENDOR_ID_TRIDENT = 0x1023


def _read_id(path: Path) -> int | None:
    try:
        return int(path.read_text().strip(), 16)
    except (OSError, ValueError):
        return None


def pci_device_present(vendor: int, device: int, root: str | Path = "/") -> bool:
    """Check whether a PCI device with the given vendor/device id is on the bus."""
    bus = Path(root) / PCI_DEVICES
    try:
        entries = sorted(bus.iterdir())
    except OSError as e:
        log("debug", "pci_scan_failed", path=str(bus), error=str(e))
        return False

    for entry in entries:
        if _read_id(entry / "vendor") == vendor and _read_id(entry / "device") == device:
            return True
    return False
