"""Hardware probes backed by Linux sysfs."""

from __future__ import annotations

from .acpi import AcpiNode, AcpiVideoProbe, video_backlight_capable
from .pci import pci_device_present
from .registry import VendorProbeRegistry
from .sysfs import SysfsIdentityProvider, SysfsPlatform
from .wmi import NvidiaWmiEcProbe, WmiTransport

__all__ = [
    "AcpiNode",
    "AcpiVideoProbe",
    "NvidiaWmiEcProbe",
    "SysfsIdentityProvider",
    "SysfsPlatform",
    "VendorProbeRegistry",
    "WmiTransport",
    "pci_device_present",
    "video_backlight_capable",
]
