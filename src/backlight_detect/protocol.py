"""Backlight interface types and collaborator protocols."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Protocol, runtime_checkable


class BacklightType(Enum):
    """Interfaces that may control the display backlight."""

    UNDEFINED = "undefined"  # Not decided yet, never returned by a query
    VENDOR = "vendor"  # Vendor specific firmware methods
    VIDEO = "video"  # Generic ACPI video interface
    NATIVE = "native"  # GPU driver (raw) interface
    NVIDIA_WMI_EC = "nvidia_wmi_ec"  # Embedded controller via Nvidia WMI
    NONE = "none"  # No backlight control

    @property
    def is_defined(self) -> bool:
        return self is not BacklightType.UNDEFINED


@dataclass(frozen=True)
class SystemIdentity:
    """DMI strings identifying the machine. Any field may be missing."""

    sys_vendor: str | None = None
    product_name: str | None = None
    product_version: str | None = None
    board_name: str | None = None
    bios_version: str | None = None

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def get(self, field: str) -> str | None:
        if field not in self.field_names():
            raise KeyError(field)
        return getattr(self, field)

    def to_dict(self) -> dict[str, str | None]:
        return {name: getattr(self, name) for name in self.field_names()}


@dataclass(frozen=True)
class Decision:
    """Outcome of one backlight type query."""

    backlight_type: BacklightType
    auto_detected: bool
    reason: str


@runtime_checkable
class IdentityProvider(Protocol):
    """Source of the platform identity strings."""

    def identity(self) -> SystemIdentity:
        """Return the identity. Unavailable fields are None."""
        ...


@runtime_checkable
class CapabilityProbe(Protocol):
    """Walks the device namespace looking for ACPI video backlight support."""

    def scan(self) -> bool:
        """True if any video device advertises backlight control. Never raises."""
        ...


@runtime_checkable
class VendorFeatureProbe(Protocol):
    """Platform-gated firmware query for embedded controller brightness ownership."""

    @property
    def name(self) -> str:
        """Human-readable name for this probe."""
        ...

    @property
    def platform(self) -> str:
        """Platform this probe runs on (linux, win32, ...)."""
        ...

    def is_available(self) -> bool:
        """Check if the query mechanism exists on the current system."""
        ...

    def probe(self) -> bool:
        """True only if the embedded controller owns brightness. Never raises."""
        ...


@runtime_checkable
class PlatformTraits(Protocol):
    """Platform generation heuristics used by autodetection."""

    def is_modern_generation(self) -> bool:
        """Firmware written for Windows 8 or newer (~2012+)."""
        ...

    def fixed_function_controller_present(self) -> bool:
        """A known EC based chassis (ChromeOS EC) is present."""
        ...


@runtime_checkable
class BacklightConsumer(Protocol):
    """Owner of the generic ACPI video backlight interface."""

    def unregister(self) -> None:
        """Detach the interface. Must be safe to call when already detached."""
        ...


class NullConsumer:
    """Consumer that has nothing registered."""

    def unregister(self) -> None:
        return None
