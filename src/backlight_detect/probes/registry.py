"""Vendor feature probe registry with platform detection."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from ..log import log

if TYPE_CHECKING:
    from ..protocol import VendorFeatureProbe


class VendorProbeRegistry:
    """
    Registry for vendor firmware probes.

    Supports:
    - Automatic platform detection
    - Manual probe selection
    - First available probe wins, in registration order
    """

    _probes: dict[str, type[VendorFeatureProbe]] = {}
    _instances: dict[tuple[str, str], VendorFeatureProbe] = {}

    @classmethod
    def register(cls, probe_class: type[VendorFeatureProbe]) -> type[VendorFeatureProbe]:
        """Register a probe class (decorator-friendly)."""
        cls._probes[probe_class.__name__] = probe_class
        return probe_class

    @classmethod
    def get_for_platform(
        cls, root: str | Path = "/", platform: str | None = None, fresh: bool = False
    ) -> VendorFeatureProbe | None:
        """
        Get the first available probe for the current/specified platform.

        Cached instances are shared by every caller asking for the same root.
        With fresh=True a new, uncached instance is created instead, so state
        set on it (a WMI transport) stays private to the caller.
        """
        platform = platform or sys.platform

        for name in cls._probes:
            try:
                instance = cls._probes[name](root) if fresh else cls._get_instance(name, root)
                if instance and instance.platform == platform and instance.is_available():
                    return instance
            except Exception as e:
                log("debug", "vendor_probe_unusable", probe=name, error=str(e))
        return None

    @classmethod
    def get_by_name(cls, name: str, root: str | Path = "/") -> VendorFeatureProbe | None:
        """Get a specific probe by class name."""
        return cls._get_instance(name, root)

    @classmethod
    def _get_instance(cls, name: str, root: str | Path) -> VendorFeatureProbe | None:
        """Get or create a probe instance for this sysfs root."""
        key = (name, str(root))
        if key not in cls._instances and name in cls._probes:
            try:
                cls._instances[key] = cls._probes[name](root)
            except Exception as e:
                log("debug", "vendor_probe_init_failed", probe=name, error=str(e))
                return None
        return cls._instances.get(key)

    @classmethod
    def list_probes(cls, root: str | Path = "/") -> list[dict]:
        """List all registered probes with status."""
        result = []
        for name in cls._probes:
            instance = cls._get_instance(name, root)
            if instance is None:
                continue
            try:
                available = instance.is_available()
            except Exception:
                available = False
            result.append(
                {
                    "name": name,
                    "display_name": instance.name,
                    "platform": instance.platform,
                    "available": available,
                }
            )
        return result

    @classmethod
    def clear(cls) -> None:
        """Clear all registered probes (for testing)."""
        cls._probes.clear()
        cls._instances.clear()
