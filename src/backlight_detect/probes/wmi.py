"""Nvidia WMI embedded controller brightness probe."""

from __future__ import annotations

import platform as _platform
import struct
from enum import IntEnum
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..log import log
from .registry import VendorProbeRegistry

WMI_BRIGHTNESS_GUID = "603E9613-EF25-4338-A3D0-C46177516DB7"
WMI_DEVICES = "sys/bus/wmi/devices"

X86_MACHINES = {"x86_64", "amd64", "i386", "i486", "i586", "i686"}

# struct wmi_brightness_args: u32 mode, val, ret, ignored[3]
_ARGS = struct.Struct("<6I")


class WmiBrightnessMethod(IntEnum):
    LEVEL = 1
    SOURCE = 2


class WmiBrightnessMode(IntEnum):
    GET = 0
    SET = 1
    GET_MAX_LEVEL = 2


class WmiBrightnessSource(IntEnum):
    GPU = 1
    EC = 2
    AUX = 3


@runtime_checkable
class WmiTransport(Protocol):
    """Synchronous WMI method evaluation."""

    def evaluate_method(self, guid: str, instance: int, method_id: int, payload: bytes) -> bytes:
        """Evaluate a WMI method and return the output buffer. Raises on failure."""
        ...


def pack_args(mode: int, val: int = 0, ret: int = 0) -> bytes:
    return _ARGS.pack(mode, val, ret, 0, 0, 0)


def unpack_ret(buf: bytes) -> int:
    """Return the `ret` field of a wmi_brightness_args reply."""
    if len(buf) < 12:
        raise ValueError(f"WMI reply too short: {len(buf)} bytes")
    return struct.unpack_from("<3I", buf)[2]


@VendorProbeRegistry.register
class NvidiaWmiEcProbe:
    """
    Asks the Nvidia WMI brightness interface which component owns brightness.

    Only meaningful on x86 machines exposing the WMI brightness GUID. The
    query itself goes through an injected WmiTransport; without one the
    probe reports False.
    """

    def __init__(self, root: str | Path = "/", transport: WmiTransport | None = None):
        self._root = Path(root)
        self._transport = transport

    def set_transport(self, transport: WmiTransport | None) -> None:
        self._transport = transport

    @property
    def name(self) -> str:
        return "Nvidia WMI EC"

    @property
    def platform(self) -> str:
        return "linux"

    def _is_x86(self) -> bool:
        return _platform.machine().lower() in X86_MACHINES

    def _guid_present(self) -> bool:
        devices = self._root / WMI_DEVICES
        try:
            return any(entry.name.upper().startswith(WMI_BRIGHTNESS_GUID) for entry in devices.iterdir())
        except OSError:
            return False

    def is_available(self) -> bool:
        return self._is_x86() and self._guid_present()

    def probe(self) -> bool:
        if not self.is_available():
            return False
        if self._transport is None:
            log("debug", "wmi_no_transport", guid=WMI_BRIGHTNESS_GUID)
            return False

        try:
            reply = self._transport.evaluate_method(
                WMI_BRIGHTNESS_GUID,
                0,
                WmiBrightnessMethod.SOURCE,
                pack_args(WmiBrightnessMode.GET),
            )
            source = unpack_ret(reply)
        except Exception as e:
            log("debug", "wmi_query_failed", guid=WMI_BRIGHTNESS_GUID, error=str(e))
            return False

        # EC owns brightness: nvidia-wmi-ec-backlight, otherwise the GPU driver(s)
        return source == WmiBrightnessSource.EC
