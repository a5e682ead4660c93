"""Tests for probes/wmi.py and probes/registry.py."""

from __future__ import annotations

import struct

import pytest

from backlight_detect.probes import wmi
from backlight_detect.probes.registry import VendorProbeRegistry
from backlight_detect.probes.wmi import (
    WMI_BRIGHTNESS_GUID,
    NvidiaWmiEcProbe,
    WmiBrightnessMethod,
    WmiBrightnessMode,
    WmiBrightnessSource,
    pack_args,
    unpack_ret,
)


class StubTransport:
    """Answers every query with a fixed brightness source."""

    def __init__(self, source: int | None = None, error: Exception | None = None, reply: bytes | None = None):
        self.source = source
        self.error = error
        self.reply = reply
        self.calls: list[tuple] = []

    def evaluate_method(self, guid: str, instance: int, method_id: int, payload: bytes) -> bytes:
        self.calls.append((guid, instance, method_id, payload))
        if self.error is not None:
            raise self.error
        if self.reply is not None:
            return self.reply
        mode, val, _ret = struct.unpack_from("<3I", payload)
        return pack_args(mode, val, self.source)


@pytest.fixture
def x86(monkeypatch):
    monkeypatch.setattr(wmi._platform, "machine", lambda: "x86_64")


@pytest.fixture
def wmi_sysfs(sysfs, x86):
    sysfs.add_wmi_guid(WMI_BRIGHTNESS_GUID)
    return sysfs


class TestPacking:
    """Tests for the wmi_brightness_args layout."""

    def test_pack_size(self):
        assert len(pack_args(WmiBrightnessMode.GET)) == 24

    def test_unpack_ret(self):
        assert unpack_ret(pack_args(0, 0, WmiBrightnessSource.EC)) == 2

    def test_short_reply(self):
        with pytest.raises(ValueError):
            unpack_ret(b"\x00\x00")


class TestNvidiaWmiEcProbe:
    """Tests for NvidiaWmiEcProbe."""

    def test_ec_owner(self, wmi_sysfs):
        transport = StubTransport(WmiBrightnessSource.EC)
        assert NvidiaWmiEcProbe(wmi_sysfs.root, transport).probe() is True

        guid, instance, method_id, payload = transport.calls[0]
        assert guid == WMI_BRIGHTNESS_GUID
        assert instance == 0
        assert method_id == WmiBrightnessMethod.SOURCE
        assert struct.unpack_from("<3I", payload) == (WmiBrightnessMode.GET, 0, 0)

    @pytest.mark.parametrize("source", [WmiBrightnessSource.GPU, WmiBrightnessSource.AUX, 0, 99])
    def test_other_owner(self, wmi_sysfs, source: int):
        assert NvidiaWmiEcProbe(wmi_sysfs.root, StubTransport(source)).probe() is False

    def test_query_failure(self, wmi_sysfs):
        transport = StubTransport(error=OSError("AE_NOT_FOUND"))
        assert NvidiaWmiEcProbe(wmi_sysfs.root, transport).probe() is False

    def test_short_reply(self, wmi_sysfs):
        transport = StubTransport(reply=b"\x02")
        assert NvidiaWmiEcProbe(wmi_sysfs.root, transport).probe() is False

    def test_no_transport(self, wmi_sysfs):
        assert NvidiaWmiEcProbe(wmi_sysfs.root).probe() is False

    def test_guid_missing(self, sysfs, x86):
        transport = StubTransport(WmiBrightnessSource.EC)
        probe = NvidiaWmiEcProbe(sysfs.root, transport)
        assert probe.is_available() is False
        assert probe.probe() is False
        assert transport.calls == []

    def test_not_x86(self, wmi_sysfs, monkeypatch):
        monkeypatch.setattr(wmi._platform, "machine", lambda: "aarch64")
        transport = StubTransport(WmiBrightnessSource.EC)
        assert NvidiaWmiEcProbe(wmi_sysfs.root, transport).probe() is False
        assert transport.calls == []

    def test_set_transport(self, wmi_sysfs):
        probe = NvidiaWmiEcProbe(wmi_sysfs.root)
        probe.set_transport(StubTransport(WmiBrightnessSource.EC))
        assert probe.probe() is True


class TestVendorProbeRegistry:
    """Tests for VendorProbeRegistry."""

    def setup_method(self):
        """Save registry state before each test."""
        self._saved_probes = VendorProbeRegistry._probes.copy()
        self._saved_instances = VendorProbeRegistry._instances.copy()
        VendorProbeRegistry._instances.clear()

    def teardown_method(self):
        """Restore registry after each test."""
        VendorProbeRegistry._probes = self._saved_probes
        VendorProbeRegistry._instances = self._saved_instances

    def test_builtin_registered(self):
        assert "NvidiaWmiEcProbe" in VendorProbeRegistry._probes

    def test_register_returns_class(self):
        class Dummy:
            def __init__(self, root="/"):
                pass

        assert VendorProbeRegistry.register(Dummy) is Dummy
        assert VendorProbeRegistry._probes["Dummy"] is Dummy

    def test_get_for_platform_available(self, wmi_sysfs):
        probe = VendorProbeRegistry.get_for_platform(wmi_sysfs.root, platform="linux")
        assert isinstance(probe, NvidiaWmiEcProbe)

    def test_get_for_platform_unavailable(self, sysfs, x86):
        assert VendorProbeRegistry.get_for_platform(sysfs.root, platform="linux") is None

    def test_get_for_platform_wrong_platform(self, wmi_sysfs):
        assert VendorProbeRegistry.get_for_platform(wmi_sysfs.root, platform="win32") is None

    def test_instances_cached_per_root(self, wmi_sysfs):
        a = VendorProbeRegistry.get_by_name("NvidiaWmiEcProbe", wmi_sysfs.root)
        b = VendorProbeRegistry.get_by_name("NvidiaWmiEcProbe", wmi_sysfs.root)
        assert a is b
        assert VendorProbeRegistry.get_by_name("NvidiaWmiEcProbe", "/elsewhere") is not a

    def test_broken_probe_skipped(self, wmi_sysfs):
        class Broken:
            def __init__(self, root="/"):
                raise RuntimeError("no")

        VendorProbeRegistry.clear()
        VendorProbeRegistry.register(Broken)
        VendorProbeRegistry.register(NvidiaWmiEcProbe)
        probe = VendorProbeRegistry.get_for_platform(wmi_sysfs.root, platform="linux")
        assert isinstance(probe, NvidiaWmiEcProbe)

    def test_list_probes(self, wmi_sysfs):
        listed = VendorProbeRegistry.list_probes(wmi_sysfs.root)
        entry = next(p for p in listed if p["name"] == "NvidiaWmiEcProbe")
        assert entry == {
            "name": "NvidiaWmiEcProbe",
            "display_name": "Nvidia WMI EC",
            "platform": "linux",
            "available": True,
        }

    def test_fresh_instances_are_not_shared(self, wmi_sysfs):
        first = VendorProbeRegistry.get_for_platform(wmi_sysfs.root, platform="linux", fresh=True)
        second = VendorProbeRegistry.get_for_platform(wmi_sysfs.root, platform="linux", fresh=True)
        assert first is not second

        first.set_transport(StubTransport(WmiBrightnessSource.EC))
        assert first.probe() is True
        assert second.probe() is False
