"""Shared pytest fixtures for backlight-detect tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from backlight_detect.engine import DetectionEngine
from backlight_detect.protocol import SystemIdentity
from backlight_detect.quirks import QuirkDatabase


# =============================================================================
# Fake sysfs tree
# =============================================================================


class FakeSysfs:
    """Builds a minimal sysfs layout below a temporary root."""

    def __init__(self, root: Path):
        self.root = root

    def _write(self, rel: str, content: str) -> Path:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def set_dmi(self, **fields: str) -> None:
        for name, value in fields.items():
            self._write(f"sys/class/dmi/id/{name}", value + "\n")

    def add_pci(self, slot: str, vendor: int, device: int) -> Path:
        self._write(f"sys/bus/pci/devices/{slot}/vendor", f"0x{vendor:04x}\n")
        self._write(f"sys/bus/pci/devices/{slot}/device", f"0x{device:04x}\n")
        return self.root / "sys/bus/pci/devices" / slot

    def acpi_node(self, rel: str, hid: str | None = None) -> Path:
        node = self.root / "sys/devices/LNXSYSTM:00" / rel
        node.mkdir(parents=True, exist_ok=True)
        if hid is not None:
            (node / "hid").write_text(hid + "\n")
        return node

    def add_acpi_video(
        self,
        rel: str = "LNXSYBUS:00/PNP0A08:00/LNXVIDEO:00",
        physical: bool = True,
        outputs: bool = True,
    ) -> Path:
        """Video bus laid out as the kernel does: outputs are "device:NN" children with an adr."""
        node = self.acpi_node(rel, hid="LNXVIDEO")
        if physical:
            pci = self.add_pci("0000:00:02.0", 0x8086, 0x0166)
            (node / "physical_node").symlink_to(pci)
        if outputs:
            for index, adr in ((1, "0x00000100"), (2, "0x00000400")):
                output = node / f"device:{index:02x}"
                output.mkdir(exist_ok=True)
                (output / "adr").write_text(adr + "\n")
                (output / "path").write_text(f"\\_SB_.PCI0.GFX0.DD{index:02d}\n")
        return node

    def add_acpi_device(self, name: str) -> None:
        (self.root / "sys/bus/acpi/devices" / name).mkdir(parents=True, exist_ok=True)

    def add_wmi_guid(self, guid: str) -> None:
        (self.root / "sys/bus/wmi/devices" / f"{guid}-0").mkdir(parents=True, exist_ok=True)

    def set_cmdline(self, text: str) -> Path:
        return self._write("proc/cmdline", text + "\n")


@pytest.fixture
def sysfs(tmp_path: Path) -> FakeSysfs:
    """An empty fake sysfs root."""
    return FakeSysfs(tmp_path)


# =============================================================================
# Fake collaborators for the engine
# =============================================================================


class FakeIdentity:
    def __init__(self, identity: SystemIdentity | None = None):
        self._identity = identity or SystemIdentity()
        self.calls = 0

    def identity(self) -> SystemIdentity:
        self.calls += 1
        return self._identity


class FakeCapability:
    def __init__(self, capable: bool = False):
        self.capable = capable
        self.calls = 0

    def scan(self) -> bool:
        self.calls += 1
        return self.capable


class FakeVendorProbe:
    name = "fake"
    platform = "linux"

    def __init__(self, present: bool = False):
        self.present = present
        self.calls = 0

    def is_available(self) -> bool:
        return True

    def probe(self) -> bool:
        self.calls += 1
        return self.present


class FakePlatform:
    def __init__(self, modern: bool = False, cros_ec: bool = False):
        self.modern = modern
        self.cros_ec = cros_ec

    def is_modern_generation(self) -> bool:
        return self.modern

    def fixed_function_controller_present(self) -> bool:
        return self.cros_ec


class RecordingConsumer:
    def __init__(self):
        self.unregister_calls = 0

    def unregister(self) -> None:
        self.unregister_calls += 1


@pytest.fixture
def recording_consumer() -> RecordingConsumer:
    return RecordingConsumer()


@pytest.fixture
def make_engine():
    """Factory for engines over fake collaborators."""

    def _make(
        identity: SystemIdentity | None = None,
        video_capable: bool = False,
        wmi_ec: bool = False,
        modern: bool = False,
        cros_ec: bool = False,
        option: str | None = None,
        rules=(),
        consumer=None,
    ) -> DetectionEngine:
        return DetectionEngine(
            identity_provider=FakeIdentity(identity),
            capability_probe=FakeCapability(video_capable),
            platform=FakePlatform(modern=modern, cros_ec=cros_ec),
            quirks=QuirkDatabase(rules),
            vendor_probe=FakeVendorProbe(wmi_ec),
            option=option,
            consumer=consumer,
        )

    return _make
