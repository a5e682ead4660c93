"""ACPI namespace walk for generic video backlight support."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from ..log import log

ACPI_NAMESPACE_ROOT = "sys/devices/LNXSYSTM:00"
ACPI_VIDEO_HID = "LNXVIDEO"

# ACPI device directory names look like "LNXVIDEO:00" or "PNP0A08:00".
# Devices without a _HID, such as video outputs, are named "device:01".
_NODE_NAME = re.compile(r"^(?:[A-Z0-9_]{3,8}|device):[0-9a-fA-F]{2,}$")


@dataclass(frozen=True)
class AcpiNode:
    """One device node of the ACPI namespace as exposed by sysfs."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def hid(self) -> str | None:
        try:
            return (self.path / "hid").read_text().strip()
        except OSError:
            return None

    @property
    def has_physical_device(self) -> bool:
        """Glued to a device that is physically present (a PCI graphics card)."""
        return (self.path / "physical_node").exists()

    @property
    def is_output_device(self) -> bool:
        return (self.path / "adr").exists()

    def children(self) -> list[AcpiNode]:
        result = []
        for entry in sorted(self.path.iterdir()):
            if entry.is_symlink() or not entry.is_dir():
                continue
            if _NODE_NAME.match(entry.name):
                result.append(AcpiNode(entry))
        return result


def walk(root: AcpiNode) -> Iterator[AcpiNode]:
    """Depth-first walk of every node below `root`. Unreadable subtrees are skipped."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        try:
            stack.extend(reversed(node.children()))
        except OSError as e:
            log("debug", "acpi_node_unreadable", node=str(node.path), error=str(e))


def video_backlight_capable(node: AcpiNode) -> bool:
    """
    Check a single node for ACPI video backlight control.

    The node must be an ACPI video bus device backed by a real graphics
    card, with at least one output device (a child carrying an _ADR).
    The _BCL/_BCM brightness methods of the outputs are not visible in
    sysfs, so an output device stands in for them.
    """
    if node.hid != ACPI_VIDEO_HID:
        return False
    if not node.has_physical_device:
        return False
    return any(child.is_output_device for child in node.children())


class AcpiVideoProbe:
    """
    Capability probe walking the ACPI namespace in sysfs.

    The whole namespace is walked since a machine may carry more than
    one video device (hybrid graphics).
    """

    def __init__(self, root: str | Path = "/"):
        self._root = Path(root) / ACPI_NAMESPACE_ROOT

    def scan(self) -> bool:
        if not self._root.is_dir():
            log("debug", "acpi_namespace_missing", path=str(self._root))
            return False

        capable = False
        for node in walk(AcpiNode(self._root)):
            try:
                found = video_backlight_capable(node)
            except OSError as e:
                log("debug", "acpi_node_unreadable", node=str(node.path), error=str(e))
                continue
            if found:
                log("debug", "acpi_video_backlight", node=node.name)
            capable |= found
        return capable
