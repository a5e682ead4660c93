"""Built-in quirk table of machines with known backlight interface issues.

Order matters: rules are evaluated top to bottom and the first match wins.
"""

from __future__ import annotations

from functools import partial
from pathlib import Path

from ..probes.pci import PCI_VENDOR_ID_TRIDENT, pci_device_present
from ..protocol import BacklightType
from .base import FieldMatch, FixedAction, GatedAction, QuirkDatabase, QuirkRule
from .base import dmi_exact_match as exact
from .base import dmi_match as m

VENDOR = BacklightType.VENDOR
VIDEO = BacklightType.VIDEO
NATIVE = BacklightType.NATIVE

SAMSUNG = "SAMSUNG ELECTRONICS CO., LTD."

# Trident CyberBlade XP4m32
TRIDENT_CYBERBLADE_XP4M32 = 0x2100


def _rule(backlight_type: BacklightType, ident: str, *matches: FieldMatch, url: str | None = None) -> QuirkRule:
    return QuirkRule(matches, FixedAction(backlight_type), ident=ident, url=url)


def builtin_rules(root: str | Path = "/") -> list[QuirkRule]:
    """Return the built-in rules. `root` is the sysfs root used by gated checks."""
    trident_present = partial(pci_device_present, PCI_VENDOR_ID_TRIDENT, TRIDENT_CYBERBLADE_XP4M32, root)

    return [
        # The BIOS sets a flag when the generic ACPI backlight is used which
        # breaks every backlight interface until the next reboot, so the
        # video interface must never be registered here.
        _rule(VENDOR, "Samsung X360",
              m("sys_vendor", SAMSUNG), m("product_name", "X360"), m("board_name", "X360")),
        _rule(VENDOR, "Asus UL30VT",
              m("sys_vendor", "ASUSTeK Computer Inc."), m("product_name", "UL30VT")),
        _rule(VENDOR, "Asus UL30A",
              m("sys_vendor", "ASUSTeK Computer Inc."), m("product_name", "UL30A")),
        _rule(VENDOR, "GIGABYTE GB-BXBT-2807",
              m("sys_vendor", "GIGABYTE"), m("product_name", "GB-BXBT-2807")),
        _rule(VENDOR, "Sony VPCEH3U1E",
              m("sys_vendor", "Sony Corporation"), m("product_name", "VPCEH3U1E")),
        _rule(NATIVE, "Dell Vostro 15 3535",
              m("sys_vendor", "Dell Inc."), m("product_name", "Vostro 15 3535")),

        # Generic DMI strings, confirmed by looking for the VGA chip which
        # has no kernel driver.
        QuirkRule(
            (
                m("sys_vendor", "TOSHIBA"),
                m("product_name", "Portable PC"),
                m("product_version", "Version 1.0"),
                m("board_name", "Portable PC"),
            ),
            GatedAction(trident_present, VENDOR),
            ident="Toshiba Portege R100",
        ),

        # All-in-ones where the panel shows up as regular DP, so the GPU
        # driver never registers a native backlight.
        _rule(VIDEO, "Apple iMac14,1", m("sys_vendor", "Apple Inc."), m("product_name", "iMac14,1")),
        _rule(VIDEO, "Apple iMac14,2", m("sys_vendor", "Apple Inc."), m("product_name", "iMac14,2")),

        # Older nvidia binary driver series does not register a backlight.
        _rule(VIDEO, "ThinkPad W530", m("sys_vendor", "LENOVO"), m("product_version", "ThinkPad W530")),

        # Native backlight breaks brightness keys without userspace handling.
        _rule(VIDEO, "ThinkPad T420", m("sys_vendor", "LENOVO"), m("product_version", "ThinkPad T420"),
              url="https://bugzilla.kernel.org/show_bug.cgi?id=81691"),
        _rule(VIDEO, "ThinkPad T520", m("sys_vendor", "LENOVO"), m("product_version", "ThinkPad T520"),
              url="https://bugzilla.kernel.org/show_bug.cgi?id=81691"),
        _rule(VIDEO, "ThinkPad X201s", m("sys_vendor", "LENOVO"), m("product_version", "ThinkPad X201s"),
              url="https://bugzilla.kernel.org/show_bug.cgi?id=81691"),
        _rule(VIDEO, "ThinkPad X201T", m("sys_vendor", "LENOVO"), m("product_version", "ThinkPad X201T"),
              url="https://bugzilla.kernel.org/show_bug.cgi?id=81691"),

        # Native backlight does not work on some older machines.
        _rule(VIDEO, "HP ENVY 15 Notebook",
              m("sys_vendor", "Hewlett-Packard"), m("product_name", "HP ENVY 15 Notebook PC"),
              url="https://bugs.freedesktop.org/show_bug.cgi?id=81515"),
        _rule(VIDEO, "SAMSUNG 870Z5E/880Z5E/680Z5E",
              m("sys_vendor", SAMSUNG), m("product_name", "870Z5E/880Z5E/680Z5E")),
        _rule(VIDEO, "SAMSUNG 370R4E/370R4V/370R5E/3570RE/370R5V",
              m("sys_vendor", SAMSUNG), m("product_name", "370R4E/370R4V/370R5E/3570RE/370R5V")),
        _rule(VIDEO, "SAMSUNG 3570R/370R/470R/450R/510R/4450RV",
              m("sys_vendor", SAMSUNG), m("product_name", "3570R/370R/470R/450R/510R/4450RV"),
              url="https://bugzilla.redhat.com/show_bug.cgi?id=1186097"),
        _rule(VIDEO, "SAMSUNG 670Z5E",
              m("sys_vendor", SAMSUNG), m("product_name", "670Z5E"),
              url="https://bugzilla.redhat.com/show_bug.cgi?id=1557060"),
        _rule(VIDEO, "SAMSUNG 730U3E/740U3E",
              m("sys_vendor", SAMSUNG), m("product_name", "730U3E/740U3E"),
              url="https://bugzilla.redhat.com/show_bug.cgi?id=1094948"),
        _rule(VIDEO, "SAMSUNG 900X3C/900X3D/900X3E/900X4C/900X4D",
              m("sys_vendor", SAMSUNG), m("product_name", "900X3C/900X3D/900X3E/900X4C/900X4D"),
              url="https://bugs.freedesktop.org/show_bug.cgi?id=87286"),
        _rule(VIDEO, "Dell XPS14 L421X",
              m("sys_vendor", "Dell Inc."), m("product_name", "XPS L421X"),
              url="https://bugzilla.redhat.com/show_bug.cgi?id=1272633"),
        _rule(VIDEO, "Dell XPS15 L521X",
              m("sys_vendor", "Dell Inc."), m("product_name", "XPS L521X"),
              url="https://bugzilla.redhat.com/show_bug.cgi?id=1163574"),
        _rule(VIDEO, "SAMSUNG 530U4E/540U4E",
              m("sys_vendor", SAMSUNG), m("product_name", "530U4E/540U4E"),
              url="https://bugzilla.kernel.org/show_bug.cgi?id=108971"),
        _rule(VIDEO, "HP 635 Notebook",
              m("sys_vendor", "Hewlett-Packard"), m("product_name", "HP 635 Notebook PC"),
              url="https://bugs.launchpad.net/bugs/1894667"),

        # Pre Windows 8 machines which need native backlight nevertheless.
        _rule(NATIVE, "Lenovo Ideapad S405",
              m("sys_vendor", "LENOVO"), m("board_name", "Lenovo IdeaPad S405"),
              url="https://bugzilla.redhat.com/show_bug.cgi?id=1201530"),
        _rule(NATIVE, "Lenovo Ideapad Z470",
              m("sys_vendor", "LENOVO"), m("product_version", "IdeaPad Z470"),
              url="https://bugzilla.suse.com/show_bug.cgi?id=1208724"),
        _rule(NATIVE, "Lenovo Ideapad Z570",
              m("sys_vendor", "LENOVO"), m("product_name", "102434U"),
              url="https://bugzilla.redhat.com/show_bug.cgi?id=1187004"),
        _rule(NATIVE, "Lenovo E41-25", m("sys_vendor", "LENOVO"), m("product_name", "81FS")),
        _rule(NATIVE, "Lenovo E41-45", m("sys_vendor", "LENOVO"), m("product_name", "82BK")),
        _rule(NATIVE, "Lenovo ThinkPad X131e (3371 AMD version)",
              m("sys_vendor", "LENOVO"), m("product_name", "3371")),
        _rule(NATIVE, "Apple iMac11,3", m("sys_vendor", "Apple Inc."), m("product_name", "iMac11,3")),
        _rule(NATIVE, "Apple iMac12,1", m("sys_vendor", "Apple Inc."), m("product_name", "iMac12,1"),
              url="https://gitlab.freedesktop.org/drm/amd/-/issues/1838"),
        _rule(NATIVE, "Apple iMac12,2", m("sys_vendor", "Apple Inc."), m("product_name", "iMac12,2"),
              url="https://gitlab.freedesktop.org/drm/amd/-/issues/2753"),
        _rule(NATIVE, "Apple MacBook Pro 12,1",
              m("sys_vendor", "Apple Inc."), m("product_name", "MacBookPro12,1"),
              url="https://bugzilla.redhat.com/show_bug.cgi?id=1217249"),
        _rule(NATIVE, "Dell Inspiron N4010", m("sys_vendor", "Dell Inc."), m("product_name", "Inspiron N4010")),
        _rule(NATIVE, "Dell Vostro V131", m("sys_vendor", "Dell Inc."), m("product_name", "Vostro V131")),
        _rule(NATIVE, "Dell XPS 17 L702X",
              m("sys_vendor", "Dell Inc."), m("product_name", "Dell System XPS L702X"),
              url="https://bugzilla.redhat.com/show_bug.cgi?id=1123661"),
        _rule(NATIVE, "Dell Precision 7510", m("sys_vendor", "Dell Inc."), m("product_name", "Precision 7510")),
        _rule(NATIVE, "Dell Studio 1569", m("sys_vendor", "Dell Inc."), m("product_name", "Studio 1569")),
        _rule(NATIVE, "Acer Aspire 3830TG", m("sys_vendor", "Acer"), m("product_name", "Aspire 3830TG")),
        _rule(NATIVE, "Acer Aspire 5738z",
              m("sys_vendor", "Acer"), m("product_name", "Aspire 5738"), m("board_name", "JV50")),
        _rule(NATIVE, "Acer TravelMate 5735Z",
              m("sys_vendor", "Acer"), m("product_name", "TravelMate 5735Z"), m("board_name", "BA51_MV"),
              url="https://bugzilla.kernel.org/show_bug.cgi?id=207835"),
        _rule(NATIVE, "ASUSTeK COMPUTER INC. GA401",
              m("sys_vendor", "ASUSTeK COMPUTER INC."), m("product_name", "GA401")),
        _rule(NATIVE, "ASUSTeK COMPUTER INC. GA502",
              m("sys_vendor", "ASUSTeK COMPUTER INC."), m("product_name", "GA502")),
        _rule(NATIVE, "ASUSTeK COMPUTER INC. GA503",
              m("sys_vendor", "ASUSTeK COMPUTER INC."), m("product_name", "GA503")),

        # Both interfaces work, but registering video first and then
        # switching to native leaves a dangling firmware brightness request
        # that drops the backlight to ~2% on the first power cord event.
        _rule(NATIVE, "Clevo NL5xRU", m("board_name", "NL5xRU")),
        _rule(NATIVE, "Clevo NL5xRU", m("sys_vendor", "TUXEDO"), m("board_name", "AURA1501")),
        _rule(NATIVE, "Clevo NL5xRU", m("sys_vendor", "TUXEDO"), m("board_name", "EDUBOOK1502")),
        _rule(NATIVE, "Clevo NL5xNU", m("board_name", "NL5xNU")),
        _rule(NATIVE, "TongFang PF5PU1G", m("board_name", "PF5PU1G")),
        _rule(NATIVE, "TongFang PF4NU1F", m("board_name", "PF4NU1F")),
        _rule(NATIVE, "TongFang PF4NU1F", m("sys_vendor", "TUXEDO"), m("board_name", "PULSE1401")),
        _rule(NATIVE, "TongFang PF5NU1G", m("board_name", "PF5NU1G")),
        _rule(NATIVE, "TongFang PF5NU1G", m("sys_vendor", "TUXEDO"), m("board_name", "PULSE1501")),
        _rule(NATIVE, "TongFang PF5LUXG", m("board_name", "PF5LUXG")),

        # x86 android tablets driving the panel through an external LP8557
        # controller. Neither native nor video works, "vendor" disables both.
        _rule(VENDOR, "Lenovo Yoga Book X90F / X90L",
              exact("sys_vendor", "Intel Corporation"),
              exact("product_name", "CHERRYVIEW D1 PLATFORM"),
              exact("product_version", "YETI-11")),
        _rule(VENDOR, "Lenovo Yoga Tablet 2 830F/L or 1050F/L",
              m("sys_vendor", "Intel Corp."),
              m("product_name", "VALLEYVIEW C0 PLATFORM"),
              m("board_name", "BYT-T FFD8"),
              # Partial match on the beginning of the BIOS version
              m("bios_version", "BLADE_21")),
        _rule(VENDOR, "Lenovo Yoga Tab 3 Pro YT3-X90F",
              m("sys_vendor", "Intel Corporation"),
              m("product_name", "CHERRYVIEW D1 PLATFORM"),
              m("product_version", "Blade3-10A-001")),
        _rule(VENDOR, "Xiaomi Mi Pad 2", m("sys_vendor", "Xiaomi Inc"), m("product_name", "Mipad2")),
    ]


def default_database(root: str | Path = "/") -> QuirkDatabase:
    return QuirkDatabase(builtin_rules(root))
