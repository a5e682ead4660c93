"""
backlight-detect - Pick the backlight interface for this machine.

Usage:
    backlight-detect              # Show the chosen interface and why
    backlight-detect --json       # Output decision, state and identity as JSON
    backlight-detect --native     # Assume a GPU driver registered native backlight
    backlight-detect --identity   # Show the DMI identity
    backlight-detect --quirks     # List the quirk table, marking the matching rule
    backlight-detect --state      # Show the full resolution state
"""

import argparse
import json
import sys
from pathlib import Path

from . import __version__
from .config import load_config
from .engine import DetectionEngine, build_engine
from .errors import ConfigError
from .probes import VendorProbeRegistry
from .protocol import Decision

REASONS = {
    "cmdline": "acpi_backlight= option",
    "dmi_quirk": "DMI quirk",
    "nvidia_wmi_ec": "Nvidia WMI EC owns brightness",
    "acpi_video": "ACPI video backlight available",
    "native": "native GPU backlight registered",
    "modern_firmware": "Windows 8+ firmware without backlight support",
    "legacy_firmware": "legacy firmware, vendor methods",
}


def format_decision(decision: Decision, quirk: str | None = None) -> str:
    """Format the decision for display."""
    why = REASONS.get(decision.reason, decision.reason)
    if decision.reason == "dmi_quirk" and quirk:
        why = f"{why}: {quirk}"
    mode = "autodetected" if decision.auto_detected else "forced"
    return f"{decision.backlight_type.value} ({mode}, {why})"


def show_identity(engine: DetectionEngine):
    """Display the DMI identity in a rich table."""
    from rich import box
    from rich.console import Console
    from rich.table import Table

    console = Console()
    identity = engine.state.identity
    if identity is None:
        console.print("[yellow]Identity not read yet.[/]")
        return

    table = Table(title="DMI identity", box=box.SIMPLE, header_style="bold cyan")
    table.add_column("field", style="dim", no_wrap=True)
    table.add_column("value")
    for name, value in identity.to_dict().items():
        table.add_row(name, value if value is not None else "[dim]-[/]")
    console.print(table)


def show_quirks(engine: DetectionEngine):
    """List quirk rules, highlighting the one matching this machine."""
    from rich import box
    from rich.console import Console
    from rich.table import Table

    console = Console()
    identity = engine.state.identity
    matched = engine.quirks.match(identity) if identity is not None else None

    table = Table(
        title=f"Quirk rules ({len(engine.quirks)} total)",
        box=box.SIMPLE,
        header_style="bold cyan",
        expand=True,
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("machine", style="bold", no_wrap=True)
    table.add_column("type", no_wrap=True)
    table.add_column("matches", ratio=1)
    table.add_column("bug report", style="dim", overflow="fold")

    for idx, rule in enumerate(engine.quirks, start=1):
        parts = []
        for m in rule.matches:
            op = "==" if m.kind.name == "EXACT" else "~"
            parts.append(f"[cyan]{m.field}[/]{op}{m.pattern}")
        if rule.is_gated:
            parts.append("[dim](+ hardware check)[/]")
        marker = " [green]<- match[/]" if rule is matched else ""
        table.add_row(str(idx), rule.ident + marker, rule.backlight_type.value, " ".join(parts), rule.url or "")

    console.print(table)


def show_state(engine: DetectionEngine, decision: Decision):
    """Display the resolution state."""
    from rich import box
    from rich.console import Console
    from rich.table import Table

    console = Console()
    state = engine.state

    table = Table(title="Resolution state", box=box.SIMPLE, header_style="bold cyan")
    table.add_column("input", style="dim", no_wrap=True)
    table.add_column("value")
    table.add_row("cmdline override", state.cmdline_override.value)
    table.add_row("dmi override", state.dmi_override.value + (f" ({state.quirk})" if state.quirk else ""))
    if state.quirk_url:
        table.add_row("quirk bug report", state.quirk_url)
    table.add_row("nvidia wmi ec", str(state.nvidia_wmi_ec_present))
    table.add_row("acpi video backlight", str(state.video_capable))
    table.add_row("native available", str(state.native_available))
    table.add_row("modern firmware", str(engine.is_modern_generation()))
    table.add_row("prefer native", str(engine.prefer_native_over_video()))
    console.print(table)
    console.print(f"Backlight: [bold]{format_decision(decision, state.quirk)}[/]")


def main():
    parser = argparse.ArgumentParser(
        prog="backlight-detect",
        description="Select the display backlight interface for this machine",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--native", action="store_true", help="Assume native GPU backlight is available")
    parser.add_argument("--identity", action="store_true", help="Show the DMI identity")
    parser.add_argument("--quirks", action="store_true", help="List the quirk table")
    parser.add_argument("--state", action="store_true", help="Show the resolution state")
    parser.add_argument("--root", type=str, metavar="PATH", help="Alternative sysfs and proc root (for testing)")
    parser.add_argument("--option", type=str, metavar="TOKEN", help="Override the acpi_backlight= value")
    parser.add_argument("--config", type=str, metavar="FILE", help="Config file path")
    parser.add_argument("--no-plugins", action="store_true", help="Ignore quirk plugins")
    args = parser.parse_args()

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    if args.root:
        cfg["sysfs_root"] = args.root
        cfg["cmdline_file"] = str(Path(args.root) / "proc/cmdline")
    if args.option is not None:
        cfg["acpi_backlight"] = args.option

    engine = build_engine(cfg, plugins=not args.no_plugins)
    decision = engine.resolve(native=args.native)

    if args.json:
        output = {
            "backlight_type": decision.backlight_type.value,
            "auto_detected": decision.auto_detected,
            "reason": decision.reason,
            "state": engine.state.to_dict(),
            "vendor_probes": VendorProbeRegistry.list_probes(cfg["sysfs_root"]),
        }
        print(json.dumps(output, indent=2))
        return

    if args.identity:
        show_identity(engine)
        return

    if args.quirks:
        show_quirks(engine)
        return

    if args.state:
        show_state(engine, decision)
        return

    print(format_decision(decision, engine.state.quirk))


if __name__ == "__main__":
    main()
