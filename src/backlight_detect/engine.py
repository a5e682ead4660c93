"""
Backlight interface selection.

The engine decides which interface (vendor firmware, ACPI video, GPU
native, Nvidia WMI EC or none) should drive the display backlight.

Detection steps, in order of descending precedence:
    1. acpi_backlight= command line option
    2. DMI quirk table (or an override set by another driver)
    3. Nvidia WMI embedded controller
    4. ACPI video, unless native is available and preferred
    5. Native, once a GPU driver has registered
    6. None on Windows 8+ era firmware
    7. Vendor firmware methods (pre ~2008 machines)

The command line, quirk table and hardware probes are evaluated once, on
the first query. Later queries only re-run the precedence policy.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any

from .cmdline import parse_backlight_option
from .config import DEFAULTS, backlight_option, load_config
from .errors import ConfigError, DetectionError, ReentrantDetectionError
from .log import log, set_level
from .probes import AcpiVideoProbe, SysfsIdentityProvider, SysfsPlatform, VendorProbeRegistry
from .protocol import (
    BacklightConsumer,
    BacklightType,
    CapabilityProbe,
    Decision,
    IdentityProvider,
    NullConsumer,
    PlatformTraits,
    SystemIdentity,
    VendorFeatureProbe,
)
from .quirks import QuirkDatabase, load_database


@dataclass
class ResolutionState:
    """
    Everything the precedence policy looks at.

    Fields only ever move from their default to a committed value, except
    dmi_override which an explicit override call may replace.
    """

    cmdline_override: BacklightType = BacklightType.UNDEFINED
    dmi_override: BacklightType = BacklightType.UNDEFINED
    video_capable: bool = False
    nvidia_wmi_ec_present: bool = False
    native_available: bool = False
    initialized: bool = False
    quirk: str | None = None  # ident of the matched quirk rule
    quirk_url: str | None = None  # bug report behind that rule
    identity: SystemIdentity | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in ("cmdline_override", "dmi_override"):
            data[key] = data[key].value
        data["identity"] = self.identity.to_dict() if self.identity else None
        return data


class DetectionEngine:
    """Thread-safe backlight interface selection over injected collaborators."""

    def __init__(
        self,
        identity_provider: IdentityProvider,
        capability_probe: CapabilityProbe,
        platform: PlatformTraits,
        quirks: QuirkDatabase,
        vendor_probe: VendorFeatureProbe | None = None,
        option: str | None = None,
        consumer: BacklightConsumer | None = None,
        state: ResolutionState | None = None,
    ):
        self._identity_provider = identity_provider
        self._capability_probe = capability_probe
        self._platform = platform
        self._quirks = quirks
        self._vendor_probe = vendor_probe
        self._option = option
        self._consumer: BacklightConsumer = consumer or NullConsumer()
        self._state = state if state is not None else ResolutionState()
        self._lock = threading.Lock()
        self._init_thread: int | None = None

    @property
    def state(self) -> ResolutionState:
        """Snapshot of the current resolution state."""
        return replace(self._state)

    @property
    def quirks(self) -> QuirkDatabase:
        return self._quirks

    def set_consumer(self, consumer: BacklightConsumer | None) -> None:
        self._consumer = consumer or NullConsumer()

    def _check_reentry(self) -> None:
        if self._init_thread == threading.get_ident():
            raise ReentrantDetectionError("backlight detection queried from inside its own initialization")

    def _best_effort(self, event: str, fn, default, **fields):
        """Run a collaborator call, degrading any failure to `default`."""
        try:
            return fn()
        except DetectionError:
            raise
        except Exception as e:
            log("debug", event, error=str(e), **fields)
            return default

    def _initialize(self) -> None:
        """Parse the command line, check quirks and probe hardware. Runs once, under the lock."""
        state = self._state
        state.cmdline_override = parse_backlight_option(self._option)
        state.identity = self._best_effort("identity_failed", self._identity_provider.identity, SystemIdentity())

        rule = self._best_effort("quirk_lookup_failed", lambda: self._quirks.match(state.identity), None)
        # An override set before the first query survives unless a quirk matches
        if rule is not None:
            state.dmi_override = rule.backlight_type
            state.quirk = rule.ident
            state.quirk_url = rule.url
            log("info", "quirk_matched", ident=rule.ident, type=rule.backlight_type.value, url=rule.url)

        state.video_capable = bool(
            self._best_effort("capability_probe_failed", self._capability_probe.scan, False)
        )
        if self._vendor_probe is not None:
            state.nvidia_wmi_ec_present = bool(
                self._best_effort(
                    "vendor_probe_failed", self._vendor_probe.probe, False, probe=self._vendor_probe.name
                )
            )

        state.initialized = True
        log(
            "debug",
            "detection_initialized",
            cmdline=state.cmdline_override.value,
            dmi=state.dmi_override.value,
            video_caps=state.video_capable,
            nvidia_wmi_ec=state.nvidia_wmi_ec_present,
        )

    def _platform_flag(self, name: str) -> bool:
        try:
            return bool(getattr(self._platform, name)())
        except Exception as e:
            log("debug", "platform_check_failed", check=name, error=str(e))
            return False

    def is_modern_generation(self) -> bool:
        return self._platform_flag("is_modern_generation")

    def prefer_native_over_video(self) -> bool:
        """
        Windows 8+ firmware no longer relies on ACPI video so it often does
        not work there. Chromebooks always want native.
        """
        return self.is_modern_generation() or self._platform_flag("fixed_function_controller_present")

    def _evaluate(self) -> Decision:
        state = self._state

        # Nothing overrides the command line
        if state.cmdline_override.is_defined:
            return Decision(state.cmdline_override, False, "cmdline")

        if state.dmi_override.is_defined:
            return Decision(state.dmi_override, False, "dmi_quirk")

        if state.nvidia_wmi_ec_present:
            return Decision(BacklightType.NVIDIA_WMI_EC, False, "nvidia_wmi_ec")

        if state.video_capable and not (state.native_available and self.prefer_native_over_video()):
            return Decision(BacklightType.VIDEO, True, "acpi_video")

        if state.native_available:
            return Decision(BacklightType.NATIVE, True, "native")

        # Reaching this point on recent hardware most likely means the GPU
        # driver has not loaded yet; a vendor interface would be bogus there.
        if self.is_modern_generation():
            return Decision(BacklightType.NONE, True, "modern_firmware")

        return Decision(BacklightType.VENDOR, True, "legacy_firmware")

    def resolve(self, native: bool = False) -> Decision:
        """
        Decide which backlight interface to use.

        Args:
            native: The caller (a GPU driver) has a native interface available.
                Once asserted this is remembered for the process lifetime.

        Returns:
            Decision; auto_detected is False when the command line, a quirk
            or the Nvidia WMI EC special case decided.
        """
        self._check_reentry()
        with self._lock:
            if not self._state.initialized:
                self._init_thread = threading.get_ident()
                try:
                    self._initialize()
                finally:
                    self._init_thread = None
            if native:
                self._state.native_available = True

        return self._evaluate()

    def get_backlight_type(self, native: bool = False) -> BacklightType:
        return self.resolve(native).backlight_type

    def use_native(self) -> bool:
        """For GPU drivers: register native support and check whether to use it."""
        return self.get_backlight_type(native=True) is BacklightType.NATIVE

    def set_dmi_backlight_type(self, backlight_type: BacklightType) -> Decision:
        """
        Override the DMI level choice from a driver with better platform knowledge.

        Unregisters the ACPI video backlight when it is no longer the answer.
        """
        if not isinstance(backlight_type, BacklightType):
            raise DetectionError(f"Not a backlight type: {backlight_type!r}")
        self._check_reentry()

        with self._lock:
            self._state.dmi_override = backlight_type
            self._state.quirk = None
            self._state.quirk_url = None
        log("info", "dmi_override_set", type=backlight_type.value)

        decision = self.resolve()
        if decision.backlight_type is not BacklightType.VIDEO:
            try:
                self._consumer.unregister()
            except Exception as e:
                log("error", "unregister_failed", error=str(e))
            else:
                log("info", "video_backlight_unregistered", type=decision.backlight_type.value)
        return decision


def build_engine(
    config: dict[str, Any] | None = None,
    consumer: BacklightConsumer | None = None,
    plugins: bool = True,
) -> DetectionEngine:
    """Create an engine wired to the sysfs probes described by `config`."""
    cfg = config if config is not None else load_config()
    if cfg.get("log_level"):
        set_level(cfg["log_level"])

    root = Path(cfg.get("sysfs_root") or "/")
    return DetectionEngine(
        identity_provider=SysfsIdentityProvider(root),
        capability_probe=AcpiVideoProbe(root),
        platform=SysfsPlatform(root, modern_generation=cfg.get("modern_generation")),
        quirks=load_database(root, plugins=plugins),
        vendor_probe=VendorProbeRegistry.get_for_platform(root, fresh=True),
        option=backlight_option(cfg),
        consumer=consumer,
    )


_default_engine: DetectionEngine | None = None
_default_lock = threading.Lock()


def default_engine() -> DetectionEngine:
    """
    The process-wide engine, created on first use.

    An invalid config file is logged and replaced by the defaults so that
    queries keep answering.
    """
    global _default_engine
    with _default_lock:
        if _default_engine is None:
            try:
                cfg = load_config()
            except ConfigError as e:
                log("error", "config_invalid", error=str(e))
                cfg = dict(DEFAULTS)
            _default_engine = build_engine(cfg)
        return _default_engine


def get_backlight_type(native: bool = False) -> BacklightType:
    return default_engine().get_backlight_type(native)


def set_dmi_backlight_type(backlight_type: BacklightType) -> Decision:
    return default_engine().set_dmi_backlight_type(backlight_type)


def use_native() -> bool:
    return default_engine().use_native()
