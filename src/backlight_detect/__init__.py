"""backlight-detect library modules."""

from .engine import (
    DetectionEngine,
    ResolutionState,
    build_engine,
    default_engine,
    get_backlight_type,
    set_dmi_backlight_type,
    use_native,
)
from .errors import ConfigError, DetectionError, ReentrantDetectionError
from .protocol import BacklightConsumer, BacklightType, Decision, SystemIdentity

__version__ = "0.1.0"

__all__ = [
    "BacklightConsumer",
    "BacklightType",
    "ConfigError",
    "Decision",
    "DetectionEngine",
    "DetectionError",
    "ReentrantDetectionError",
    "ResolutionState",
    "SystemIdentity",
    "build_engine",
    "default_engine",
    "get_backlight_type",
    "set_dmi_backlight_type",
    "use_native",
]
