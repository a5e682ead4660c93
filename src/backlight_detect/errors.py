"""Exceptions raised by backlight-detect."""

from __future__ import annotations


class DetectionError(Exception):
    """Programming error when using the detection engine."""


class ReentrantDetectionError(DetectionError):
    """A collaborator queried the engine while it was still initializing."""


class ConfigError(ValueError):
    pass
