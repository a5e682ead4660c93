"""Tests for quirks/loader.py - plugin rules."""

from __future__ import annotations

from unittest.mock import patch

from backlight_detect.protocol import BacklightType, SystemIdentity
from backlight_detect.quirks import FixedAction, QuirkRule, dmi_match, load_database, load_plugin_rules

PLUGIN_RULE = QuirkRule(
    (dmi_match("sys_vendor", "LENOVO"), dmi_match("product_version", "ThinkPad T420")),
    FixedAction(BacklightType.NATIVE),
    ident="plugin T420",
)


class FakeEntryPoint:
    def __init__(self, name: str, value):
        self.name = name
        self._value = value

    def load(self):
        if isinstance(self._value, Exception):
            raise self._value
        return self._value


def _entry_points(*eps):
    return patch("importlib.metadata.entry_points", return_value=list(eps))


class TestLoadPluginRules:
    """Tests for load_plugin_rules()."""

    def test_list_plugin(self):
        with _entry_points(FakeEntryPoint("list", [PLUGIN_RULE])):
            assert load_plugin_rules() == [PLUGIN_RULE]

    def test_callable_plugin(self):
        with _entry_points(FakeEntryPoint("factory", lambda: [PLUGIN_RULE])):
            assert load_plugin_rules() == [PLUGIN_RULE]

    def test_broken_plugin_skipped(self):
        with _entry_points(FakeEntryPoint("broken", ImportError("nope")), FakeEntryPoint("ok", [PLUGIN_RULE])):
            assert load_plugin_rules() == [PLUGIN_RULE]

    def test_invalid_plugin_skipped(self):
        with _entry_points(FakeEntryPoint("junk", ["not a rule"])):
            assert load_plugin_rules() == []


class TestLoadDatabase:
    """Tests for load_database()."""

    def test_plugins_evaluated_before_builtin(self):
        identity = SystemIdentity(sys_vendor="LENOVO", product_version="ThinkPad T420")
        with _entry_points(FakeEntryPoint("list", [PLUGIN_RULE])):
            db = load_database()
        assert db.resolve(identity) is BacklightType.NATIVE

    def test_plugins_disabled(self):
        identity = SystemIdentity(sys_vendor="LENOVO", product_version="ThinkPad T420")
        with _entry_points(FakeEntryPoint("list", [PLUGIN_RULE])):
            db = load_database(plugins=False)
        assert db.resolve(identity) is BacklightType.VIDEO
