"""
Tests for ConfigManager layering and observers.
"""

import pytest

import config


class TestConfigManagerPrecedence:
    """Test runtime > QSettings > config.py precedence."""

    def test_defaults_from_config_module(self, config_manager):
        assert config_manager.get("app.name") == config.APP_NAME
        assert config_manager.get_bool("sync.discard_stale_reloads") is True
        assert config_manager.get_int("notifications.default_duration_ms") == 3000

    def test_provided_default_for_unknown_key(self, config_manager):
        assert config_manager.get("missing.key", "fallback") == "fallback"

    def test_persisted_value_overrides_default(self, config_manager, settings):
        config_manager.set("notifications.default_duration_ms", 5000, persist=True)
        assert settings.contains("notifications.default_duration_ms")
        assert config_manager.get_int("notifications.default_duration_ms") == 5000

    def test_runtime_value_overrides_persisted(self, config_manager):
        config_manager.set("logging.level", "WARNING", persist=True)
        config_manager.set("logging.level", "DEBUG")
        assert config_manager.get("logging.level") == "DEBUG"

    @pytest.mark.parametrize("stored,expected", [("true", True), ("false", False), ("1", True), ("off", False)])
    def test_get_bool_parses_strings(self, config_manager, stored, expected):
        config_manager.set("sync.discard_stale_reloads", stored)
        assert config_manager.get_bool("sync.discard_stale_reloads") is expected

    def test_get_int_falls_back_on_garbage(self, config_manager):
        config_manager.set("backups.preview_max_lines", "many")
        assert config_manager.get_int("backups.preview_max_lines", 10) == 10


class TestConfigManagerObservers:
    """Test change notification."""

    def test_subscribe_and_notify(self, config_manager):
        changes = []

        def observer(key, value):
            changes.append((key, value))

        config_manager.subscribe(observer)
        config_manager.subscribe(observer)
        config_manager.set("logging.level", "DEBUG")

        assert changes == [("logging.level", "DEBUG")]

    def test_unsubscribe(self, config_manager):
        changes = []

        def observer(key, value):
            changes.append(key)

        config_manager.subscribe(observer)
        config_manager.unsubscribe(observer)
        config_manager.set("logging.level", "DEBUG")
        assert changes == []

    def test_failing_observer_does_not_block_others(self, config_manager):
        changes = []

        def broken(key, value):
            raise RuntimeError("observer bug")

        def observer(key, value):
            changes.append(key)

        config_manager.subscribe(broken)
        config_manager.subscribe(observer)
        config_manager.set("logging.level", "DEBUG")
        assert changes == ["logging.level"]

    def test_reset_to_defaults(self, config_manager):
        changes = []

        def observer(key, value):
            changes.append(key)

        config_manager.set("logging.level", "DEBUG")
        config_manager.set("logging.file", "x.log", persist=True)
        config_manager.subscribe(observer)

        config_manager.reset_to_defaults()

        assert config_manager.get("logging.level") == config.LOGGING["level"]
        assert config_manager.get("logging.file") == config.LOGGING["file"]
        assert changes == ["__reset__"]


class TestConfigManagerExport:
    """Test key listing and export."""

    def test_leaf_keys_listed(self, config_manager):
        keys = config_manager.get_all_keys()
        assert "sync.discard_stale_reloads" in keys
        assert "backups.preview_max_lines" in keys
        assert "sync" not in keys

    def test_export_reflects_overrides(self, config_manager):
        config_manager.set("logging.level", "ERROR")
        exported = config_manager.export_config()
        assert exported["logging.level"] == "ERROR"
        assert exported["app.version"] == config.APP_VERSION
