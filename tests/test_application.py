"""
Tests for the HostSwitch composition root.
"""

import logging

import pytest

from hostswitch import HostSwitchApplication, configure_logging
from hostswitch.application import CONFIG_EVENTS, REMOTE_APPLIED, REMOTE_CLEANED, TRAY_REFRESH_REMOTE
from hostswitch.exceptions import BridgeError, ConfigurationError, SourceNotFoundError


@pytest.fixture
def app(qapp, bridge, config_manager):
    application = HostSwitchApplication(bridge, config_manager)
    yield application
    application.shutdown()


class TestStartup:
    """Test start() wiring and loading."""

    @pytest.mark.asyncio
    async def test_start_loads_all_stores(self, app, bridge):
        bridge.seed_config("work", active=True)
        bridge.seed_backup()
        bridge.seed_remote_source("ads")

        await app.start()

        assert app.admin_gate.admin_mode is True
        assert app.config_store.count == 1
        assert app.backup_store.count == 1
        assert app.remote_store.count == 1

    @pytest.mark.asyncio
    async def test_start_subscribes_push_events(self, app, bridge):
        await app.start()

        for event_name in CONFIG_EVENTS:
            assert event_name in bridge.push_callbacks
        assert app.registry.listener_count()["push"] == 14

    @pytest.mark.asyncio
    async def test_start_twice_does_not_duplicate(self, app, bridge):
        await app.start()
        calls = len(bridge.calls)

        await app.start()

        assert len(bridge.calls) == calls
        assert app.registry.listener_count()["push"] == 14

    @pytest.mark.asyncio
    async def test_failed_start_can_be_retried(self, app, bridge):
        bridge.seed_config("work")
        bridge.fail_next("get_all_configs", RuntimeError("backend not ready"))

        with pytest.raises(BridgeError):
            await app.start()
        assert app.registry.listener_count()["push"] == 0

        await app.start()

        assert app.config_store.count == 1
        assert app.registry.listener_count()["push"] == 14

    def test_stores_are_linked(self, app):
        assert app.config_store.backup_store is app.backup_store
        assert app.remote_store.config_store is app.config_store
        assert app.remote_store.backup_store is app.backup_store


class TestPushEvents:
    """Test backend push events trigger reloads."""

    @pytest.mark.asyncio
    async def test_config_list_changed_reloads_configs(self, app, bridge):
        await app.start()
        bridge.seed_config("added by tray")

        bridge.emit("config-list-changed")
        await app.registry.drain()

        assert [c.name for c in app.config_store.items] == ["added by tray"]

    @pytest.mark.asyncio
    async def test_system_hosts_updated_reloads_backups(self, app, bridge):
        await app.start()
        bridge.seed_backup(automatic=True)

        bridge.emit("system-hosts-updated")
        await app.registry.drain()

        assert app.backup_store.count == 1

    @pytest.mark.parametrize("event_name", ["backup-created", "backup-deleted", "backup-updated", "backup-restored"])
    @pytest.mark.asyncio
    async def test_backup_events_reload_backups(self, app, bridge, event_name):
        await app.start()
        bridge.seed_backup(automatic=True)

        bridge.emit(event_name, "b99")
        await app.registry.drain()

        assert app.backup_store.count == 1
        assert app.backup_store.server_stats.total == 1

    @pytest.mark.asyncio
    async def test_startup_sources_updated_reloads_sources(self, app, bridge):
        await app.start()
        bridge.seed_remote_source("refreshed at startup")

        bridge.emit("startup-sources-updated")
        await app.registry.drain()

        assert [s.name for s in app.remote_store.items] == ["refreshed at startup"]

    @pytest.mark.asyncio
    async def test_remote_applied_reloads_configs_and_backups(self, app, bridge):
        await app.start()
        bridge.seed_config("imported")
        bridge.seed_backup(automatic=True)

        bridge.emit(REMOTE_APPLIED, "ads")
        await app.registry.drain()

        assert [c.name for c in app.config_store.items] == ["imported"]
        assert app.backup_store.count == 1
        assert app.notifications.kind == "info"
        assert "'ads' was applied" in app.notifications.text

    @pytest.mark.asyncio
    async def test_remote_status_changed_reloads_sources(self, app, bridge):
        await app.start()
        bridge.seed_remote_source("startup feed")

        bridge.emit("remote-source-status-changed", {"id": "r1"})
        await app.registry.drain()

        assert [s.name for s in app.remote_store.items] == ["startup feed"]

    @pytest.mark.asyncio
    async def test_tray_refresh_updates_all_sources(self, app, bridge):
        await app.start()

        bridge.emit(TRAY_REFRESH_REMOTE)
        await app.registry.drain()

        assert "update_all_remote_sources" in bridge.call_names()

    @pytest.mark.asyncio
    async def test_failed_push_reload_notifies(self, app, bridge):
        await app.start()
        bridge.fail_next("get_all_configs", RuntimeError("backend restarting"))

        bridge.emit("config-applied")
        await app.registry.drain()

        assert app.notifications.kind == "error"
        assert app.notifications.text == "backend restarting"
        assert app.config_store.items == []

    @pytest.mark.asyncio
    async def test_remote_cleaned_notification(self, app, bridge):
        await app.start()

        bridge.emit(REMOTE_CLEANED, {"name": "ads"})

        assert app.notifications.kind == "info"
        assert "ads" in app.notifications.text

    @pytest.mark.asyncio
    async def test_remote_cleaned_without_payload(self, app, bridge):
        await app.start()
        bridge.emit(REMOTE_CLEANED)
        assert app.notifications.text == "A remote source was removed from the system hosts file"


class TestRunAction:
    """Test error-to-notification conversion."""

    @pytest.mark.asyncio
    async def test_success_returns_result(self, app):
        assert await app.run_action(lambda: app.config_store.create("home")) is not None
        assert app.notifications.show is False

    @pytest.mark.asyncio
    async def test_hostswitch_error_becomes_notification(self, app):
        result = await app.run_action(lambda: app.remote_store.fetch("missing"))

        assert result is None
        assert app.notifications.kind == "error"
        assert app.notifications.text == SourceNotFoundError("missing").user_message

    @pytest.mark.asyncio
    async def test_local_validation_message_shown(self, app, bridge):
        result = await app.run_action(lambda: app.remote_store.add("feed", "ftp://example.com/hosts"))

        assert result is None
        assert app.notifications.text == "Remote source URL must start with http:// or https://."
        assert bridge.calls == []

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, app):
        async def broken():
            raise ZeroDivisionError()

        with pytest.raises(ZeroDivisionError):
            await app.run_action(broken)


class TestShutdown:
    """Test teardown."""

    @pytest.mark.asyncio
    async def test_shutdown_releases_push_events(self, app, bridge):
        await app.start()

        app.shutdown()
        app.shutdown()

        assert bridge.push_callbacks == {}
        assert app.registry.listener_count() == {"local": 0, "push": 0}


class TestConfigurationWiring:
    """Test configuration values reach the stores."""

    def test_stale_reload_setting_applied(self, app, config_manager):
        config_manager.set("sync.discard_stale_reloads", "false")
        assert all(store.discard_stale_reloads is False for store in app.stores)

        config_manager.reset_to_defaults()
        assert all(store.discard_stale_reloads is True for store in app.stores)

    def test_notification_duration_setting_applied(self, app, config_manager):
        config_manager.set("notifications.default_duration_ms", 1200)
        assert app.notifications.default_duration == 1200

    def test_preview_lines_from_settings(self, qapp, bridge, config_manager):
        config_manager.set("backups.preview_max_lines", 4)
        application = HostSwitchApplication(bridge, config_manager)
        assert application.backup_store.preview_max_lines == 4
        application.shutdown()


class TestConfigureLogging:
    """Test logging setup from configuration."""

    def test_file_handler_added(self, config_manager, tmp_path, monkeypatch):
        captured = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))
        log_file = tmp_path / "hostswitch.log"
        config_manager.set("logging.file", str(log_file))
        config_manager.set("logging.level", "debug")

        configure_logging(config_manager)

        assert captured["level"] == logging.DEBUG
        assert any(isinstance(h, logging.FileHandler) for h in captured["handlers"])
        for handler in captured["handlers"]:
            handler.close()

    def test_unknown_level_rejected(self, config_manager, monkeypatch):
        captured = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))
        config_manager.set("logging.level", "chatty")

        with pytest.raises(ConfigurationError) as exc_info:
            configure_logging(config_manager)

        assert exc_info.value.config_key == "logging.level"
        assert exc_info.value.user_message == "'CHATTY' is not a valid log level."
        assert captured == {}
