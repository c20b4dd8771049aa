"""
HostSwitch Application State

Composition root of the UI state layer: builds the listener registry, the
stores and the admin gate around one backend bridge, wires backend push
events to store reloads, and turns failed actions into notifications.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from hostswitch.core import ConfigManager, ListenerRegistry, ListenerScope
from hostswitch.core.config_manager import RESET_KEY
from hostswitch.exceptions import ConfigurationError, HostSwitchError
from hostswitch.interfaces import IHostsBridge
from hostswitch.stores import (
    AdminGate,
    BackupStore,
    ConfigurationStore,
    NotificationStore,
    RemoteSourceStore,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONFIG_EVENTS = ("config-list-changed", "config-applied", "tray-update-configs")
BACKUP_EVENTS = (
    "system-hosts-updated",
    "backup-created",
    "backup-deleted",
    "backup-updated",
    "backup-restored",
)
REMOTE_EVENTS = (
    "remote-source-list-changed",
    "remote-source-status-changed",
    "startup-sources-updated",
)
TRAY_REFRESH_REMOTE = "tray-refresh-remote"
REMOTE_CLEANED = "remote-source-cleaned-from-system"
REMOTE_APPLIED = "remote-applied-to-system"


def _source_name(args: tuple) -> str | None:
    """Remote source name carried by a push payload (bare string or mapping)."""
    payload = args[0] if args else None
    if isinstance(payload, Mapping):
        payload = payload.get("name") or payload.get("Name")
    return str(payload) if payload else None


def configure_logging(config_manager: ConfigManager) -> None:
    """
    Set up root logging from the logging.* configuration keys.

    Raises:
        ConfigurationError: logging.level is not a known level name
    """
    level_name = str(config_manager.get("logging.level", "INFO")).strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ConfigurationError(
            f"Unknown log level '{level_name}'",
            config_key="logging.level",
            user_message=f"'{level_name}' is not a valid log level.",
        )

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file = config_manager.get("logging.file", "")
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format=config_manager.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
        handlers=handlers,
    )
    logger.info(f"Logging configured at {logging.getLevelName(level)}")


class HostSwitchApplication:
    """
    {
        "name": "HostSwitchApplication",
        "version": "1.0.0",
        "description": "Builds and wires the HostSwitch stores around a backend bridge.",
        "dependencies": ["IHostsBridge", "ConfigManager", "ListenerRegistry"],
        "interface": {
            "inputs": ["bridge: IHostsBridge", "config_manager: ConfigManager"],
            "outputs": "Linked stores, admin gate and notification store"
        }
    }
    """

    def __init__(self, bridge: IHostsBridge, config_manager: ConfigManager | None = None):
        self.bridge = bridge
        self.config_manager = config_manager or ConfigManager()

        discard_stale = self.config_manager.get_bool("sync.discard_stale_reloads", True)
        self.registry = ListenerRegistry(bridge)
        self.backup_store = BackupStore(
            bridge,
            preview_max_lines=self.config_manager.get_int("backups.preview_max_lines", 10),
            discard_stale_reloads=discard_stale,
        )
        self.config_store = ConfigurationStore(
            bridge, backup_store=self.backup_store, discard_stale_reloads=discard_stale
        )
        self.remote_store = RemoteSourceStore(
            bridge,
            config_store=self.config_store,
            backup_store=self.backup_store,
            discard_stale_reloads=discard_stale,
        )
        self.admin_gate = AdminGate(bridge, self.config_store)
        self.notifications = NotificationStore(
            self.config_manager.get_int("notifications.default_duration_ms", 3000)
        )

        self._scope: ListenerScope | None = None
        self._started = False
        self._shut_down = False
        self.config_manager.subscribe(self._on_config_changed)
        logger.info("HostSwitchApplication initialized")

    @property
    def stores(self) -> tuple:
        return (self.config_store, self.backup_store, self.remote_store)

    # -------- Lifecycle --------

    async def start(self) -> None:
        """Wire push events, resolve admin mode and load all stores."""
        if self._started:
            logger.debug("HostSwitchApplication already started")
            return
        self._wire_push_events()
        try:
            await self.admin_gate.initialize()
            await self.backup_store.load_all()
            await self.remote_store.load_all()
        except Exception:
            # Leave the app startable again; a retry rewires from scratch
            self._unwire_push_events()
            raise
        self._started = True
        logger.info("HostSwitchApplication started")

    def shutdown(self) -> None:
        """Release every subscription. Safe to call more than once."""
        if self._shut_down:
            return
        self._shut_down = True
        self._unwire_push_events()
        self.registry.cleanup_all()
        self.config_manager.unsubscribe(self._on_config_changed)
        logger.info("HostSwitchApplication shut down")

    def _wire_push_events(self) -> None:
        self._scope = self.registry.scope()
        for event_name in CONFIG_EVENTS:
            self._scope.register_push(event_name, self._reload_configs)
        for event_name in BACKUP_EVENTS:
            self._scope.register_push(event_name, self._reload_backups)
        for event_name in REMOTE_EVENTS:
            self._scope.register_push(event_name, self._reload_remote_sources)
        self._scope.register_push(TRAY_REFRESH_REMOTE, self._refresh_remote_sources)
        self._scope.register_push(REMOTE_CLEANED, self._on_remote_cleaned)
        self._scope.register_push(REMOTE_APPLIED, self._on_remote_applied)
        logger.debug(f"Push events wired: {self.registry.listener_count()}")

    def _unwire_push_events(self) -> None:
        if self._scope is not None:
            self._scope.dispose()
            self._scope = None

    # -------- Push handlers --------

    def _reload_configs(self, *_args: Any) -> Awaitable[Any]:
        return self.run_action(self.config_store.load_all)

    def _reload_backups(self, *_args: Any) -> Awaitable[Any]:
        return self.run_action(self.backup_store.load_all)

    def _reload_remote_sources(self, *_args: Any) -> Awaitable[Any]:
        return self.run_action(self.remote_store.load_all)

    def _refresh_remote_sources(self, *_args: Any) -> Awaitable[Any]:
        return self.run_action(self.remote_store.update_all)

    def _on_remote_cleaned(self, *args: Any) -> None:
        name = _source_name(args)
        if name:
            message = f"Remote source '{name}' was removed from the system hosts file"
        else:
            message = "A remote source was removed from the system hosts file"
        self.notifications.show_notification(message, "info")

    def _on_remote_applied(self, *args: Any) -> Awaitable[Any]:
        name = _source_name(args)
        if name:
            message = f"Remote source '{name}' was applied to the system hosts file"
        else:
            message = "A remote source was applied to the system hosts file"
        self.notifications.show_notification(message, "info")
        return self._reload_after_remote_apply()

    async def _reload_after_remote_apply(self) -> None:
        # Applying writes the hosts file, so an automatic backup exists now too
        await self.run_action(self.config_store.load_all)
        await self.run_action(self.backup_store.load_all)

    # -------- Actions --------

    async def run_action(self, operation: Callable[[], Awaitable[T]]) -> T | None:
        """
        Await a store action on behalf of the UI.

        HostSwitch errors become an error notification and yield None; any
        other exception is a programming error and propagates.
        """
        try:
            return await operation()
        except HostSwitchError as e:
            self.notifications.show_notification(e.user_message, "error")
            return None

    # -------- Configuration --------

    def _on_config_changed(self, key: str, value: Any) -> None:
        if key in ("sync.discard_stale_reloads", RESET_KEY):
            enabled = self.config_manager.get_bool("sync.discard_stale_reloads", True)
            for store in self.stores:
                store.discard_stale_reloads = enabled
        if key in ("notifications.default_duration_ms", RESET_KEY):
            self.notifications.default_duration = self.config_manager.get_int(
                "notifications.default_duration_ms", 3000
            )
