"""
Configuration Store

Cache and actions for named hosts configurations and the system hosts file.
"""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from PyQt6.QtCore import QObject

from hostswitch.core.async_ops import safe_async, with_loading_and_reload
from hostswitch.core.normalizer import normalize_configurations
from hostswitch.exceptions import ValidationError
from hostswitch.models import ConfigurationRecord

from .base_store import EntityStore, require_identifier

if TYPE_CHECKING:
    from .backup_store import BackupStore

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class ConfigurationStore(EntityStore):
    """
    {
        "name": "ConfigurationStore",
        "version": "1.0.0",
        "description": "Hosts configurations, activation and raw system hosts file access.",
        "dependencies": ["IConfigBridge", "BackupStore"],
        "interface": {
            "inputs": ["configuration ids", "names", "hosts content"],
            "outputs": "sorted_configs, active_config and changed signal"
        }
    }
    Writes that touch the system hosts file make the backend take an
    automatic backup, so they also reload the linked backup store.
    """

    entity_name = "configuration"
    list_operation = "get_all_configs"

    def __init__(
        self,
        bridge: Any,
        *,
        backup_store: "BackupStore | None" = None,
        discard_stale_reloads: bool = True,
        parent: QObject | None = None,
    ):
        super().__init__(bridge, discard_stale_reloads=discard_stale_reloads, parent=parent)
        self.backup_store = backup_store
        self.system_hosts_path = ""

    def _normalize(self, raw: Any) -> list[ConfigurationRecord]:
        return normalize_configurations(raw)

    # -------- Projections --------

    @property
    def sorted_configs(self) -> list[ConfigurationRecord]:
        """Active configuration first, then most recently updated first."""
        by_recency = sorted(self._cache, key=lambda c: c.updated_at or _OLDEST, reverse=True)
        return sorted(by_recency, key=lambda c: not c.is_active)

    @property
    def active_config(self) -> ConfigurationRecord | None:
        return next((c for c in self._cache if c.is_active), None)

    # -------- Actions --------

    @staticmethod
    def _require_name(name: Any) -> str:
        cleaned = str(name).strip() if name is not None else ""
        if not cleaned:
            message = "Configuration name must not be empty."
            raise ValidationError(message, field="name", value=name, user_message=message)
        return cleaned

    async def create(self, name: str, description: str = "", content: str = "") -> Any:
        name = self._require_name(name)
        result = await self._mutate("create_config", name, description, content)
        logger.info(f"Configuration '{name}' created")
        return self._normalize_one(result)

    async def update(self, config_id: Any, name: str, description: str = "", content: str = "") -> Any:
        config_id = require_identifier(config_id)
        name = self._require_name(name)
        result = await self._mutate("update_config", config_id, name, description, content)
        return self._normalize_one(result)

    async def delete(self, config_id: Any) -> None:
        config_id = require_identifier(config_id)
        await self._mutate("delete_config", config_id)
        logger.info(f"Configuration {config_id} deleted")

    async def apply(self, config_id: Any) -> None:
        """Make a configuration the active one and write it to the system hosts file."""
        config_id = require_identifier(config_id)
        await self._mutate("apply_config", config_id, reload=self._reload_with(self.backup_store))
        logger.info(f"Configuration {config_id} applied to system hosts")

    async def read_system_hosts(self) -> str:
        return await safe_async(
            lambda: self._invoke("read_system_hosts"),
            lambda e: self._log_failure("read_system_hosts", e),
        )

    async def write_system_hosts(self, content: str) -> None:
        await with_loading_and_reload(
            lambda: self._invoke("write_system_hosts", content),
            self.loading,
            self._reload_with(self.backup_store, include_self=False),
            lambda e: self._log_failure("write_system_hosts", e),
        )
        logger.info("System hosts file written")

    async def validate_hosts_content(self, content: str) -> bool:
        """Ask the backend to validate hosts text; returns True or raises."""
        await safe_async(
            lambda: self._invoke("validate_hosts_content", content),
            lambda e: logger.warning(f"Hosts content rejected: {e}"),
        )
        return True

    async def restore_default_hosts(self) -> None:
        await self._mutate("restore_default_hosts", reload=self._reload_with(self.backup_store))
        logger.info("System hosts file restored to defaults")

    async def flush_dns_cache(self) -> None:
        await safe_async(
            lambda: self._invoke("flush_dns_cache"),
            lambda e: self._log_failure("flush_dns_cache", e),
        )
        logger.info("DNS cache flushed")

    async def get_system_hosts_path(self) -> str:
        path = await safe_async(
            lambda: self._invoke("get_system_hosts_path"),
            lambda e: self._log_failure("get_system_hosts_path", e),
        )
        self.system_hosts_path = str(path or "")
        return self.system_hosts_path
