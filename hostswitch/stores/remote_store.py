"""
Remote Source Store

Cache and actions for remote hosts lists the backend downloads on demand or
at startup.
"""

import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from PyQt6.QtCore import QObject

from hostswitch.core.normalizer import normalize_configuration, normalize_remote_sources
from hostswitch.exceptions import InvalidIdentifierError, SourceNotFoundError, ValidationError
from hostswitch.models import RemoteSourceRecord, UpdateFreq

from .base_store import EntityStore, identifier_of, require_identifier

if TYPE_CHECKING:
    from .backup_store import BackupStore
    from .config_store import ConfigurationStore

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"(\d+)")
_ALLOWED_SCHEMES = ("http://", "https://")


def natural_key(name: str) -> list:
    """Case-insensitive sort key that orders 'list2' before 'list10'."""
    parts = _DIGITS.split(name.casefold())
    # re.split with a capture group alternates text and digits
    return [int(part) if index % 2 else part for index, part in enumerate(parts)]


def _invalid(message: str, field: str, value: Any = None) -> ValidationError:
    # Local checks already describe the problem in user terms
    return ValidationError(message, field=field, value=value, user_message=message)


def _parse_update_freq(value: Any) -> UpdateFreq:
    if isinstance(value, UpdateFreq):
        return value
    text = str(value).strip().casefold() if value is not None else ""
    try:
        return UpdateFreq(text)
    except ValueError:
        raise _invalid(
            "Update frequency must be 'manual' or 'startup'.", "update_freq", value
        ) from None


def validate_source_params(name: Any, url: Any, update_freq: Any) -> tuple[str, str, UpdateFreq]:
    """Check remote source fields locally; returns the cleaned values."""
    name = str(name).strip() if name is not None else ""
    url = str(url).strip() if url is not None else ""
    if not name:
        raise _invalid("Remote source name must not be empty.", "name")
    if not url:
        raise _invalid("Remote source URL must not be empty.", "url")
    if not url.lower().startswith(_ALLOWED_SCHEMES):
        raise _invalid("Remote source URL must start with http:// or https://.", "url", url)
    return name, url, _parse_update_freq(update_freq)


class RemoteSourceStore(EntityStore):
    """
    {
        "name": "RemoteSourceStore",
        "version": "1.0.0",
        "description": "Remote hosts sources with fetch, import and apply actions.",
        "dependencies": ["IRemoteBridge", "ConfigurationStore", "BackupStore"],
        "interface": {
            "inputs": ["source ids", "name", "url", "update_freq"],
            "outputs": "name-sorted cache and changed signal"
        }
    }
    Actions addressing an existing source check the id against the local
    cache first, so an unknown id never reaches the backend.
    """

    entity_name = "remote source"
    list_operation = "get_all_remote_sources"

    def __init__(
        self,
        bridge: Any,
        *,
        config_store: "ConfigurationStore | None" = None,
        backup_store: "BackupStore | None" = None,
        discard_stale_reloads: bool = True,
        parent: QObject | None = None,
    ):
        super().__init__(bridge, discard_stale_reloads=discard_stale_reloads, parent=parent)
        self.config_store = config_store
        self.backup_store = backup_store

    def _normalize(self, raw: Any) -> list[RemoteSourceRecord]:
        return normalize_remote_sources(raw)

    def _order(self, records: Iterable[RemoteSourceRecord]) -> list[RemoteSourceRecord]:
        return sorted(records, key=lambda s: natural_key(s.name))

    # -------- Lookup --------

    def validate_source_id(self, source_id: Any) -> RemoteSourceRecord:
        """
        Resolve an id against the cache.

        Raises:
            InvalidIdentifierError: id is None or blank
            SourceNotFoundError: no cached source carries the id
        """
        if source_id is None:
            raise InvalidIdentifierError("Remote source id is missing")
        candidate = str(source_id).strip()
        if not candidate:
            raise InvalidIdentifierError("Remote source id is blank")
        for source in self._cache:
            if identifier_of(source) == candidate:
                return source
        raise SourceNotFoundError(candidate)

    # -------- Actions --------

    async def add(self, name: str, url: str, update_freq: UpdateFreq | str = UpdateFreq.MANUAL) -> Any:
        name, url, freq = validate_source_params(name, url, update_freq)
        result = await self._mutate("add_remote_source", name, url, freq.value)
        logger.info(f"Remote source '{name}' added")
        return self._normalize_one(result)

    async def update(
        self,
        source_id: Any,
        name: str,
        url: str,
        update_freq: UpdateFreq | str = UpdateFreq.MANUAL,
    ) -> Any:
        source_id = require_identifier(source_id)
        name, url, freq = validate_source_params(name, url, update_freq)
        result = await self._mutate("update_remote_source", source_id, name, url, freq.value)
        return self._normalize_one(result)

    async def delete(self, source_id: Any) -> None:
        source_id = require_identifier(source_id)
        await self._mutate("delete_remote_source", source_id)
        logger.info(f"Remote source {source_id} deleted")

    async def fetch(self, source_id: Any) -> str:
        """Download a source now; returns the fetched hosts text."""
        source = self.validate_source_id(source_id)
        body = await self._mutate("fetch_remote_hosts", source.id)
        logger.info(f"Remote source '{source.name}' fetched")
        return body if isinstance(body, str) else str(body or "")

    async def create_config_from_remote(self, source_id: Any) -> Any:
        """Import a source's last content as a new configuration."""
        source = self.validate_source_id(source_id)
        result = await self._mutate(
            "create_config_from_remote",
            source.id,
            reload=self._reload_with(self.config_store),
        )
        logger.info(f"Configuration created from remote source '{source.name}'")
        return normalize_configuration(result) or result

    async def update_all(self) -> None:
        """Refresh every remote source."""
        await self._mutate("update_all_remote_sources")
        logger.info("All remote sources updated")

    async def apply_to_system(self, source_id: Any) -> None:
        """Write a source's content into the system hosts file."""
        source = self.validate_source_id(source_id)
        await self._mutate(
            "apply_remote_to_system",
            source.id,
            reload=self._reload_with(self.config_store, self.backup_store),
        )
        logger.info(f"Remote source '{source.name}' applied to system hosts")
