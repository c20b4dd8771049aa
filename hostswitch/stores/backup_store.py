"""
Backup Store

Cache and actions for snapshots of the system hosts file, plus the
aggregate counters the backend reports for them.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from PyQt6.QtCore import QObject, pyqtSignal

from hostswitch.core.formatting import backup_preview, format_file_size, format_relative_time
from hostswitch.core.normalizer import normalize_backups
from hostswitch.exceptions import HostSwitchError
from hostswitch.models import BackupRecord, BackupStats

from .base_store import EntityStore, require_identifier

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)

__all__ = [
    "BackupStore",
    "backup_preview",
    "format_file_size",
    "format_relative_time",
]


def _tag_list(tags: Iterable[str] | str | None) -> list[str]:
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    seen: list[str] = []
    for tag in tags:
        tag = str(tag).strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class BackupStore(EntityStore):
    """
    Backups of the system hosts file, newest first.

    Two views of the totals exist: `stats` is computed from the cache and is
    always consistent with it; `server_stats` is whatever the backend last
    reported and may count backups outside the listed window.
    """

    stats_changed = pyqtSignal()

    entity_name = "backup"
    list_operation = "get_all_backups"

    def __init__(
        self,
        bridge: Any,
        *,
        preview_max_lines: int = 10,
        discard_stale_reloads: bool = True,
        parent: QObject | None = None,
    ):
        super().__init__(bridge, discard_stale_reloads=discard_stale_reloads, parent=parent)
        self.preview_max_lines = preview_max_lines
        self._server_stats = BackupStats.empty()

    def _normalize(self, raw: Any) -> list[BackupRecord]:
        return normalize_backups(raw)

    def _order(self, records: Iterable[BackupRecord]) -> list[BackupRecord]:
        return sorted(records, key=lambda b: b.timestamp or _OLDEST, reverse=True)

    def _on_cache_reset(self) -> None:
        self._server_stats = BackupStats.empty()
        self.stats_changed.emit()

    # -------- Projections --------

    @property
    def sorted_backups(self) -> list[BackupRecord]:
        return self._order(self._cache)

    @property
    def automatic_backups(self) -> list[BackupRecord]:
        return [b for b in self.sorted_backups if b.is_automatic]

    @property
    def manual_backups(self) -> list[BackupRecord]:
        return [b for b in self.sorted_backups if not b.is_automatic]

    @property
    def stats(self) -> BackupStats:
        automatic = sum(1 for b in self._cache if b.is_automatic)
        return BackupStats(
            total=len(self._cache),
            automatic=automatic,
            manual=len(self._cache) - automatic,
            total_size=sum(b.size for b in self._cache),
        )

    @property
    def server_stats(self) -> BackupStats:
        return self._server_stats

    # -------- Loading --------

    async def load_all(self) -> list[BackupRecord]:
        # The stats fetch belongs to the same busy window as the list
        self.loading.acquire()
        try:
            records = await super().load_all()
            await self.load_stats()
        finally:
            self.loading.release()
        return records

    async def load_stats(self) -> BackupStats:
        """Refresh backend-reported counters; falls back to zeros, never raises."""
        try:
            payload = await self._invoke("get_backup_stats")
        except HostSwitchError as e:
            logger.warning(f"Backup stats unavailable, using zero defaults: {e}")
            self._server_stats = BackupStats.empty()
        else:
            self._server_stats = BackupStats.from_payload(payload)
        self.stats_changed.emit()
        return self._server_stats

    # -------- Actions --------

    async def create(self, description: str = "", tags: Iterable[str] | str | None = ()) -> Any:
        """Snapshot the current system hosts file."""
        result = await self._mutate("create_manual_backup", description, _tag_list(tags))
        logger.info("Manual backup created")
        return self._normalize_one(result)

    async def create_with_content(
        self,
        description: str,
        content: str,
        tags: Iterable[str] | str | None = (),
    ) -> Any:
        """Store arbitrary hosts text as a manual backup."""
        result = await self._mutate(
            "create_manual_backup_with_content", description, content, _tag_list(tags)
        )
        logger.info("Manual backup created from content")
        return self._normalize_one(result)

    async def restore(self, backup_id: Any) -> None:
        backup_id = require_identifier(backup_id)
        await self._mutate("restore_from_backup", backup_id)
        logger.info(f"System hosts restored from backup {backup_id}")

    async def delete(self, backup_id: Any) -> None:
        backup_id = require_identifier(backup_id)
        await self._mutate("delete_backup", backup_id)
        logger.info(f"Backup {backup_id} deleted")

    async def update_tags(self, backup_id: Any, tags: Iterable[str] | str | None) -> None:
        backup_id = require_identifier(backup_id)
        await self._mutate("update_backup_tags", backup_id, _tag_list(tags))

    async def update_description(self, backup_id: Any, description: str) -> None:
        backup_id = require_identifier(backup_id)
        await self._mutate("update_backup_description", backup_id, description)

    # -------- Display helpers --------

    def preview(self, backup: BackupRecord, max_lines: int | None = None) -> str:
        return backup_preview(backup.content, self.preview_max_lines if max_lines is None else max_lines)
