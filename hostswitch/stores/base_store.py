"""
Entity Store Base

Common machinery for the configuration, backup and remote-source stores.
A store holds an authoritative local cache of canonical records that only
load_all() ever writes, and only by replacing it wholesale. Mutations go to
the backend first and become visible through a full reload afterwards.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from functools import partial
from typing import Any

from PyQt6.QtCore import QObject, pyqtSignal

from hostswitch.core.async_ops import LoadingFlag, with_loading, with_loading_and_reload
from hostswitch.exceptions import (
    BridgeError,
    BridgeUnavailableError,
    HostSwitchError,
    InvalidIdentifierError,
)

logger = logging.getLogger(__name__)


def identifier_of(item: Any) -> str:
    """Trimmed identifier of a record or raw mapping (canonical 'ID' or legacy 'id')."""
    if isinstance(item, Mapping):
        value = item.get("ID") or item.get("id")
    else:
        value = getattr(item, "id", None)
    return str(value).strip() if value is not None else ""


def require_identifier(value: Any) -> str:
    """Stringify and trim an identifier argument; blank or None is rejected."""
    candidate = str(value).strip() if value is not None else ""
    if not candidate:
        raise InvalidIdentifierError()
    return candidate


class EntityStore(QObject):
    """
    {
        "name": "EntityStore",
        "version": "1.0.0",
        "description": "Authoritative, reload-after-write cache of one backend entity type.",
        "dependencies": ["IHostsBridge", "LoadingFlag"],
        "interface": {
            "inputs": ["bridge calls", "reload triggers"],
            "outputs": "changed signal and pure projections over the cache"
        }
    }

    Subclasses name the bridge list operation and provide normalization and
    the canonical ordering of the cache.
    """

    changed = pyqtSignal()

    entity_name = "entity"
    list_operation = ""

    def __init__(
        self,
        bridge: Any,
        *,
        discard_stale_reloads: bool = True,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._bridge = bridge
        self._cache: tuple = ()
        self._discard_stale_reloads = discard_stale_reloads
        self._reload_generation = 0
        self.loading = LoadingFlag(self)

    # -------- Read access --------

    @property
    def items(self) -> list:
        return list(self._cache)

    @property
    def count(self) -> int:
        return len(self._cache)

    @property
    def is_loading(self) -> bool:
        return self.loading.value

    @property
    def discard_stale_reloads(self) -> bool:
        return self._discard_stale_reloads

    @discard_stale_reloads.setter
    def discard_stale_reloads(self, enabled: bool) -> None:
        self._discard_stale_reloads = bool(enabled)

    # -------- Subclass hooks --------

    def _normalize(self, raw: Any) -> list:
        raise NotImplementedError

    def _normalize_one(self, raw: Any) -> Any:
        records = self._normalize(raw) if isinstance(raw, Mapping) else []
        return records[0] if records else raw

    def _order(self, records: Iterable[Any]) -> list:
        return list(records)

    def _on_cache_reset(self) -> None:
        """Called after a failed load emptied the cache."""

    # -------- Cache --------

    def _replace_cache(self, records: Iterable[Any]) -> None:
        self._cache = tuple(self._order(records))
        logger.debug(f"{self.entity_name} cache replaced: {len(self._cache)} records")
        self.changed.emit()

    def _reset_cache(self) -> None:
        self._cache = ()
        self._on_cache_reset()
        self.changed.emit()

    def _is_stale(self, generation: int) -> bool:
        return self._discard_stale_reloads and generation != self._reload_generation

    async def load_all(self) -> list:
        """
        Re-read the full list from the backend and replace the cache.

        On failure the cache is emptied (never left stale) and the error is
        re-raised. A result that arrives after a newer reload was issued is
        discarded.
        """
        self._reload_generation += 1
        generation = self._reload_generation

        async def _fetch() -> list:
            return self._normalize(await self._invoke(self.list_operation))

        def _apply(records: list) -> None:
            if self._is_stale(generation):
                logger.warning(f"Discarding stale {self.entity_name} reload #{generation}")
                return
            self._replace_cache(records)

        def _on_error(error: BaseException) -> None:
            logger.error(f"Failed to load {self.entity_name} list: {error}")
            if not self._is_stale(generation):
                self._reset_cache()

        await with_loading(_fetch, self.loading, _apply, _on_error)
        return self.items

    # -------- Backend calls --------

    async def _invoke(self, operation: str, *args: Any) -> Any:
        """Call a bridge operation, turning backend failures into BridgeError."""
        method = getattr(self._bridge, operation, None)
        if method is None:
            raise BridgeUnavailableError(
                f"Backend does not provide '{operation}'", operation=operation
            )
        try:
            return await method(*args)
        except HostSwitchError as e:
            e.with_context(operation=operation)
            raise
        except Exception as e:
            raise BridgeError(str(e) or e.__class__.__name__, operation=operation) from e

    def _log_failure(self, operation: str, error: BaseException) -> None:
        logger.error(f"{self.entity_name} operation '{operation}' failed: {error}")

    def _reload_with(
        self,
        *linked: "EntityStore | None",
        include_self: bool = True,
    ) -> Callable[[], Awaitable[None]]:
        """
        Build the reload step of a mutation: this store first, then linked
        stores whose state the backend changes as a side effect. A linked
        reload failure is logged; it leaves that store empty but does not
        fail the mutation.
        """

        async def _reload() -> None:
            if include_self:
                await self.load_all()
            for store in linked:
                if store is None:
                    continue
                try:
                    await store.load_all()
                except HostSwitchError as e:
                    logger.warning(f"Linked reload of {store.entity_name} failed: {e}")

        return _reload

    async def _mutate(
        self,
        operation: str,
        *args: Any,
        reload: Callable[[], Awaitable[Any]] | None = None,
    ) -> Any:
        """Run a mutating bridge call followed by a full reload."""
        return await with_loading_and_reload(
            lambda: self._invoke(operation, *args),
            self.loading,
            reload or self.load_all,
            partial(self._log_failure, operation),
        )
