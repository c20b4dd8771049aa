"""
Listener Registry

Tracks every subscription the UI makes, so that components that are rebuilt
often cannot wire the same handler twice or leave subscriptions behind.

Two kinds of subscriptions are tracked:
- local: a handler connected to a named signal of a target object
  (a Qt bound signal, or anything with connect/disconnect)
- push: a handler for a backend-initiated event, delivered through the
  bridge's push channel

The registry is created by the composition root and handed to consumers;
there is no module-level instance.
"""

import asyncio
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from PyQt6.QtCore import QObject

from hostswitch.interfaces import IPushChannel

logger = logging.getLogger(__name__)

ListenerKey = tuple[int, str, Callable[..., Any]]


def _handler_name(handler: Callable[..., Any]) -> str:
    return getattr(handler, "__qualname__", None) or getattr(handler, "__name__", "anonymous")


@dataclass
class _LocalListener:
    target: Any
    event_name: str
    handler: Callable[..., Any]
    options: dict[str, Any] = field(default_factory=dict)


class ListenerRegistry:
    """
    {
        "name": "ListenerRegistry",
        "version": "1.0.0",
        "description": "Idempotent registration and complete teardown of UI and backend-push listeners.",
        "dependencies": ["PyQt6.QtCore", "IPushChannel"],
        "interface": {
            "inputs": ["target", "event_name", "handler"],
            "outputs": "Deduplicated subscriptions released by cleanup_all()"
        }
    }
    Registration is idempotent per (target, event name, handler) for local
    listeners and per (event name, handler) for push listeners. Several push
    handlers may share one event name; the channel itself is subscribed once
    per name through a dispatcher.
    """

    def __init__(self, push_channel: IPushChannel | None = None):
        self._push_channel = push_channel
        self._listeners: dict[ListenerKey, _LocalListener] = {}
        self._push_handlers: dict[str, list[Callable[..., Any]]] = {}
        self._pending_tasks: set[asyncio.Task] = set()
        self._scopes: set["ListenerScope"] = set()
        logger.info("ListenerRegistry initialized")

    # -------- Local listeners --------

    @staticmethod
    def _key(target: Any, event_name: str, handler: Callable[..., Any]) -> ListenerKey:
        return (id(target), event_name, handler)

    def register(
        self,
        target: Any,
        event_name: str,
        handler: Callable[..., Any],
        options: dict[str, Any] | None = None,
    ) -> bool:
        """
        Connect handler to target's event_name signal unless already connected.

        Args:
            target: Object exposing event_name as a signal
            event_name: Attribute name of the signal
            handler: Callable to connect
            options: Optional {"connection_type": Qt.ConnectionType}
        Returns:
            True if a new subscription was made, False if it already existed
        """
        key = self._key(target, event_name, handler)
        if key in self._listeners:
            logger.debug(f"Listener already registered: {event_name} -> {_handler_name(handler)}")
            return False

        options = dict(options or {})
        signal = getattr(target, event_name)
        connection_type = options.get("connection_type")
        if connection_type is not None:
            signal.connect(handler, connection_type)
        else:
            signal.connect(handler)

        self._listeners[key] = _LocalListener(target, event_name, handler, options)
        logger.debug(f"Registered listener: {event_name} -> {_handler_name(handler)}")
        return True

    def unregister(self, target: Any, event_name: str, handler: Callable[..., Any]) -> bool:
        """Disconnect and forget a local listener; no-op when it is not tracked."""
        listener = self._listeners.pop(self._key(target, event_name, handler), None)
        if listener is None:
            return False
        self._disconnect(listener)
        logger.debug(f"Unregistered listener: {event_name} -> {_handler_name(handler)}")
        return True

    def is_registered(self, target: Any, event_name: str, handler: Callable[..., Any]) -> bool:
        return self._key(target, event_name, handler) in self._listeners

    def _disconnect(self, listener: _LocalListener) -> None:
        try:
            getattr(listener.target, listener.event_name).disconnect(listener.handler)
        except (TypeError, RuntimeError) as e:
            # Target already destroyed or connection already gone
            logger.debug(f"Disconnect of '{listener.event_name}' skipped: {e}")

    # -------- Push listeners --------

    def register_push(self, event_name: str, handler: Callable[..., Any]) -> bool:
        """
        Add handler for a backend push event.

        Returns:
            True if the handler was added, False if it was already present or
            no push channel is available
        """
        if self._push_channel is None:
            logger.warning(f"No push channel available; '{event_name}' listener not registered")
            return False

        handlers = self._push_handlers.get(event_name)
        if handlers is None:
            handlers = self._push_handlers[event_name] = []
            self._push_channel.events_on(event_name, self._make_dispatcher(event_name))
            logger.debug(f"Subscribed to push event '{event_name}'")
        if handler in handlers:
            return False
        handlers.append(handler)
        return True

    def unregister_push(self, event_name: str, handler: Callable[..., Any] | None = None) -> bool:
        """
        Remove one push handler, or all of them when handler is None.
        The channel subscription is released once no handler remains.
        """
        handlers = self._push_handlers.get(event_name)
        if handlers is None:
            return False
        if handler is not None:
            if handler not in handlers:
                return False
            handlers.remove(handler)
            if handlers:
                return True
        del self._push_handlers[event_name]
        if self._push_channel is not None:
            self._push_channel.events_off(event_name)
        logger.debug(f"Unsubscribed from push event '{event_name}'")
        return True

    def _make_dispatcher(self, event_name: str) -> Callable[..., None]:
        def _dispatch(*args: Any) -> None:
            for handler in list(self._push_handlers.get(event_name, ())):
                try:
                    result = handler(*args)
                except Exception as e:
                    logger.error(f"Push handler {_handler_name(handler)} for '{event_name}' failed: {e}")
                    continue
                if inspect.isawaitable(result):
                    self._schedule(event_name, result)

        return _dispatch

    def _schedule(self, event_name: str, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop; async handler for '{event_name}' dropped")
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return
        task = asyncio.ensure_future(awaitable, loop=loop)
        self._pending_tasks.add(task)

        def _done(finished: asyncio.Task) -> None:
            self._pending_tasks.discard(finished)
            if finished.cancelled():
                return
            error = finished.exception()
            if error is not None:
                logger.error(f"Push handler task for '{event_name}' failed: {error}")

        task.add_done_callback(_done)

    async def drain(self) -> None:
        """Wait for push handler tasks that are still running."""
        while self._pending_tasks:
            await asyncio.gather(*list(self._pending_tasks), return_exceptions=True)

    # -------- Teardown --------

    def cleanup_all(self) -> None:
        """Release every tracked subscription. Safe to call more than once."""
        for scope in list(self._scopes):
            scope.dispose()
        for listener in list(self._listeners.values()):
            self._disconnect(listener)
        self._listeners.clear()

        for event_name in list(self._push_handlers):
            if self._push_channel is not None:
                self._push_channel.events_off(event_name)
        self._push_handlers.clear()
        logger.debug("ListenerRegistry cleaned up")

    def listener_count(self) -> dict[str, int]:
        return {
            "local": len(self._listeners),
            "push": sum(len(handlers) for handlers in self._push_handlers.values()),
        }

    def scope(self, owner: QObject | None = None) -> "ListenerScope":
        """Create a scope whose registrations are released together."""
        return ListenerScope(self, owner)

    def live_scope_count(self) -> int:
        return len(self._scopes)


class ListenerScope:
    """
    Registrations bound to one owner's lifetime.

    dispose() releases exactly what was registered through this scope and runs
    once. Context-manager exit and cleanup_all() both call it; a scope given
    an owner QObject is also disposed when the owner is destroyed.

    The registry holds every undisposed scope, so a scope tied to an owner
    keeps working after the caller drops its own reference. PyQt only keeps
    a weak reference to a bound-method slot.
    """

    def __init__(self, registry: ListenerRegistry, owner: QObject | None = None):
        self._registry = registry
        self._local: list[tuple[Any, str, Callable[..., Any]]] = []
        self._push: list[tuple[str, Callable[..., Any]]] = []
        self._disposed = False
        registry._scopes.add(self)
        if owner is not None:
            owner.destroyed.connect(self.dispose)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def register(
        self,
        target: Any,
        event_name: str,
        handler: Callable[..., Any],
        options: dict[str, Any] | None = None,
    ) -> bool:
        if self._disposed:
            logger.warning(f"Ignoring registration of '{event_name}' on a disposed scope")
            return False
        added = self._registry.register(target, event_name, handler, options)
        if added:
            self._local.append((target, event_name, handler))
        return added

    def register_push(self, event_name: str, handler: Callable[..., Any]) -> bool:
        if self._disposed:
            logger.warning(f"Ignoring push registration of '{event_name}' on a disposed scope")
            return False
        added = self._registry.register_push(event_name, handler)
        if added:
            self._push.append((event_name, handler))
        return added

    def dispose(self, *_args: Any) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._registry._scopes.discard(self)
        for target, event_name, handler in self._local:
            self._registry.unregister(target, event_name, handler)
        for event_name, handler in self._push:
            self._registry.unregister_push(event_name, handler)
        self._local.clear()
        self._push.clear()

    def __enter__(self) -> "ListenerScope":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()
