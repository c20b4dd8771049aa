"""
Async Operation Wrappers

Shared policies for every call the stores make across the backend bridge:
- loading-flag lifecycle around the call
- reload-after-success for mutating calls
- error reporting followed by re-raise

Every mutating store action has the shape
    with_loading_and_reload(call_backend, store.loading, store.load_all)
so the store never trusts a mutation's return value as the new truth.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from PyQt6.QtCore import QObject, pyqtSignal

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]
ErrorHandler = Callable[[BaseException], Any]


class LoadingFlag(QObject):
    """
    Busy indicator shared by all operations of one store.

    Each operation takes a hold for its duration and the flag reads True
    while any hold is outstanding, so a reload nested inside a mutation
    (or overlapping it) cannot clear the flag early.
    """

    changed = pyqtSignal(bool)

    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self._holds = 0

    @property
    def value(self) -> bool:
        return self._holds > 0

    @property
    def holds(self) -> int:
        return self._holds

    def acquire(self) -> None:
        self._holds += 1
        if self._holds == 1:
            self.changed.emit(True)

    def release(self) -> None:
        if self._holds == 0:
            logger.warning("LoadingFlag released without a matching acquire")
            return
        self._holds -= 1
        if self._holds == 0:
            self.changed.emit(False)

    def __bool__(self) -> bool:
        return self.value


async def _maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


def _report(error: BaseException, on_error: ErrorHandler | None) -> None:
    if on_error is not None:
        on_error(error)
    else:
        logger.error(f"Operation failed: {error}")


async def with_loading(
    operation: Operation,
    loading: LoadingFlag,
    on_success: Callable[[Any], Any] | None = None,
    on_error: ErrorHandler | None = None,
) -> Any:
    """
    Run operation with the loading flag raised for its whole duration.

    Args:
        operation: Zero-argument callable returning an awaitable
        loading: Flag held for the call and released on every exit path
        on_success: Called (and awaited if needed) with the result
        on_error: Called with the exception instead of the default log line
    Returns:
        The operation's result
    Raises:
        Whatever operation or on_success raised, after on_error ran
    """
    loading.acquire()
    try:
        result = await operation()
        if on_success is not None:
            await _maybe_await(on_success(result))
        return result
    except Exception as e:
        _report(e, on_error)
        raise
    finally:
        loading.release()


async def with_loading_and_reload(
    operation: Operation,
    loading: LoadingFlag,
    reload: Callable[[], Awaitable[Any]] | None,
    on_error: ErrorHandler | None = None,
) -> Any:
    """
    Run a mutating operation, then re-read authoritative state.

    The loading flag covers the operation and the reload, so the UI sees a
    single busy window for the whole read-after-write cycle.
    """

    async def _reload(_result: Any) -> None:
        if reload is not None:
            await reload()

    return await with_loading(operation, loading, _reload, on_error)


async def safe_async(operation: Operation, on_error: ErrorHandler | None = None) -> Any:
    """Run a read-only operation with the standard error policy and no busy flag."""
    try:
        return await operation()
    except Exception as e:
        _report(e, on_error)
        raise
