"""
Core Architecture Components

This package contains the building blocks of the HostSwitch state layer.

Key Components:
- ConfigManager: layered configuration with change observers
- ListenerRegistry: idempotent subscription tracking with scoped cleanup
- LoadingFlag and the with_loading* wrappers: shared async call policies
"""

from .async_ops import LoadingFlag, safe_async, with_loading, with_loading_and_reload
from .config_manager import ConfigManager
from .event_registry import ListenerRegistry, ListenerScope

__all__ = [
    "ConfigManager",
    "ListenerRegistry",
    "ListenerScope",
    "LoadingFlag",
    "safe_async",
    "with_loading",
    "with_loading_and_reload",
]
