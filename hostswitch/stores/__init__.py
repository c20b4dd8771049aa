"""
State Stores

Reactive caches of backend state. Each store re-reads the authoritative
list after every successful mutation instead of patching its cache.
"""

from .admin_gate import AdminGate
from .backup_store import BackupStore
from .base_store import EntityStore
from .config_store import ConfigurationStore
from .notification_store import NotificationStore
from .remote_store import RemoteSourceStore

__all__ = [
    "AdminGate",
    "BackupStore",
    "ConfigurationStore",
    "EntityStore",
    "NotificationStore",
    "RemoteSourceStore",
]
