"""
Backend Bridge Interfaces

Defines the abstract contract the UI-side state layer needs from the
privileged native backend, following the Dependency Inversion Principle (DIP).
The backend owns filesystem access, privilege elevation, DNS cache flushing
and remote fetching; none of that lives in this package.

Every call is asynchronous and either returns a result or raises an
exception carrying a human-readable message.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any


class IPushChannel(ABC):
    """
    Backend push notification channel.

    Delivers backend-initiated events (e.g. "system-hosts-updated") to a
    callback registered under a string event name.
    """

    @abstractmethod
    def events_on(self, event_name: str, callback: Callable[..., Any]) -> None:
        """Subscribe callback to event_name."""
        pass

    @abstractmethod
    def events_off(self, event_name: str) -> None:
        """Drop every subscription for event_name."""
        pass


class IConfigBridge(ABC):
    """Configuration and system hosts file operations."""

    @abstractmethod
    async def get_all_configs(self) -> Any:
        """Return every stored configuration (raw records)."""
        pass

    @abstractmethod
    async def create_config(self, name: str, description: str, content: str) -> Any:
        """Create a configuration and return it."""
        pass

    @abstractmethod
    async def update_config(
        self, config_id: str, name: str, description: str, content: str
    ) -> Any:
        """Update a configuration and return it."""
        pass

    @abstractmethod
    async def delete_config(self, config_id: str) -> None:
        """Delete a configuration."""
        pass

    @abstractmethod
    async def apply_config(self, config_id: str) -> None:
        """Write a configuration to the system hosts file and mark it active."""
        pass

    @abstractmethod
    async def get_system_hosts_path(self) -> str:
        """Return the path of the system hosts file."""
        pass

    @abstractmethod
    async def read_system_hosts(self) -> str:
        """Return the current system hosts file content."""
        pass

    @abstractmethod
    async def write_system_hosts(self, content: str) -> None:
        """Overwrite the system hosts file."""
        pass

    @abstractmethod
    async def validate_hosts_content(self, content: str) -> None:
        """Raise if content is not a valid hosts file."""
        pass

    @abstractmethod
    async def is_admin_required(self) -> bool:
        """Return True if writing the hosts file needs elevated privileges."""
        pass

    @abstractmethod
    async def restore_default_hosts(self) -> None:
        """Restore the operating system's default hosts file."""
        pass

    @abstractmethod
    async def flush_dns_cache(self) -> None:
        """Flush the operating system's DNS cache."""
        pass


class IBackupBridge(ABC):
    """Hosts file backup operations."""

    @abstractmethod
    async def get_all_backups(self) -> Any:
        pass

    @abstractmethod
    async def get_backup_stats(self) -> Any:
        pass

    @abstractmethod
    async def create_manual_backup(self, description: str, tags: list[str]) -> Any:
        pass

    @abstractmethod
    async def create_manual_backup_with_content(
        self, description: str, content: str, tags: list[str]
    ) -> Any:
        pass

    @abstractmethod
    async def restore_from_backup(self, backup_id: str) -> None:
        pass

    @abstractmethod
    async def delete_backup(self, backup_id: str) -> None:
        pass

    @abstractmethod
    async def update_backup_tags(self, backup_id: str, tags: list[str]) -> None:
        pass

    @abstractmethod
    async def update_backup_description(self, backup_id: str, description: str) -> None:
        pass


class IRemoteBridge(ABC):
    """Remote hosts source operations."""

    @abstractmethod
    async def get_all_remote_sources(self) -> Any:
        pass

    @abstractmethod
    async def add_remote_source(self, name: str, url: str, update_freq: str) -> Any:
        pass

    @abstractmethod
    async def update_remote_source(
        self, source_id: str, name: str, url: str, update_freq: str
    ) -> Any:
        pass

    @abstractmethod
    async def delete_remote_source(self, source_id: str) -> None:
        pass

    @abstractmethod
    async def fetch_remote_hosts(self, source_id: str) -> str:
        pass

    @abstractmethod
    async def create_config_from_remote(self, source_id: str) -> Any:
        pass

    @abstractmethod
    async def update_all_remote_sources(self) -> None:
        pass

    @abstractmethod
    async def apply_remote_to_system(self, source_id: str) -> None:
        pass


class IHostsBridge(IConfigBridge, IBackupBridge, IRemoteBridge, IPushChannel):
    """The complete backend surface consumed by HostSwitch."""
