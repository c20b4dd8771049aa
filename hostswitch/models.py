"""
Canonical Records
Data models representing the entities the UI keeps in sync with the backend:
hosts configurations, hosts-file backups and remote hosts sources.
These are pure data classes without business logic; building them from raw
backend payloads is the normalizer's job.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class UpdateFreq(str, Enum):
    """How often the backend refreshes a remote source."""

    MANUAL = "manual"
    STARTUP = "startup"


class SourceStatus(str, Enum):
    """Outcome of the last fetch of a remote source."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


def format_timestamp(value: datetime | None) -> str:
    """Render a timestamp in its canonical (ISO 8601) form, or '' when unset."""
    return value.isoformat() if value is not None else ""


@dataclass(frozen=True)
class ConfigurationRecord:
    """
    {
        "name": "ConfigurationRecord",
        "version": "1.0.0",
        "description": "Canonical hosts configuration as held in the configuration store.",
        "dependencies": [],
        "interface": {
            "inputs": ["id", "name", "description", "content", "is_active", "updated_at"],
            "outputs": "Immutable configuration record"
        }
    }
    A named hosts-file configuration. At most one configuration is active at a
    time; the backend decides which, the store only reflects it after reload.
    """

    id: str
    name: str
    description: str = ""
    content: str = ""
    is_active: bool = False
    source: str = "local"
    remote_url: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the canonical key convention used by the backend."""
        return {
            "ID": self.id,
            "Name": self.name,
            "Description": self.description,
            "Content": self.content,
            "IsActive": self.is_active,
            "Source": self.source,
            "RemoteURL": self.remote_url,
            "CreatedAt": format_timestamp(self.created_at),
            "UpdatedAt": format_timestamp(self.updated_at),
        }


@dataclass(frozen=True)
class BackupRecord:
    """
    Snapshot of the system hosts file. Created by the backend on every write
    to the hosts file (automatic) or on user request (manual).
    """

    id: str
    timestamp: datetime | None = None
    is_automatic: bool = False
    description: str = ""
    tags: tuple[str, ...] = ()
    size: int = 0
    content: str = ""
    hash: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to the canonical key convention used by the backend."""
        return {
            "ID": self.id,
            "Timestamp": format_timestamp(self.timestamp),
            "IsAutomatic": self.is_automatic,
            "Description": self.description,
            "Tags": list(self.tags),
            "Size": self.size,
            "Content": self.content,
            "Hash": self.hash,
        }


@dataclass(frozen=True)
class RemoteSourceRecord:
    """A subscribed remote hosts list."""

    id: str
    name: str
    url: str
    update_freq: UpdateFreq = UpdateFreq.MANUAL
    last_updated_at: datetime | None = None
    last_content: str = ""
    status: SourceStatus = SourceStatus.PENDING

    def to_dict(self) -> dict[str, Any]:
        """Convert to the canonical key convention used by the backend."""
        return {
            "ID": self.id,
            "Name": self.name,
            "URL": self.url,
            "UpdateFreq": self.update_freq.value,
            "LastUpdatedAt": format_timestamp(self.last_updated_at),
            "LastContent": self.last_content,
            "Status": self.status.value,
        }


@dataclass(frozen=True)
class BackupStats:
    """Aggregate counters over the backup list."""

    total: int = 0
    automatic: int = 0
    manual: int = 0
    total_size: int = 0

    @classmethod
    def empty(cls) -> "BackupStats":
        return cls()

    @classmethod
    def from_payload(cls, payload: Any) -> "BackupStats":
        """
        Build stats from a backend payload ({total, automatic, manual, totalSize}).
        Missing or malformed counters read as zero.
        """
        if not isinstance(payload, dict):
            return cls.empty()

        def _count(*keys: str) -> int:
            for key in keys:
                value = payload.get(key)
                if isinstance(value, bool):
                    continue
                try:
                    return max(int(value), 0)
                except (TypeError, ValueError):
                    continue
            return 0

        return cls(
            total=_count("total", "Total"),
            automatic=_count("automatic", "Automatic"),
            manual=_count("manual", "Manual"),
            total_size=_count("totalSize", "TotalSize", "total_size"),
        )
