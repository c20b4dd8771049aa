"""
Record Normalizer

Converts the heterogeneous records returned by the backend into canonical
records. Backend payloads are not schema-stable: the same field may arrive as
"ID" or "id", "updateFreq" or "update_freq", timestamps may be RFC 3339
strings or Go-style {"Time": ...} wrappers. Each record type is described by
an explicit, ordered alias table; resolution is a pure function that either
returns a fully-typed record or None.

Key Features:
- Fixed alias priority per field (canonical key first)
- Control-character stripping, trimming and length bounds for text fields
- Closed-set coercion for enumerated fields
- Never raises for malformed input
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

from hostswitch.models import (
    BackupRecord,
    ConfigurationRecord,
    RemoteSourceRecord,
    SourceStatus,
    UpdateFreq,
)

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 100

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")
_SHORT_FRACTION = re.compile(r"\.(\d{1,5})(?=[+-]|$)")
_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})
_TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
)


class FieldKind(Enum):
    """How a raw value is coerced into its canonical form."""

    TEXT = "text"
    NAME = "name"
    CONTENT = "content"
    BOOL = "bool"
    SIZE = "size"
    TIMESTAMP = "timestamp"
    TAGS = "tags"
    CHOICE = "choice"


@dataclass(frozen=True)
class FieldSpec:
    """One canonical field and the raw keys it may arrive under."""

    attribute: str
    canonical: str
    aliases: tuple[str, ...] = ()
    kind: FieldKind = FieldKind.TEXT
    default: Any = ""
    choices: type[Enum] | None = None
    required: bool = False

    @property
    def keys(self) -> tuple[str, ...]:
        return (self.canonical, *self.aliases)


@dataclass(frozen=True)
class RecordSchema:
    """Alias table for one record type."""

    name: str
    record_type: type
    fields: tuple[FieldSpec, ...]


CONFIGURATION_SCHEMA = RecordSchema(
    name="configuration",
    record_type=ConfigurationRecord,
    fields=(
        FieldSpec("id", "ID", ("id", "Id"), required=True),
        FieldSpec("name", "Name", ("name",), FieldKind.NAME, required=True),
        FieldSpec("description", "Description", ("description",)),
        FieldSpec("content", "Content", ("content",), FieldKind.CONTENT),
        FieldSpec("is_active", "IsActive", ("isActive", "is_active"), FieldKind.BOOL, False),
        FieldSpec("source", "Source", ("source",), default="local"),
        FieldSpec("remote_url", "RemoteURL", ("remoteUrl", "remote_url", "RemoteUrl")),
        FieldSpec("created_at", "CreatedAt", ("createdAt", "created_at"), FieldKind.TIMESTAMP, None),
        FieldSpec("updated_at", "UpdatedAt", ("updatedAt", "updated_at"), FieldKind.TIMESTAMP, None),
    ),
)

BACKUP_SCHEMA = RecordSchema(
    name="backup",
    record_type=BackupRecord,
    fields=(
        FieldSpec("id", "ID", ("id", "Id"), required=True),
        FieldSpec("timestamp", "Timestamp", ("timestamp",), FieldKind.TIMESTAMP, None),
        FieldSpec("is_automatic", "IsAutomatic", ("isAutomatic", "is_automatic"), FieldKind.BOOL, False),
        FieldSpec("description", "Description", ("description",)),
        FieldSpec("tags", "Tags", ("tags",), FieldKind.TAGS, ()),
        FieldSpec("size", "Size", ("size",), FieldKind.SIZE, 0),
        FieldSpec("content", "Content", ("content",), FieldKind.CONTENT),
        FieldSpec("hash", "Hash", ("hash",)),
    ),
)

REMOTE_SOURCE_SCHEMA = RecordSchema(
    name="remote_source",
    record_type=RemoteSourceRecord,
    fields=(
        FieldSpec("id", "ID", ("id",), required=True),
        FieldSpec("name", "Name", ("name",), FieldKind.NAME, required=True),
        FieldSpec("url", "URL", ("url",), required=True),
        FieldSpec(
            "update_freq",
            "UpdateFreq",
            ("updateFreq", "update_freq"),
            FieldKind.CHOICE,
            UpdateFreq.MANUAL,
            UpdateFreq,
        ),
        FieldSpec(
            "last_updated_at",
            "LastUpdatedAt",
            ("lastUpdatedAt", "last_updated_at"),
            FieldKind.TIMESTAMP,
            None,
        ),
        FieldSpec("last_content", "LastContent", ("lastContent", "last_content"), FieldKind.CONTENT),
        FieldSpec(
            "status",
            "Status",
            ("status",),
            FieldKind.CHOICE,
            SourceStatus.PENDING,
            SourceStatus,
        ),
    ),
)


def clean_text(value: Any) -> str:
    """Stringify, strip control characters and trim."""
    if value is None:
        return ""
    return _CONTROL_CHARS.sub("", str(value)).strip()


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse the timestamp shapes the backend is known to produce.

    Args:
        value: datetime, ISO/RFC 3339 string, "YYYY-MM-DD HH:MM:SS", epoch
               seconds or milliseconds, or a {"Time": ...} wrapper
    Returns:
        Timezone-aware datetime (naive values are taken as UTC), or None when
        the value is empty, Go's zero time, or unparseable
    """
    if isinstance(value, Mapping):
        for key in ("Time", "time"):
            if key in value:
                return parse_timestamp(value[key])
        return None

    parsed: datetime | None = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if abs(value) > 1e11 else value
        try:
            parsed = datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        parsed = _parse_timestamp_string(value.strip())

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    # Go's zero time.Time means "never"
    if parsed.year <= 1:
        return None
    return parsed


def _parse_timestamp_string(text: str) -> datetime | None:
    if not text:
        return None
    iso = text[:-1] + "+00:00" if text[-1] in "zZ" else text
    iso = _LONG_FRACTION.sub(r"\1", iso)
    iso = _SHORT_FRACTION.sub(lambda m: "." + m.group(1).ljust(6, "0"), iso)
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _resolve(raw: Mapping, spec: FieldSpec) -> Any:
    """First non-empty value under the canonical key or an alias, in order."""
    for key in spec.keys:
        if key in raw and not _is_empty(raw[key]):
            return raw[key]
    return None


def _coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return default


def _coerce_size(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        size = int(float(value)) if isinstance(value, str) else int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return max(size, 0)


def _coerce_tags(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        candidates: Iterable[Any] = value.split(",")
    elif isinstance(value, (set, frozenset)):
        candidates = sorted(value, key=str)
    elif isinstance(value, (list, tuple)):
        candidates = value
    else:
        return ()
    seen: dict[str, None] = {}
    for candidate in candidates:
        tag = clean_text(candidate)
        if tag:
            seen.setdefault(tag, None)
    return tuple(seen)


def _coerce_choice(value: Any, spec: FieldSpec) -> Enum:
    if isinstance(value, spec.choices):
        return value
    text = clean_text(value.value if isinstance(value, Enum) else value).casefold()
    try:
        return spec.choices(text)
    except ValueError:
        return spec.default


def _coerce_content(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return ""


def _coerce_name(value: Any) -> str:
    return clean_text(value)[:MAX_NAME_LENGTH].strip()


_COERCERS: dict[FieldKind, Callable[[Any, FieldSpec], Any]] = {
    FieldKind.TEXT: lambda value, spec: clean_text(value),
    FieldKind.NAME: lambda value, spec: _coerce_name(value),
    FieldKind.CONTENT: lambda value, spec: _coerce_content(value),
    FieldKind.BOOL: lambda value, spec: _coerce_bool(value, spec.default),
    FieldKind.SIZE: lambda value, spec: _coerce_size(value, spec.default),
    FieldKind.TIMESTAMP: lambda value, spec: parse_timestamp(value),
    FieldKind.TAGS: lambda value, spec: _coerce_tags(value),
    FieldKind.CHOICE: _coerce_choice,
}


def _coerce(value: Any, spec: FieldSpec) -> Any:
    if value is None:
        return spec.default
    try:
        return _COERCERS[spec.kind](value, spec)
    except Exception as e:
        logger.debug(f"Falling back to default for '{spec.canonical}': {e}")
        return spec.default


def normalize(raw: Any, schema: RecordSchema = REMOTE_SOURCE_SCHEMA) -> Any:
    """
    Normalize one raw backend record.

    Args:
        raw: Raw mapping from the backend, or an already canonical record
        schema: Alias table of the record type
    Returns:
        Canonical record, or None if the input is not a mapping or a required
        field is empty after cleaning
    """
    if isinstance(raw, schema.record_type):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        logger.debug(f"Ignoring non-object {schema.name} payload: {type(raw).__name__}")
        return None

    values: dict[str, Any] = {}
    for spec in schema.fields:
        value = _coerce(_resolve(raw, spec), spec)
        if spec.required and _is_empty(value):
            logger.debug(f"Dropping {schema.name} record without '{spec.canonical}'")
            return None
        values[spec.attribute] = value
    return schema.record_type(**values)


def normalize_many(raw: Any, schema: RecordSchema = REMOTE_SOURCE_SCHEMA) -> list:
    """
    Normalize a list of raw records, silently dropping rejected ones.

    A bare mapping (or canonical record) is treated as a one-element list.
    Anything that is neither a mapping nor an iterable yields [].
    """
    if raw is None or isinstance(raw, (str, bytes, bytearray)):
        return []
    if isinstance(raw, (Mapping, schema.record_type)):
        raw = [raw]
    elif not isinstance(raw, Iterable):
        return []

    records = []
    for item in raw:
        record = normalize(item, schema)
        if record is not None:
            records.append(record)
    return records


def normalize_configuration(raw: Any) -> ConfigurationRecord | None:
    return normalize(raw, CONFIGURATION_SCHEMA)


def normalize_configurations(raw: Any) -> list[ConfigurationRecord]:
    return normalize_many(raw, CONFIGURATION_SCHEMA)


def normalize_backup(raw: Any) -> BackupRecord | None:
    return normalize(raw, BACKUP_SCHEMA)


def normalize_backups(raw: Any) -> list[BackupRecord]:
    return normalize_many(raw, BACKUP_SCHEMA)


def normalize_remote_source(raw: Any) -> RemoteSourceRecord | None:
    return normalize(raw, REMOTE_SOURCE_SCHEMA)


def normalize_remote_sources(raw: Any) -> list[RemoteSourceRecord]:
    return normalize_many(raw, REMOTE_SOURCE_SCHEMA)
