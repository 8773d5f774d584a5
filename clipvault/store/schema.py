"""
clipvault.store.schema — On-disk representation of the history document.

The document is a JSON array of ``PersistedEntry`` objects in history order.
Timestamps are written as ISO-8601 with an explicit UTC offset.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from pydantic import BaseModel, ConfigDict, TypeAdapter, field_validator

from clipvault.models.entry import ClipboardKind, HistoryEntry, LinkMetadata, SourceApp


class PersistedSourceApp(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    bundle_id: str | None = None


class PersistedLinkMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    url: str | None = None


class PersistedEntry(BaseModel):
    """Encodable projection of a ``HistoryEntry``."""

    model_config = ConfigDict(extra="ignore")

    id: str
    content: str
    kind: ClipboardKind = ClipboardKind.TEXT
    timestamp: datetime
    file_urls: list[str] | None = None
    source_app: PersistedSourceApp | None = None
    link_metadata: PersistedLinkMetadata | None = None

    @field_validator("timestamp")
    @classmethod
    def _require_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> PersistedEntry:
        return cls(
            id=entry.id,
            content=entry.content,
            kind=entry.kind,
            timestamp=entry.timestamp.astimezone(timezone.utc),
            file_urls=list(entry.file_urls) if entry.file_urls is not None else None,
            source_app=(
                PersistedSourceApp(name=entry.source_app.name, bundle_id=entry.source_app.bundle_id)
                if entry.source_app is not None
                else None
            ),
            link_metadata=(
                PersistedLinkMetadata(title=entry.link_metadata.title, url=entry.link_metadata.url)
                if entry.link_metadata is not None
                else None
            ),
        )

    def to_entry(self) -> HistoryEntry:
        return HistoryEntry(
            id=self.id,
            content=self.content,
            kind=self.kind,
            timestamp=self.timestamp,
            file_urls=tuple(self.file_urls) if self.file_urls is not None else None,
            source_app=(
                SourceApp(name=self.source_app.name, bundle_id=self.source_app.bundle_id)
                if self.source_app is not None
                else None
            ),
            link_metadata=(
                LinkMetadata(title=self.link_metadata.title, url=self.link_metadata.url)
                if self.link_metadata is not None
                else None
            ),
        )


_DOCUMENT = TypeAdapter(list[PersistedEntry])


def snapshot(entries: Sequence[HistoryEntry]) -> list[PersistedEntry]:
    """Capture an encodable copy of *entries*."""
    return [PersistedEntry.from_entry(e) for e in entries]


def encode(items: list[PersistedEntry]) -> bytes:
    return _DOCUMENT.dump_json(items, indent=2)


def decode(data: bytes) -> list[HistoryEntry]:
    """Parse a history document.  Raises ``pydantic.ValidationError`` on bad input."""
    return [item.to_entry() for item in _DOCUMENT.validate_json(data)]
