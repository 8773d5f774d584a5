"""
clipvault.models.entry — The clipboard history entry and its descriptors.

A ``HistoryEntry`` is immutable.  Two ids live on it:

- ``id`` identifies one in-memory instance and is what removal works on.
- ``unique_identifier`` is derived from the payload and is the only thing
  used to decide whether two entries describe the same clipboard event.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse


class ClipboardKind(str, Enum):
    """What kind of payload an entry carries."""

    TEXT = "text"
    URL = "url"
    FILE = "file"
    IMAGE = "image"


_TYPE_LABELS: dict[ClipboardKind, str] = {
    ClipboardKind.TEXT: "Text",
    ClipboardKind.URL: "Link",
    ClipboardKind.FILE: "File",
    ClipboardKind.IMAGE: "Image",
}


@dataclass(frozen=True)
class SourceApp:
    """The application that owned the clipboard when the entry was captured.

    Attributes
    ----------
    name : str
        Human-readable application name (e.g. ``"Safari"``).
    bundle_id : str | None
        Reverse-DNS application identifier (e.g. ``"com.apple.Safari"``).
    """

    name: str
    bundle_id: str | None = None

    @property
    def bundle_tail(self) -> str | None:
        """Last dot-separated component of ``bundle_id``, if any."""
        if not self.bundle_id:
            return None
        return self.bundle_id.split(".")[-1]


@dataclass(frozen=True)
class LinkMetadata:
    """Preview information fetched for a copied link."""

    title: str | None = None
    url: str | None = None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


def file_path(path_or_url: str) -> str:
    """Return the filesystem path for a plain path or a ``file://`` URL.

    ``file:///tmp/a%20b`` and ``/tmp/a b`` both give ``/tmp/a b``.
    """
    if "://" in path_or_url:
        return unquote(urlparse(path_or_url).path)
    return path_or_url


def file_name(path_or_url: str) -> str:
    """Return the last path component of a file path or ``file://`` URL."""
    return PurePosixPath(file_path(path_or_url).rstrip("/")).name


def looks_like_url(text: str) -> bool:
    """True for a single token that reads as a web address.

    Accepts ``https://example.com`` as well as a bare ``example.com``; rejects
    anything containing whitespace.
    """
    candidate = text.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return False
    has_scheme = "://" in candidate
    if not has_scheme and "." not in candidate:
        return False
    if not has_scheme:
        candidate = "https://" + candidate
    try:
        return bool(urlparse(candidate).netloc)
    except ValueError:
        return False


@dataclass(frozen=True)
class HistoryEntry:
    """One captured clipboard event.

    Attributes
    ----------
    content : str
        Primary textual payload.  Image entries carry a digest of the image.
    kind : ClipboardKind
        Payload classification.
    timestamp : datetime
        Capture time.  Naive values are taken to be UTC.
    file_urls : tuple[str, ...] | None
        File paths or ``file://`` URLs for file entries.
    source_app : SourceApp | None
        Application the copy came from.
    link_metadata : LinkMetadata | None
        Link preview, for URL entries.
    id : str
        Process-local identity.
    """

    content: str
    kind: ClipboardKind = ClipboardKind.TEXT
    timestamp: datetime = field(default_factory=_utc_now)
    file_urls: tuple[str, ...] | None = None
    source_app: SourceApp | None = None
    link_metadata: LinkMetadata | None = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc))
        if self.file_urls is not None and not isinstance(self.file_urls, tuple):
            object.__setattr__(self, "file_urls", tuple(self.file_urls))
        if not isinstance(self.kind, ClipboardKind):
            object.__setattr__(self, "kind", ClipboardKind(self.kind))

    @property
    def unique_identifier(self) -> str:
        """Content-derived identity used for deduplication."""
        if self.kind is ClipboardKind.FILE:
            if self.file_urls:
                return "file-" + ",".join(sorted(file_path(u) for u in self.file_urls))
            return f"file-{self.id}"
        if self.kind is ClipboardKind.IMAGE:
            return f"image-{self.content}"
        return self.content

    @property
    def type_label(self) -> str:
        return _TYPE_LABELS[self.kind]

    @property
    def file_names(self) -> list[str]:
        return [file_name(u) for u in self.file_urls or ()]

    @property
    def preview(self) -> str:
        """Short single-line text suitable for list views."""
        if self.kind is ClipboardKind.IMAGE:
            return "Image"
        if self.kind is ClipboardKind.FILE:
            names = self.file_names
            if len(names) == 1:
                return names[0]
            return f"{len(names)} files" if names else "File"
        text = " ".join(self.content.split())
        if len(text) > 100:
            return text[:100] + "..."
        return text

    def with_content(self, content: str) -> HistoryEntry:
        """Return an edited copy holding *content*.

        Only text and link entries can be edited.  The text is stripped and
        reclassified as a link or plain text; link metadata survives only if
        the result is still a link.  ``id`` and ``timestamp`` are kept.
        """
        text = content.strip()
        kind = ClipboardKind.URL if looks_like_url(text) else ClipboardKind.TEXT
        return HistoryEntry(
            content=text,
            kind=kind,
            timestamp=self.timestamp,
            source_app=self.source_app,
            link_metadata=self.link_metadata if kind is ClipboardKind.URL else None,
            id=self.id,
        )

    def touched(self) -> HistoryEntry:
        """Return a copy of this entry with a fresh timestamp and the same id."""
        return HistoryEntry(
            content=self.content,
            kind=self.kind,
            timestamp=_utc_now(),
            file_urls=self.file_urls,
            source_app=self.source_app,
            link_metadata=self.link_metadata,
            id=self.id,
        )
