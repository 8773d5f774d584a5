"""
clipvault.models — Clipboard history data types.

Exports:
    HistoryEntry   — one captured clipboard event
    ClipboardKind  — payload classification
    SourceApp      — originating application descriptor
    LinkMetadata   — link preview descriptor
"""

from clipvault.models.entry import (
    ClipboardKind,
    HistoryEntry,
    LinkMetadata,
    SourceApp,
    file_name,
    file_path,
    looks_like_url,
)

__all__ = [
    "ClipboardKind",
    "HistoryEntry",
    "LinkMetadata",
    "SourceApp",
    "file_name",
    "file_path",
    "looks_like_url",
]
