"""
clipvault.history.clipboard — System clipboard read/write.

Uses ``pyperclip`` to talk to the OS clipboard.  Failures are logged and
reported through the return value; nothing here raises.
"""

from __future__ import annotations

import logging

import pyperclip

from clipvault.models.entry import ClipboardKind, HistoryEntry

logger = logging.getLogger(__name__)


def read_clipboard() -> str | None:
    """Return the current clipboard text, or ``None`` if it is empty or unreadable."""
    try:
        content = pyperclip.paste()
    except pyperclip.PyperclipException as exc:
        logger.warning("Clipboard access failed: %s", exc)
        return None
    return content or None


def write_text(text: str) -> bool:
    """Copy *text* to the system clipboard.  Returns True on success."""
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as exc:
        logger.warning("Clipboard access failed: %s", exc)
        return False
    return True


def write_entry(entry: HistoryEntry) -> bool:
    """Put *entry* on the system clipboard.

    pyperclip only carries text, so file entries are written as their paths,
    one per line.
    """
    if entry.kind is ClipboardKind.FILE and entry.file_urls:
        return write_text("\n".join(entry.file_urls))
    return write_text(entry.content)
