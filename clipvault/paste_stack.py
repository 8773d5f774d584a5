"""
clipvault.paste_stack — Stage several copies and paste them one by one.

While a session is active, every new capture in the live history is appended
to a FIFO queue (unless an entry with the same ``unique_identifier`` is
already queued).  After each paste, ``advance_after_paste`` drops the pasted
head and puts the next queued entry on the system clipboard.

Queue changes from the history subscription and from user actions are
serialized by one lock, and ``end_session`` guarantees that no update can
touch the queue once it returns.
"""

from __future__ import annotations

import logging
import threading

from clipvault.history.source import ClipboardHistory, Subscription
from clipvault.models.entry import HistoryEntry

logger = logging.getLogger(__name__)


class PasteStackSession:
    """FIFO paste queue fed by a ``ClipboardHistory``."""

    def __init__(self, history: ClipboardHistory) -> None:
        self._history = history
        self._items: list[HistoryEntry] = []
        self._subscription: Subscription | None = None
        self._active = False
        self._last_seen = 0
        self._last_head: str | None = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def items(self) -> tuple[HistoryEntry, ...]:
        """Read-only view of the queue, head first."""
        with self._lock:
            return tuple(self._items)

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._active

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start_session(self) -> None:
        """Clear the queue and start collecting new captures."""
        with self._lock:
            if self._subscription is not None:
                self._subscription.cancel()
            self._items.clear()
            self._active = True
            current = self._history.entries
            self._last_seen = len(current)
            self._last_head = current[0].id if current else None
            self._subscription = self._history.subscribe(self._on_history_update)
        logger.debug("Paste stack session started at history length %d", self._last_seen)

    def end_session(self) -> None:
        """Stop collecting.  The queue is left as it is."""
        with self._lock:
            self._active = False
            if self._subscription is not None:
                self._subscription.cancel()
                self._subscription = None
        logger.debug("Paste stack session ended with %d staged items", len(self._items))

    def _on_history_update(self, entries: tuple[HistoryEntry, ...]) -> None:
        with self._lock:
            if not self._active:
                return

            head = entries[0].id if entries else None
            # Only a new entry at the front counts as a capture; restoring an
            # older entry grows the history without changing the head.
            if len(entries) > self._last_seen and head != self._last_head:
                newest = entries[0]
                identifier = newest.unique_identifier
                if not any(item.unique_identifier == identifier for item in self._items):
                    self._items.append(newest)
                    logger.debug("Staged %r", newest.preview)

            # Track length even without an append so a shrinking history
            # cannot re-stage older entries later.
            self._last_seen = len(entries)
            self._last_head = head

    # ------------------------------------------------------------------
    # Queue operations
    # ------------------------------------------------------------------

    def remove_item(self, entry: HistoryEntry) -> None:
        """Remove the queued entry with the same ``id``, if any."""
        with self._lock:
            self._items = [item for item in self._items if item.id != entry.id]

    def clear_stack(self) -> None:
        with self._lock:
            self._items.clear()

    def pop_next_item(self) -> HistoryEntry | None:
        """Remove and return the head of the queue, or None if it is empty."""
        with self._lock:
            if not self._items:
                return None
            return self._items.pop(0)

    def copy_to_clipboard(self, entry: HistoryEntry) -> None:
        self._history.commit_to_clipboard(entry)

    def advance_after_paste(self) -> HistoryEntry | None:
        """Drop the item that was just pasted and stage the next one.

        Returns the new head (now on the system clipboard), or None when the
        queue is empty afterwards.
        """
        with self._lock:
            if not self._items:
                return None
            self._items.pop(0)
            next_item = self._items[0] if self._items else None

        if next_item is not None:
            self._history.commit_to_clipboard(next_item)
        return next_item
