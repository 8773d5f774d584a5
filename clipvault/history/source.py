"""
clipvault.history.source — The live clipboard history.

``ClipboardHistory`` owns the ordered sequence of captured entries, newest
first, and notifies subscribers with a fresh snapshot after every change.
Subscribers get a ``Subscription`` handle and must ``cancel()`` it to stop
receiving updates.

Callbacks run synchronously on the thread that made the change.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable

from clipvault.models.entry import ClipboardKind, HistoryEntry

logger = logging.getLogger(__name__)

HistoryListener = Callable[[tuple[HistoryEntry, ...]], None]
ClipboardWriter = Callable[[HistoryEntry], bool]

DEFAULT_MAX_ITEMS = 100
DEFAULT_UNDO_TIMEOUT = 30.0


@dataclass(frozen=True)
class DeletedRecord:
    """An entry removed by ``ClipboardHistory.delete``, kept for undo."""

    entry: HistoryEntry
    index: int
    deleted_at: float


class Subscription:
    """Handle returned by ``ClipboardHistory.subscribe``."""

    def __init__(self, history: ClipboardHistory, listener: HistoryListener) -> None:
        self._history = history
        self._listener = listener
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop delivering updates.  Safe to call more than once."""
        if self._cancelled:
            return
        self._cancelled = True
        self._history._unsubscribe(self)

    def _deliver(self, entries: tuple[HistoryEntry, ...]) -> None:
        if not self._cancelled:
            self._listener(entries)


class ClipboardHistory:
    """Ordered, observable clipboard history.

    Parameters
    ----------
    clipboard_writer : ClipboardWriter | None
        Puts an entry on the system clipboard.  Defaults to the pyperclip
        writer in ``clipvault.history.clipboard``.
    max_items : int
        Oldest entries beyond this count are dropped.  Subscribers still see
        the grown sequence once before the oldest entry goes.
    undo_timeout : float
        Seconds during which ``undo_delete`` can restore a deletion.
    clock : Callable[[], float]
        Monotonic time source for the undo window.
    """

    def __init__(
        self,
        entries: Iterable[HistoryEntry] = (),
        *,
        clipboard_writer: ClipboardWriter | None = None,
        max_items: int = DEFAULT_MAX_ITEMS,
        undo_timeout: float = DEFAULT_UNDO_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if clipboard_writer is None:
            from clipvault.history.clipboard import write_entry

            clipboard_writer = write_entry

        self.max_items = max_items
        self._entries: list[HistoryEntry] = list(entries)[:max_items]
        self._writer = clipboard_writer
        self._subscriptions: list[Subscription] = []
        self._lock = threading.RLock()

        self.undo_timeout = undo_timeout
        self._clock = clock
        self._deleted: list[DeletedRecord] = []

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        """Snapshot of the history, newest first."""
        with self._lock:
            return tuple(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def find(self, unique_identifier: str) -> HistoryEntry | None:
        with self._lock:
            for entry in self._entries:
                if entry.unique_identifier == unique_identifier:
                    return entry
        return None

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: HistoryListener) -> Subscription:
        """Register *listener* to be called with a snapshot after each change."""
        subscription = Subscription(self, listener)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def _publish(self) -> None:
        with self._lock:
            snapshot = tuple(self._entries)
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription._deliver(snapshot)

    # ------------------------------------------------------------------
    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _trim_locked(self) -> bool:
        if len(self._entries) <= self.max_items:
            return False
        dropped = self._entries[self.max_items:]
        del self._entries[self.max_items:]
        for entry in dropped:
            logger.debug("Dropped %r past the %d item limit", entry.preview, self.max_items)
        return True

    def _publish_growth(self) -> None:
        # Subscribers must see the grown sequence before the cap is applied,
        # otherwise a full history never appears to grow.
        self._publish()
        with self._lock:
            trimmed = self._trim_locked()
        if trimmed:
            self._publish()

    def add(self, entry: HistoryEntry) -> bool:
        """Record a new capture at the front of the history.

        If an entry with the same ``unique_identifier`` is already first,
        nothing happens and False is returned.  If it exists further down, it
        is moved to the front with a fresh timestamp.
        """
        identifier = entry.unique_identifier
        with self._lock:
            if self._entries and self._entries[0].unique_identifier == identifier:
                return False

            for index, existing in enumerate(self._entries):
                if existing.unique_identifier == identifier:
                    del self._entries[index]
                    self._entries.insert(0, existing.touched())
                    grew = False
                    break
            else:
                self._entries.insert(0, entry)
                grew = True

        if grew:
            self._publish_growth()
        else:
            self._publish()
        return True

    def remove(self, entry: HistoryEntry) -> bool:
        """Remove the entry with the same ``id``.  Returns False if absent."""
        with self._lock:
            before = len(self._entries)
            self._entries = [e for e in self._entries if e.id != entry.id]
            changed = len(self._entries) != before
        if changed:
            self._publish()
        return changed

    def delete(self, entry: HistoryEntry) -> bool:
        """Remove the entry with the same ``id`` and remember it for ``undo_delete``."""
        with self._lock:
            for index, existing in enumerate(self._entries):
                if existing.id == entry.id:
                    del self._entries[index]
                    self._deleted.append(DeletedRecord(existing, index, self._clock()))
                    break
            else:
                return False
        self._publish()
        return True

    @property
    def can_undo(self) -> bool:
        """True while the most recent deletion can still be undone."""
        with self._lock:
            self._prune_deleted_locked()
            return bool(self._deleted)

    def undo_delete(self) -> HistoryEntry | None:
        """Put the most recently deleted entry back where it was.

        Returns the restored entry, or None when there is nothing to undo,
        the deletion is older than ``undo_timeout``, or an entry with the same
        ``unique_identifier`` has been captured again in the meantime.
        """
        with self._lock:
            self._prune_deleted_locked()
            if not self._deleted:
                return None
            record = self._deleted.pop()
            identifier = record.entry.unique_identifier
            if any(e.unique_identifier == identifier for e in self._entries):
                logger.info("Not restoring %r, it is already in the history", record.entry.preview)
                return None
            self._entries.insert(min(record.index, len(self._entries)), record.entry)

        self._publish_growth()
        return record.entry

    def _prune_deleted_locked(self) -> None:
        cutoff = self._clock() - self.undo_timeout
        self._deleted = [r for r in self._deleted if r.deleted_at >= cutoff]

    def update_content(self, entry: HistoryEntry, content: str) -> HistoryEntry | None:
        """Replace the text of a text or link entry, keeping its position.

        Returns the edited entry, or None if the entry is gone, is not
        editable, or *content* is blank.
        """
        if entry.kind not in (ClipboardKind.TEXT, ClipboardKind.URL):
            return None
        if not content.strip():
            return None

        with self._lock:
            for index, existing in enumerate(self._entries):
                if existing.id == entry.id:
                    updated = existing.with_content(content)
                    self._entries[index] = updated
                    break
            else:
                return None

        self._publish()
        return updated

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._deleted.clear()
        self._publish()

    def replace(self, entries: Iterable[HistoryEntry]) -> None:
        """Swap in a whole new history (e.g. one loaded from disk)."""
        with self._lock:
            self._entries = list(entries)[: self.max_items]
        self._publish()

    def commit_to_clipboard(self, entry: HistoryEntry) -> bool:
        """Put *entry* on the system clipboard and move it to the front.

        The history length does not change when *entry* is already present.
        Returns the writer's result.
        """
        ok = self._writer(entry)
        if not ok:
            logger.warning("Could not copy entry %s to the clipboard", entry.id)

        with self._lock:
            before = len(self._entries)
            self._entries = [e for e in self._entries if e.id != entry.id]
            grew = len(self._entries) == before
            self._entries.insert(0, entry.touched())

        if grew:
            self._publish_growth()
        else:
            self._publish()
        return ok
