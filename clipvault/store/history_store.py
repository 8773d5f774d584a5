"""
clipvault.store.history_store — Debounced, atomic persistence of the history.

Storage is a single JSON document (``~/.clipvault/history.json`` by default).
Rapid clipboard activity produces many save requests; they are coalesced:

- ``schedule_save`` snapshots the entries into a single pending slot and
  restarts a quiet-period timer.
- When the timer fires without being restarted, the pending snapshot is
  taken out of the slot and written.  Superseded snapshots are never written.

Writes go to a temporary file in the same directory and are moved over the
document with ``os.replace``, so readers never see a half-written file.
Writes are serialized: one that starts later always lands later, and
``close`` waits for a debounced write that is already running.

Nothing here raises to the caller: a missing or corrupt document loads as an
empty history, and failed writes are logged and dropped.
"""

from __future__ import annotations

import logging
import shutil
import threading
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from clipvault.models.entry import HistoryEntry
from clipvault.store import schema
from clipvault.store.atomic import write_atomic
from clipvault.store.schema import PersistedEntry

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 1.5
CORRUPT_SUFFIX = ".corrupt"


class HistoryStore:
    """Load and save the clipboard history document.

    Parameters
    ----------
    path : Path | str
        Location of the history document.
    debounce_seconds : float
        Quiet period after the last ``schedule_save`` before writing.
    """

    def __init__(self, path: Path | str, debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS) -> None:
        self.path = Path(path)
        self.debounce_seconds = debounce_seconds

        # Single-slot mailbox; only the latest snapshot matters
        self._pending: list[PersistedEntry] | None = None
        self._lock = threading.Lock()

        self._timer: threading.Timer | None = None
        self._timer_lock = threading.Lock()

        # Held for a whole encode-and-replace so writes land in call order
        self._write_lock = threading.RLock()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> list[HistoryEntry]:
        """Read the history document.

        Returns an empty list if the document does not exist or cannot be
        decoded.  A corrupt document is left where it is; a copy is kept
        beside it with a ``.corrupt`` suffix.
        """
        if not self.path.exists():
            return []

        try:
            data = self.path.read_bytes()
            return schema.decode(data)
        except (OSError, ValidationError, ValueError) as exc:
            logger.error("Failed to load history from %s: %s", self.path, exc)
            self._backup_corrupt()
            return []

    def _backup_corrupt(self) -> None:
        backup = self.path.with_name(self.path.name + CORRUPT_SUFFIX)
        try:
            shutil.copy2(self.path, backup)
            logger.warning("Kept a copy of the unreadable history at %s", backup)
        except OSError as exc:
            logger.warning("Could not back up unreadable history: %s", exc)

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def schedule_save(self, entries: Sequence[HistoryEntry]) -> None:
        """Queue *entries* for a debounced write.  Returns immediately.

        Any snapshot still waiting from an earlier call is discarded.
        """
        items = schema.snapshot(entries)
        with self._lock:
            self._pending = items
        self._restart_timer()

    def save_immediately(self, entries: Sequence[HistoryEntry]) -> None:
        """Write *entries* now, bypassing the debounce.  Meant for shutdown."""
        self._write(schema.snapshot(entries))

    def flush(self) -> bool:
        """Write the pending snapshot now, if there is one.

        Returns True if a write was attempted.
        """
        self._cancel_timer()
        return self._flush_pending()

    def close(self) -> None:
        """Stop the debounce timer and write anything still pending.

        A debounced write that is already running is waited for, so any
        write issued after ``close`` returns lands last.
        """
        timer = self._cancel_timer()
        if timer is not None and timer.is_alive() and timer is not threading.current_thread():
            timer.join()
        self._flush_pending()

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def delete_history_file(self) -> None:
        """Remove the history document.  A pending save is not affected."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.error("Failed to delete history file %s: %s", self.path, exc)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _restart_timer(self) -> None:
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self.debounce_seconds, self._flush_pending)
            timer.daemon = True
            timer.name = "clipvault-history-save"
            self._timer = timer
            timer.start()

    def _cancel_timer(self) -> threading.Timer | None:
        with self._timer_lock:
            timer = self._timer
            if timer is not None:
                timer.cancel()
                self._timer = None
        return timer

    def _flush_pending(self) -> bool:
        # Take the snapshot under the write lock so it cannot be written
        # after a newer direct write that started later.
        with self._write_lock:
            with self._lock:
                items = self._pending
                self._pending = None

            if items is None:
                return False
            self._write(items)
            return True

    def _write(self, items: list[PersistedEntry]) -> None:
        with self._write_lock:
            self._replace_document(items)

    def _replace_document(self, items: list[PersistedEntry]) -> None:
        try:
            write_atomic(self.path, schema.encode(items))
            logger.debug("Saved %d history entries to %s", len(items), self.path)
        except Exception:
            logger.exception("Failed to save history to %s", self.path)
