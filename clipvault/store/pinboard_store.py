"""
clipvault.store.pinboard_store — Named collections of pinned history entries.

A pinboard holds references (``HistoryEntry.id`` values) rather than copies,
so pinning costs nothing and an entry that falls out of the history simply
stops showing up on its boards.

Boards live in ``pinboards.json`` beside the history document.  Every change
is written straight away with the same atomic replace the history uses.  A
missing or unreadable file loads as no boards.
"""

from __future__ import annotations

import logging
import uuid
from enum import Enum
from pathlib import Path
from typing import Sequence

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from clipvault.models.entry import HistoryEntry
from clipvault.store.atomic import write_atomic

logger = logging.getLogger(__name__)

DEFAULT_PINBOARD_NAME = "Untitled"


class PinboardColor(str, Enum):
    """Label colours a pinboard can carry."""

    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"
    ORANGE = "orange"
    PINK = "pink"
    CYAN = "cyan"


class Pinboard(BaseModel):
    """A named, coloured list of pinned entry ids.

    Attributes
    ----------
    id : str
        Stable identity of the board.
    name : str
        Display name; not required to be unique.
    color : PinboardColor
        Label colour.
    item_ids : list[str]
        ``HistoryEntry.id`` values, in the order they were pinned.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str = DEFAULT_PINBOARD_NAME
    color: PinboardColor = PinboardColor.RED
    item_ids: list[str] = Field(default_factory=list)


_DOCUMENT = TypeAdapter(list[Pinboard])


class PinboardStore:
    """Load, edit and persist the list of pinboards.

    Parameters
    ----------
    path : Path | str
        Location of the pinboards document.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._boards: list[Pinboard] = self._load()

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @property
    def pinboards(self) -> list[Pinboard]:
        return [board.model_copy(deep=True) for board in self._boards]

    def find(self, name_or_id: str) -> Pinboard | None:
        """Look a board up by id, then by case-insensitive name."""
        for board in self._boards:
            if board.id == name_or_id:
                return board.model_copy(deep=True)
        wanted = name_or_id.casefold()
        for board in self._boards:
            if board.name.casefold() == wanted:
                return board.model_copy(deep=True)
        return None

    def items_for(self, pinboard: Pinboard, entries: Sequence[HistoryEntry]) -> list[HistoryEntry]:
        """Entries from *entries* pinned on *pinboard*, in history order."""
        board = self._get(pinboard.id)
        if board is None:
            return []
        pinned = set(board.item_ids)
        return [entry for entry in entries if entry.id in pinned]

    @property
    def total_pinned_count(self) -> int:
        return sum(len(board.item_ids) for board in self._boards)

    # ------------------------------------------------------------------
    # Boards
    # ------------------------------------------------------------------

    def create(self, name: str = DEFAULT_PINBOARD_NAME, color: PinboardColor = PinboardColor.RED) -> Pinboard:
        board = Pinboard(name=name, color=color)
        self._boards.append(board)
        self._save()
        return board.model_copy(deep=True)

    def update(self, pinboard: Pinboard) -> bool:
        """Replace the stored board with the same id.  Returns False if unknown."""
        for index, board in enumerate(self._boards):
            if board.id == pinboard.id:
                self._boards[index] = pinboard.model_copy(deep=True)
                self._save()
                return True
        return False

    def delete(self, pinboard: Pinboard) -> bool:
        before = len(self._boards)
        self._boards = [board for board in self._boards if board.id != pinboard.id]
        if len(self._boards) == before:
            return False
        self._save()
        return True

    def clear_all(self) -> None:
        """Unpin everything.  The boards themselves are kept."""
        for board in self._boards:
            board.item_ids.clear()
        self._save()

    # ------------------------------------------------------------------
    # Pinned items
    # ------------------------------------------------------------------

    def add_item(self, entry_id: str, pinboard: Pinboard) -> bool:
        """Pin *entry_id* on *pinboard*.  Returns False if already pinned or unknown board."""
        board = self._get(pinboard.id)
        if board is None or entry_id in board.item_ids:
            return False
        board.item_ids.append(entry_id)
        self._save()
        return True

    def remove_item(self, entry_id: str, pinboard: Pinboard) -> bool:
        board = self._get(pinboard.id)
        if board is None or entry_id not in board.item_ids:
            return False
        board.item_ids = [item for item in board.item_ids if item != entry_id]
        self._save()
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get(self, pinboard_id: str) -> Pinboard | None:
        for board in self._boards:
            if board.id == pinboard_id:
                return board
        return None

    def _load(self) -> list[Pinboard]:
        if not self.path.exists():
            return []
        try:
            return _DOCUMENT.validate_json(self.path.read_bytes())
        except (OSError, ValidationError, ValueError) as exc:
            logger.error("Failed to load pinboards from %s: %s", self.path, exc)
            return []

    def _save(self) -> None:
        try:
            write_atomic(self.path, _DOCUMENT.dump_json(self._boards, indent=2))
            logger.debug("Saved %d pinboards to %s", len(self._boards), self.path)
        except Exception:
            logger.exception("Failed to save pinboards to %s", self.path)
