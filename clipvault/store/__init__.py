"""
clipvault.store — Durable storage for the clipboard history and pinboards.
"""

from clipvault.store.history_store import HistoryStore
from clipvault.store.pinboard_store import Pinboard, PinboardColor, PinboardStore

__all__ = ["HistoryStore", "Pinboard", "PinboardColor", "PinboardStore"]
