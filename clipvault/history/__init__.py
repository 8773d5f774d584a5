"""
clipvault.history — The live clipboard history and system clipboard access.
"""

from clipvault.history.source import ClipboardHistory, DeletedRecord, Subscription

__all__ = ["ClipboardHistory", "DeletedRecord", "Subscription"]
