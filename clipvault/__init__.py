"""
clipvault — Clipboard history with debounced persistence, a paste stack,
and ranked search.
"""

__version__ = "0.1.0"
