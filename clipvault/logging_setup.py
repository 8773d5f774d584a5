"""
clipvault.logging_setup — Route the ``clipvault`` loggers through rich.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_configured = False


def setup_logging(level: str = "WARNING") -> None:
    """Attach a ``RichHandler`` (stderr) to the ``clipvault`` logger.

    Calling it again only updates the level.
    """
    global _configured

    log_level = getattr(logging, level.upper(), logging.WARNING)
    root = logging.getLogger("clipvault")
    root.setLevel(log_level)

    if _configured:
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
    root.addHandler(handler)
    _configured = True
