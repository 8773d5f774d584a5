"""Shared fixtures: every test gets its own clipvault home directory."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from clipvault.config import get_settings
from clipvault.history.source import ClipboardHistory
from clipvault.models.entry import HistoryEntry

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clipvault_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point CLIPVAULT_HOME at a temp dir and reset cached settings."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("CLIPVAULT_HOME", str(home))
    for var in ("CLIPVAULT_HISTORY_PATH", "CLIPVAULT_DEBOUNCE", "CLIPVAULT_MAX_ITEMS", "CLIPVAULT_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield home
    get_settings.cache_clear()


class FakeClipboard:
    """Records what would have been put on the system clipboard."""

    def __init__(self) -> None:
        self.committed: list[HistoryEntry] = []

    def __call__(self, entry: HistoryEntry) -> bool:
        self.committed.append(entry)
        return True


@pytest.fixture
def fake_clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def history(fake_clipboard: FakeClipboard) -> ClipboardHistory:
    return ClipboardHistory(clipboard_writer=fake_clipboard)


def make_entry(content: str, minutes: int = 0, **kwargs) -> HistoryEntry:
    """Build an entry captured *minutes* after a fixed base time."""
    return HistoryEntry(content=content, timestamp=BASE_TIME + timedelta(minutes=minutes), **kwargs)
