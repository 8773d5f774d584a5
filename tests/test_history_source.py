"""Tests for clipvault.history — the observable live history."""

from __future__ import annotations

from unittest.mock import patch

import pyperclip
import pytest
from conftest import FakeClipboard, make_entry

from clipvault.history import ClipboardHistory
from clipvault.history.clipboard import read_clipboard, write_entry, write_text
from clipvault.models import ClipboardKind, HistoryEntry, LinkMetadata


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def undoable(fake_clipboard: FakeClipboard, clock: FakeClock) -> ClipboardHistory:
    history = ClipboardHistory(clipboard_writer=fake_clipboard, undo_timeout=30, clock=clock)
    for text in ("c", "b", "a"):
        history.add(make_entry(text))
    return history


class TestAdd:
    """Captures go to the front; repeats move to the front."""

    def test_newest_first(self, history: ClipboardHistory) -> None:
        """The latest capture is at index 0."""
        a, b = make_entry("a"), make_entry("b")
        history.add(a)
        history.add(b)
        assert history.entries == (b, a)

    def test_repeat_of_front_is_ignored(self, history: ClipboardHistory) -> None:
        """Copying the current front again changes nothing."""
        history.add(make_entry("a"))
        assert history.add(make_entry("a")) is False
        assert len(history) == 1

    def test_repeat_further_down_moves_to_front(self, history: ClipboardHistory) -> None:
        """An older repeat keeps its id and gets a fresh timestamp."""
        a = make_entry("a")
        history.add(a)
        history.add(make_entry("b"))
        history.add(make_entry("a"))
        assert [e.content for e in history.entries] == ["a", "b"]
        assert history.entries[0].id == a.id
        assert history.entries[0].timestamp > a.timestamp

    def test_max_items_drops_oldest(self, fake_clipboard: FakeClipboard) -> None:
        """The oldest entry goes once the limit is exceeded."""
        history = ClipboardHistory(clipboard_writer=fake_clipboard, max_items=2)
        for text in ("a", "b", "c"):
            history.add(make_entry(text))
        assert [e.content for e in history.entries] == ["c", "b"]

    def test_full_history_is_seen_growing_before_trim(self, fake_clipboard: FakeClipboard) -> None:
        """At the limit, listeners get the grown list and then the trimmed one."""
        history = ClipboardHistory(
            [make_entry("b"), make_entry("a")], clipboard_writer=fake_clipboard, max_items=2
        )
        seen: list[tuple[HistoryEntry, ...]] = []
        history.subscribe(seen.append)
        history.add(make_entry("c"))
        assert [[e.content for e in s] for s in seen] == [["c", "b", "a"], ["c", "b"]]

    def test_find_by_unique_identifier(self, history: ClipboardHistory) -> None:
        """find() looks entries up by content identity."""
        entry = make_entry("needle")
        history.add(entry)
        assert history.find("needle") is entry
        assert history.find("missing") is None


class TestMutation:

    def test_remove_by_id(self, history: ClipboardHistory) -> None:
        """remove() matches on id, not on content."""
        a = make_entry("a")
        history.add(a)
        twin = make_entry("a")
        assert history.remove(twin) is False
        assert history.remove(a) is True
        assert len(history) == 0

    def test_clear_and_replace(self, history: ClipboardHistory) -> None:
        """clear() empties; replace() swaps in a whole sequence."""
        history.add(make_entry("a"))
        history.clear()
        assert history.entries == ()
        entries = [make_entry("x"), make_entry("y")]
        history.replace(entries)
        assert history.entries == tuple(entries)

    def test_commit_moves_to_front_without_growing(
        self, history: ClipboardHistory, fake_clipboard: FakeClipboard
    ) -> None:
        """Committing an existing entry reorders but keeps the length."""
        a, b = make_entry("a"), make_entry("b")
        history.add(a)
        history.add(b)
        assert history.commit_to_clipboard(a) is True
        assert fake_clipboard.committed == [a]
        assert [e.content for e in history.entries] == ["a", "b"]
        assert len(history) == 2

    def test_commit_of_absent_entry_is_capped(self, fake_clipboard: FakeClipboard) -> None:
        """Committing an entry no longer in a full history still caps it."""
        history = ClipboardHistory(
            [make_entry("b"), make_entry("a")], clipboard_writer=fake_clipboard, max_items=2
        )
        history.commit_to_clipboard(make_entry("gone"))
        assert [e.content for e in history.entries] == ["gone", "b"]


class TestDeleteAndUndo:
    """delete() remembers the entry so undo_delete() can put it back."""

    def test_undo_restores_at_original_position(self, undoable: ClipboardHistory) -> None:
        """The entry returns to the index it was deleted from."""
        b = undoable.entries[1]
        assert undoable.delete(b) is True
        assert [e.content for e in undoable.entries] == ["a", "c"]
        assert undoable.can_undo
        assert undoable.undo_delete() == b
        assert [e.content for e in undoable.entries] == ["a", "b", "c"]
        assert not undoable.can_undo

    def test_undo_is_last_in_first_out(self, undoable: ClipboardHistory) -> None:
        """Several deletions are undone newest first."""
        a, b, c = undoable.entries
        undoable.delete(a)
        undoable.delete(c)
        assert undoable.undo_delete() == c
        assert undoable.undo_delete() == a
        assert [e.content for e in undoable.entries] == ["a", "b", "c"]

    def test_position_past_end_is_clamped(self, undoable: ClipboardHistory) -> None:
        """If the history shrank, the entry goes to the end."""
        a, b, c = undoable.entries
        undoable.delete(c)
        undoable.remove(a)
        undoable.remove(b)
        assert undoable.undo_delete() == c
        assert undoable.entries == (c,)

    def test_undo_expires(self, undoable: ClipboardHistory, clock: FakeClock) -> None:
        """Deletions older than the undo window are gone for good."""
        undoable.delete(undoable.entries[0])
        clock.now += 31
        assert not undoable.can_undo
        assert undoable.undo_delete() is None
        assert len(undoable) == 2

    def test_undo_within_window(self, undoable: ClipboardHistory, clock: FakeClock) -> None:
        """Undo still works just inside the window."""
        undoable.delete(undoable.entries[0])
        clock.now += 29
        assert undoable.undo_delete() is not None

    def test_nothing_to_undo(self, history: ClipboardHistory) -> None:
        """undo_delete() on a fresh history returns None."""
        assert history.undo_delete() is None

    def test_delete_unknown_entry(self, undoable: ClipboardHistory) -> None:
        """Deleting an entry that is not present records nothing."""
        assert undoable.delete(make_entry("a")) is False
        assert not undoable.can_undo

    def test_recaptured_entry_is_not_duplicated(self, undoable: ClipboardHistory) -> None:
        """Undo is skipped when the same content was copied again meanwhile."""
        undoable.delete(undoable.entries[0])
        undoable.add(make_entry("a"))
        assert undoable.undo_delete() is None
        assert [e.content for e in undoable.entries] == ["a", "b", "c"]

    def test_clear_forgets_deletions(self, undoable: ClipboardHistory) -> None:
        """Clearing the history also drops pending undos."""
        undoable.delete(undoable.entries[0])
        undoable.clear()
        assert undoable.undo_delete() is None

    def test_delete_and_undo_notify(self, undoable: ClipboardHistory) -> None:
        """Listeners see both the deletion and the restore."""
        seen: list[int] = []
        undoable.subscribe(lambda entries: seen.append(len(entries)))
        undoable.delete(undoable.entries[2])
        undoable.undo_delete()
        assert seen == [2, 3]


class TestUpdateContent:
    """update_content() edits text and link entries in place."""

    def test_edit_in_place(self, history: ClipboardHistory) -> None:
        """The edited entry keeps its position and id."""
        history.add(make_entry("first"))
        target = make_entry("second")
        history.add(target)
        history.add(make_entry("third"))
        updated = history.update_content(target, "  second, revised ")
        assert updated is not None
        assert updated.id == target.id
        assert [e.content for e in history.entries] == ["third", "second, revised", "first"]

    def test_reclassifies_as_link(self, history: ClipboardHistory) -> None:
        """Text that becomes an address is stored as a link."""
        entry = make_entry("todo")
        history.add(entry)
        assert history.update_content(entry, "example.com").kind is ClipboardKind.URL

    def test_link_to_text_drops_metadata(self, history: ClipboardHistory) -> None:
        """A link edited into prose loses its preview metadata."""
        entry = make_entry(
            "https://example.com", kind=ClipboardKind.URL, link_metadata=LinkMetadata(title="Example")
        )
        history.add(entry)
        updated = history.update_content(entry, "no longer a link")
        assert updated.kind is ClipboardKind.TEXT
        assert updated.link_metadata is None

    def test_blank_content_is_rejected(self, history: ClipboardHistory) -> None:
        """Whitespace-only edits are refused."""
        entry = make_entry("keep me")
        history.add(entry)
        assert history.update_content(entry, "   ") is None
        assert history.entries[0].content == "keep me"

    def test_files_and_images_are_not_editable(self, history: ClipboardHistory) -> None:
        """Only text and link entries can be edited."""
        image = make_entry("d41d8cd9", kind=ClipboardKind.IMAGE)
        history.add(image)
        assert history.update_content(image, "text") is None

    def test_missing_entry(self, history: ClipboardHistory) -> None:
        """Editing an entry that is not in the history does nothing."""
        assert history.update_content(make_entry("ghost"), "boo") is None

    def test_edit_notifies_without_growing(self, history: ClipboardHistory) -> None:
        """Listeners get one same-length snapshot per edit."""
        entry = make_entry("a")
        history.add(entry)
        seen: list[tuple[HistoryEntry, ...]] = []
        history.subscribe(seen.append)
        history.update_content(entry, "b")
        assert [[e.content for e in s] for s in seen] == [["b"]]


class TestSubscriptions:

    def test_listener_receives_snapshots(self, history: ClipboardHistory) -> None:
        """Every change delivers the full current snapshot."""
        seen: list[tuple[HistoryEntry, ...]] = []
        history.subscribe(seen.append)
        history.add(make_entry("a"))
        history.add(make_entry("b"))
        assert [len(s) for s in seen] == [1, 2]
        assert seen[-1] == history.entries

    def test_cancel_stops_updates(self, history: ClipboardHistory) -> None:
        """A cancelled subscription gets nothing more; cancel is idempotent."""
        seen: list[tuple[HistoryEntry, ...]] = []
        subscription = history.subscribe(seen.append)
        history.add(make_entry("a"))
        subscription.cancel()
        subscription.cancel()
        history.add(make_entry("b"))
        assert len(seen) == 1
        assert subscription.cancelled

    def test_ignored_repeat_does_not_notify(self, history: ClipboardHistory) -> None:
        """A no-op add publishes nothing."""
        seen: list[tuple[HistoryEntry, ...]] = []
        history.add(make_entry("a"))
        history.subscribe(seen.append)
        history.add(make_entry("a"))
        assert seen == []


class TestSystemClipboard:
    """pyperclip wrappers report failures instead of raising."""

    def test_write_text(self) -> None:
        """write_text hands the text to pyperclip."""
        with patch("clipvault.history.clipboard.pyperclip.copy") as copy:
            assert write_text("hello") is True
        copy.assert_called_once_with("hello")

    def test_write_failure_returns_false(self) -> None:
        """A PyperclipException becomes False."""
        with patch(
            "clipvault.history.clipboard.pyperclip.copy",
            side_effect=pyperclip.PyperclipException("no clipboard"),
        ):
            assert write_text("hello") is False

    def test_write_file_entry_writes_paths(self) -> None:
        """File entries are copied as newline-separated paths."""
        entry = HistoryEntry(content="", kind=ClipboardKind.FILE, file_urls=("/a", "/b"))
        with patch("clipvault.history.clipboard.pyperclip.copy") as copy:
            write_entry(entry)
        copy.assert_called_once_with("/a\n/b")

    def test_read_empty_is_none(self) -> None:
        """An empty clipboard reads as None."""
        with patch("clipvault.history.clipboard.pyperclip.paste", return_value=""):
            assert read_clipboard() is None

    def test_read_failure_is_none(self) -> None:
        """An unavailable clipboard reads as None."""
        with patch(
            "clipvault.history.clipboard.pyperclip.paste",
            side_effect=pyperclip.PyperclipException("no clipboard"),
        ):
            assert read_clipboard() is None
