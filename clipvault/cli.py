"""
clipvault.cli — Typer-based CLI entry-point.

Sub-commands:

    clipvault info               → paths and settings summary
    clipvault list               → history, newest first
    clipvault search "query"     → ranked search over history
    clipvault add "text"         → record an entry
    clipvault grab               → record the current system clipboard
    clipvault copy 3             → put entry #3 back on the clipboard
    clipvault delete 3           → remove entry #3
    clipvault edit 3 "text"      → change the text of entry #3
    clipvault pin ...            → pinboards (create, list, show, add, remove,
                                   rename, delete, clear)
    clipvault clear              → delete the history document
    clipvault stack              → interactive paste-stack shell
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from clipvault import __version__
from clipvault.config import get_settings
from clipvault.history.source import ClipboardHistory
from clipvault.logging_setup import setup_logging
from clipvault.models.entry import ClipboardKind, HistoryEntry, SourceApp
from clipvault.store.history_store import HistoryStore
from clipvault.store.pinboard_store import (
    DEFAULT_PINBOARD_NAME,
    Pinboard,
    PinboardColor,
    PinboardStore,
)

# ---------------------------------------------------------------------------
# Typer app
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="clipvault",
    help="clipvault — clipboard history, paste stack and search.",
    no_args_is_help=True,
    add_completion=True,
)
console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _open_store() -> HistoryStore:
    settings = get_settings()
    return HistoryStore(
        settings.history.resolved_path(),
        debounce_seconds=settings.history.debounce_seconds,
    )


def _open_history(store: HistoryStore) -> ClipboardHistory:
    settings = get_settings()
    return ClipboardHistory(
        store.load(),
        max_items=settings.history.max_items,
        undo_timeout=settings.history.undo_timeout_seconds,
    )


def _open_pinboards() -> PinboardStore:
    return PinboardStore(get_settings().history.pinboards_path())


def _pick(history: ClipboardHistory, index: int) -> HistoryEntry:
    entries = history.entries
    if not 1 <= index <= len(entries):
        _fail(f"No entry #{index} (history has {len(entries)}).")
    return entries[index - 1]


def _entries_table(rows: list[tuple[int, HistoryEntry, int | None]], title: str) -> Table:
    table = Table(title=title, show_lines=False, expand=False)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Preview")
    table.add_column("App", style="green")
    table.add_column("Copied", style="dim")
    show_score = any(score is not None for _, _, score in rows)
    if show_score:
        table.add_column("Score", justify="right", style="yellow")

    for index, entry, score in rows:
        cells = [
            str(index),
            entry.type_label,
            entry.preview,
            entry.source_app.name if entry.source_app else "",
            entry.timestamp.astimezone().strftime("%Y-%m-%d %H:%M"),
        ]
        if show_score:
            cells.append(str(score or 0))
        table.add_row(*cells)
    return table


def _fail(message: str) -> None:
    console.print(f"[red]✗ {message}[/red]")
    raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Callbacks (version flag, logging)
# ---------------------------------------------------------------------------


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold cyan]clipvault[/bold cyan] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """clipvault — your clipboard, remembered."""
    setup_logging("DEBUG" if verbose else get_settings().log_level)


# ---------------------------------------------------------------------------
# clipvault info
# ---------------------------------------------------------------------------


@app.command()
def info() -> None:
    """Print where history is kept and how it is saved."""
    settings = get_settings()
    store = _open_store()
    count = len(store.load())

    body = Text.assemble(
        ("History: ", "bold"),
        (str(store.path), "green"),
        "\n",
        ("Entries: ", "bold"),
        (str(count), "cyan"),
        "\n",
        ("Limit:   ", "bold"),
        (str(settings.history.max_items), "cyan"),
        "\n",
        ("Debounce:", "bold"),
        (f" {settings.history.debounce_seconds:g}s", "cyan"),
        "\n",
    )
    console.print(
        Panel(body, title=f"[bold]clipvault v{__version__}[/bold]", border_style="bright_blue")
    )


# ---------------------------------------------------------------------------
# clipvault list / search
# ---------------------------------------------------------------------------


@app.command("list")
def list_entries(
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Show at most N entries."),  # noqa: UP007
) -> None:
    """List the clipboard history, newest first."""
    entries = _open_store().load()
    if not entries:
        console.print("[dim]History is empty.[/dim]")
        return

    if limit is None:
        limit = get_settings().search.default_limit
    rows = [(i, e, None) for i, e in enumerate(entries[:limit], start=1)]
    console.print(_entries_table(rows, title=f"History ({len(entries)})"))


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to look for."),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Show at most N results."),  # noqa: UP007
) -> None:
    """Search the clipboard history, best match first."""
    from clipvault.search import ranked

    entries = _open_store().load()
    positions = {e.id: i for i, e in enumerate(entries, start=1)}
    results = ranked(query, entries)
    if not results:
        console.print(f"[dim]No matches for {query!r}.[/dim]")
        return

    if limit is None:
        limit = get_settings().search.default_limit
    rows = [(positions[r.entry.id], r.entry, r.score) for r in results[:limit]]
    console.print(_entries_table(rows, title=f"Results for {query!r}"))


# ---------------------------------------------------------------------------
# clipvault add / grab / copy
# ---------------------------------------------------------------------------


@app.command()
def add(
    text: str = typer.Argument(..., help="Content to record."),
    kind: ClipboardKind = typer.Option(ClipboardKind.TEXT, "--kind", "-k", help="Payload kind."),
    app_name: Optional[str] = typer.Option(None, "--app", help="Source application name."),  # noqa: UP007
) -> None:
    """Record an entry in the history."""
    store = _open_store()
    history = _open_history(store)

    entry = HistoryEntry(
        content=text,
        kind=kind,
        file_urls=(text,) if kind is ClipboardKind.FILE else None,
        source_app=SourceApp(name=app_name) if app_name else None,
    )
    if not history.add(entry):
        console.print("[dim]Already the most recent entry.[/dim]")
        return

    store.save_immediately(history.entries)
    console.print(f"[green]✓[/green] Recorded [bold]{entry.preview}[/bold].")


@app.command()
def grab() -> None:
    """Record whatever text is on the system clipboard right now."""
    from clipvault.history.clipboard import read_clipboard

    text = read_clipboard()
    if not text:
        _fail("Clipboard is empty or unreadable.")

    store = _open_store()
    history = _open_history(store)
    history.add(HistoryEntry(content=text))
    store.save_immediately(history.entries)
    console.print(f"[green]✓[/green] Recorded {len(text)} characters from the clipboard.")


@app.command()
def copy(
    index: int = typer.Argument(..., help="Entry number as shown by `clipvault list`."),
) -> None:
    """Put a history entry back on the system clipboard."""
    store = _open_store()
    history = _open_history(store)
    entry = _pick(history, index)
    ok = history.commit_to_clipboard(entry)
    store.save_immediately(history.entries)
    if not ok:
        _fail("Could not access the system clipboard.")
    console.print(f"[green]✓[/green] Copied [bold]{entry.preview}[/bold].")


# ---------------------------------------------------------------------------
# clipvault delete / edit
# ---------------------------------------------------------------------------


@app.command()
def delete(
    index: int = typer.Argument(..., help="Entry number as shown by `clipvault list`."),
) -> None:
    """Remove one entry from the history."""
    store = _open_store()
    history = _open_history(store)
    entry = _pick(history, index)
    history.delete(entry)
    store.save_immediately(history.entries)
    console.print(f"[green]✓[/green] Deleted [bold]{entry.preview}[/bold].")


@app.command()
def edit(
    index: int = typer.Argument(..., help="Entry number as shown by `clipvault list`."),
    text: str = typer.Argument(..., help="Replacement content."),
) -> None:
    """Change the text of a text or link entry."""
    store = _open_store()
    history = _open_history(store)
    entry = _pick(history, index)
    if entry.kind not in (ClipboardKind.TEXT, ClipboardKind.URL):
        _fail(f"{entry.type_label} entries cannot be edited.")

    updated = history.update_content(entry, text)
    if updated is None:
        _fail("New content is empty.")
    store.save_immediately(history.entries)
    console.print(
        f"[green]✓[/green] Updated #{index} ({updated.type_label}): [bold]{updated.preview}[/bold]."
    )


# ---------------------------------------------------------------------------
# clipvault clear
# ---------------------------------------------------------------------------


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Delete the saved clipboard history."""
    if not yes and not typer.confirm("Delete all clipboard history?"):
        raise typer.Exit()

    _open_store().delete_history_file()
    console.print("[green]✓[/green] History cleared.")


# ---------------------------------------------------------------------------
# clipvault pin ...
# ---------------------------------------------------------------------------

pin_app = typer.Typer(help="Keep entries on named pinboards.", no_args_is_help=True)
app.add_typer(pin_app, name="pin")

# Terminal colour names where they differ from the board colour
_COLOUR_STYLES = {
    PinboardColor.PURPLE: "magenta",
    PinboardColor.ORANGE: "orange1",
    PinboardColor.PINK: "pink1",
}


def _board(pinboards: PinboardStore, name: str) -> Pinboard:
    board = pinboards.find(name)
    if board is None:
        _fail(f"No pinboard named {name!r}.")
    return board


@pin_app.command("create")
def pin_create(
    name: str = typer.Argument(DEFAULT_PINBOARD_NAME, help="Pinboard name."),
    color: PinboardColor = typer.Option(PinboardColor.RED, "--color", "-c", help="Label colour."),
) -> None:
    """Create an empty pinboard."""
    board = _open_pinboards().create(name, color)
    console.print(f"[green]✓[/green] Created pinboard [bold]{board.name}[/bold].")


@pin_app.command("list")
def pin_list() -> None:
    """List pinboards and how many entries each holds."""
    boards = _open_pinboards().pinboards
    if not boards:
        console.print("[dim]No pinboards yet.[/dim]")
        return

    table = Table(title=f"Pinboards ({len(boards)})")
    table.add_column("Name", style="bold")
    table.add_column("Colour")
    table.add_column("Pinned", justify="right", style="cyan")
    for board in boards:
        style = _COLOUR_STYLES.get(board.color, board.color.value)
        table.add_row(board.name, Text(board.color.value, style=style), str(len(board.item_ids)))
    console.print(table)


@pin_app.command("show")
def pin_show(name: str = typer.Argument(..., help="Pinboard name or id.")) -> None:
    """Show the history entries pinned on a board."""
    pinboards = _open_pinboards()
    board = _board(pinboards, name)
    entries = _open_store().load()
    positions = {e.id: i for i, e in enumerate(entries, start=1)}
    pinned = pinboards.items_for(board, entries)
    if not pinned:
        console.print(f"[dim]Nothing pinned on {board.name!r}.[/dim]")
        return
    rows = [(positions[e.id], e, None) for e in pinned]
    console.print(_entries_table(rows, title=board.name))


@pin_app.command("add")
def pin_add(
    name: str = typer.Argument(..., help="Pinboard name or id."),
    index: int = typer.Argument(..., help="Entry number as shown by `clipvault list`."),
) -> None:
    """Pin a history entry on a board."""
    pinboards = _open_pinboards()
    board = _board(pinboards, name)
    entry = _pick(_open_history(_open_store()), index)
    if not pinboards.add_item(entry.id, board):
        console.print(f"[dim]Already pinned on {board.name!r}.[/dim]")
        return
    console.print(f"[green]✓[/green] Pinned [bold]{entry.preview}[/bold] on {board.name}.")


@pin_app.command("remove")
def pin_remove(
    name: str = typer.Argument(..., help="Pinboard name or id."),
    index: int = typer.Argument(..., help="Entry number as shown by `clipvault list`."),
) -> None:
    """Unpin a history entry from a board."""
    pinboards = _open_pinboards()
    board = _board(pinboards, name)
    entry = _pick(_open_history(_open_store()), index)
    if not pinboards.remove_item(entry.id, board):
        _fail(f"Entry #{index} is not pinned on {board.name!r}.")
    console.print(f"[green]✓[/green] Unpinned [bold]{entry.preview}[/bold].")


@pin_app.command("rename")
def pin_rename(
    name: str = typer.Argument(..., help="Pinboard name or id."),
    new_name: str = typer.Argument(..., help="New name."),
    color: Optional[PinboardColor] = typer.Option(None, "--color", "-c", help="New colour."),  # noqa: UP007
) -> None:
    """Rename a pinboard, optionally changing its colour."""
    pinboards = _open_pinboards()
    board = _board(pinboards, name)
    board.name = new_name
    if color is not None:
        board.color = color
    pinboards.update(board)
    console.print(f"[green]✓[/green] Renamed to [bold]{new_name}[/bold].")


@pin_app.command("delete")
def pin_delete(name: str = typer.Argument(..., help="Pinboard name or id.")) -> None:
    """Delete a pinboard.  The pinned entries stay in the history."""
    pinboards = _open_pinboards()
    board = _board(pinboards, name)
    pinboards.delete(board)
    console.print(f"[green]✓[/green] Deleted pinboard [bold]{board.name}[/bold].")


@pin_app.command("clear")
def pin_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Unpin everything from every board."""
    pinboards = _open_pinboards()
    if not yes and not typer.confirm(f"Unpin all {pinboards.total_pinned_count} entries?"):
        raise typer.Exit()
    pinboards.clear_all()
    console.print("[green]✓[/green] All pinboards emptied.")


# ---------------------------------------------------------------------------
# clipvault stack  (interactive — delegates to shell.py)
# ---------------------------------------------------------------------------


@app.command()
def stack() -> None:
    """Start an interactive paste-stack session."""
    from clipvault.shell import start_stack_shell   # lazy import to keep startup fast

    store = _open_store()
    start_stack_shell(store, _open_history(store))


# ---------------------------------------------------------------------------
# Entry-point (for `python -m clipvault.cli`)
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
