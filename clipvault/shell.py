"""
clipvault.shell — Interactive paste-stack REPL powered by prompt_toolkit + rich.

Launched by ``clipvault stack``.  A paste-stack session runs for as long as
the shell is open: every new copy recorded here is staged, and ``next``
advances to the following staged item after you paste.

History changes are saved through the store's debounced ``schedule_save``;
on exit the history is written immediately.
"""

from __future__ import annotations

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from clipvault import __version__
from clipvault.history.clipboard import read_clipboard, write_entry
from clipvault.history.source import ClipboardHistory
from clipvault.models.entry import HistoryEntry
from clipvault.paste_stack import PasteStackSession
from clipvault.search import search
from clipvault.store.history_store import HistoryStore

console = Console()

_COMMANDS = [
    "add", "grab", "ls", "history", "next", "pop", "rm", "clear",
    "del", "undo", "edit", "find", "help", "exit", "quit",
]

_HELP_TEXT = """\
**Paste stack commands**

| Command | Description |
|---------|-------------|
| `add <text>` | Copy text (it is staged automatically) |
| `grab` | Record what is on the system clipboard now |
| `ls` | Show the staged items |
| `history` | Show recent history |
| `next` | After pasting: drop the head, put the next item on the clipboard |
| `pop` | Remove and show the head without touching the clipboard |
| `rm <n>` | Unstage item *n* |
| `clear` | Unstage everything |
| `del <n>` | Delete history entry *n* (as numbered by `history`) |
| `undo` | Bring back the last deleted entry |
| `edit <n> <text>` | Replace the text of history entry *n* |
| `find <query>` | Search history |
| `help` | Show this help |
| `exit` / `quit` | Leave the shell |
"""


def _print_stack(session: PasteStackSession) -> None:
    items = session.items
    if not items:
        console.print("[dim]Stack is empty.[/dim]")
        return
    for i, entry in enumerate(items, start=1):
        marker = "[bold green]▸[/bold green]" if i == 1 else " "
        console.print(f"{marker} [cyan]{i:>2}[/cyan]  [magenta]{entry.type_label:<5}[/magenta] {entry.preview}")


def _print_entries(entries: list[HistoryEntry], limit: int = 10) -> None:
    if not entries:
        console.print("[dim]Nothing found.[/dim]")
        return
    for i, entry in enumerate(entries[:limit], start=1):
        console.print(f"  [cyan]{i:>2}[/cyan]  [magenta]{entry.type_label:<5}[/magenta] {entry.preview}")


def _history_entry(history: ClipboardHistory, number: str) -> HistoryEntry | None:
    entries = history.entries
    if not number.isdigit() or not 1 <= int(number) <= len(entries):
        console.print(f"[yellow]No history entry {number!r} (1-{len(entries)}).[/yellow]")
        return None
    return entries[int(number) - 1]


def _record(history: ClipboardHistory, entry: HistoryEntry) -> None:
    """Simulate a copy: put the entry on the clipboard and record it."""
    write_entry(entry)
    history.add(entry)


def handle_command(line: str, session: PasteStackSession, history: ClipboardHistory) -> bool:
    """Run one shell command.  Returns False when the shell should exit."""
    command, _, arg = line.partition(" ")
    command = command.lower()
    arg = arg.strip()

    if command in ("exit", "quit"):
        return False

    if command == "help":
        console.print(Markdown(_HELP_TEXT))
    elif command == "add":
        if not arg:
            console.print("[yellow]Usage: add <text>[/yellow]")
        else:
            _record(history, HistoryEntry(content=arg))
            _print_stack(session)
    elif command == "grab":
        text = read_clipboard()
        if text:
            history.add(HistoryEntry(content=text))
            _print_stack(session)
        else:
            console.print("[yellow]Clipboard is empty.[/yellow]")
    elif command == "ls":
        _print_stack(session)
    elif command == "history":
        _print_entries(list(history.entries))
    elif command == "next":
        next_item = session.advance_after_paste()
        if next_item is not None:
            console.print(f"[green]✓[/green] Ready to paste: [bold]{next_item.preview}[/bold]")
        else:
            console.print("[dim]Stack is empty.[/dim]")
    elif command == "pop":
        item = session.pop_next_item()
        console.print(item.preview if item is not None else "[dim]Stack is empty.[/dim]")
    elif command == "rm":
        items = session.items
        if not arg.isdigit() or not 1 <= int(arg) <= len(items):
            console.print(f"[yellow]Usage: rm <1-{max(len(items), 1)}>[/yellow]")
        else:
            session.remove_item(items[int(arg) - 1])
            _print_stack(session)
    elif command == "clear":
        session.clear_stack()
        console.print("[dim]Stack cleared.[/dim]")
    elif command == "del":
        entry = _history_entry(history, arg)
        if entry is not None:
            history.delete(entry)
            console.print(f"[green]✓[/green] Deleted [bold]{entry.preview}[/bold]. Type undo to restore.")
    elif command == "undo":
        restored = history.undo_delete()
        if restored is not None:
            console.print(f"[green]✓[/green] Restored [bold]{restored.preview}[/bold].")
        else:
            console.print("[dim]Nothing to undo.[/dim]")
    elif command == "edit":
        number, _, text = arg.partition(" ")
        if not text.strip():
            console.print("[yellow]Usage: edit <n> <text>[/yellow]")
        elif (entry := _history_entry(history, number)) is not None:
            updated = history.update_content(entry, text)
            if updated is None:
                console.print(f"[yellow]{entry.type_label} entries cannot be edited.[/yellow]")
            else:
                console.print(f"[green]✓[/green] Updated: [bold]{updated.preview}[/bold]")
    elif command == "find":
        _print_entries(search(arg, list(history.entries)))
    else:
        console.print(f"[yellow]Unknown command {command!r}. Type help.[/yellow]")
    return True


def start_stack_shell(store: HistoryStore, history: ClipboardHistory) -> None:
    """Run the paste-stack REPL until the user exits."""
    console.print(
        Panel(
            "Copy things with [bold]add[/bold] or [bold]grab[/bold]; they stack up in order.\n"
            "[dim]Type [bold]help[/bold] for commands, [bold]exit[/bold] to quit.[/dim]",
            title=f"[bold bright_blue]clipvault v{__version__} — paste stack[/bold bright_blue]",
            border_style="bright_blue",
        )
    )

    saver = history.subscribe(store.schedule_save)
    session = PasteStackSession(history)
    session.start_session()

    prompt: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        completer=WordCompleter(_COMMANDS, ignore_case=True),
    )

    try:
        while True:
            try:
                line = prompt.prompt(HTML("<b><ansicyan>stack ▸ </ansicyan></b>")).strip()
            except (EOFError, KeyboardInterrupt):
                console.print()
                break
            if not line:
                continue
            if not handle_command(line, session, history):
                break
    finally:
        session.end_session()
        saver.cancel()
        store.close()
        store.save_immediately(history.entries)
        console.print("[dim]Goodbye.[/dim]")
