import json
from typing import List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from booktop.book import Book, ReadState

# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODES = ("plain", "json", "rich")
RULE = "=" * 40

_console = Console()
_output_mode = "plain"

_STATUS_STYLES = {
    ReadState.UNREAD: "white",
    ReadState.READING: "yellow",
    ReadState.STOPPED: "magenta",
    ReadState.FINISHED: "green",
}


def set_output_mode(mode: str) -> None:
    global _output_mode
    mode = (mode or "").lower().strip()
    if mode not in OUTPUT_MODES:
        raise ValueError(f"Unknown output mode: {mode!r}. Use plain, json or rich.")
    _output_mode = mode


def get_output_mode() -> str:
    return _output_mode


def book_payload(book_id: int, book: Book) -> dict:
    return {"id": book_id, **book.to_dict()}


def print_list_result(name: str, items: List[Tuple[int, Book]]) -> None:
    """Print the bookcase in the current output mode.
    - plain: header, rule and '<id>: <book>' lines, or 'No books in bookcase.'
    - json: object with the bookcase name and its books
    - rich: Rich table
    """
    mode = get_output_mode()

    if mode == "json":
        payload = {"name": name, "books": [book_payload(i, b) for i, b in items]}
        print(json.dumps(payload, ensure_ascii=False))
    elif mode == "rich":
        table = Table(title=f"📚 {escape(name)}", show_lines=False, header_style="bold cyan")
        table.add_column("ID", style="magenta", justify="right", no_wrap=True)
        table.add_column("", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Tags", style="dim")
        for book_id, book in items:
            style = _STATUS_STYLES[book.status]
            table.add_row(
                str(book_id),
                f"[{style}]{book.status.symbol}[/]",
                escape(book.title),
                escape(book.author),
                escape(", ".join(sorted(book.tags))),
            )
        _console.print(table)
        if not items:
            _console.print("[yellow]No books in bookcase.[/]")
    else:
        print(f"Bookcase: {name}")
        print(RULE)
        if not items:
            print("No books in bookcase.")
        for book_id, book in items:
            print(f"{book_id}: {book}")


def print_book_result(book_id: int, book: Book, label: Optional[str] = None) -> None:
    """Print a single book, e.g. after a change or for pick.
    - plain: '[<label>: ]<id> | <book>'
    - json: the book with its id (and the label as 'action')
    - rich: one highlighted line
    """
    mode = get_output_mode()

    if mode == "json":
        payload = book_payload(book_id, book)
        if label:
            payload["action"] = label.lower()
        print(json.dumps(payload, ensure_ascii=False))
    elif mode == "rich":
        prefix = f"[bold green]{escape(label)}:[/] " if label else ""
        style = _STATUS_STYLES[book.status]
        _console.print(
            f"{prefix}[magenta]{book_id}[/] | [bold]{escape(book.title)}[/] - "
            f"{escape(book.author)} [{style}]({book.status})[/]"
        )
    else:
        prefix = f"{label}: " if label else ""
        print(f"{prefix}{book_id} | {book}")


def print_message(message: str) -> None:
    """Informational line; suppressed in json mode so output stays parseable."""
    mode = get_output_mode()
    if mode == "json":
        return
    if mode == "rich":
        _console.print(f"[dim]{escape(message)}[/]")
    else:
        print(message)
