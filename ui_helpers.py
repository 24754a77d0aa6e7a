import os
import json
from typing import List, Any
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

# Environment variable controlling CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "BOOKS_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _field(book: Any, name: str) -> str:
    value = getattr(book, name, None)
    return "" if value is None else str(value)


def print_list_result(books: List[Any]) -> None:
    """Print the book list in the current output mode.
    - plain: 'ID - Title by Author' lines, or 'No books in store.'
    - json: JSON array of book objects
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("[]" if mode == "json" else "No books in store.")
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        for b in books:
            table.add_row(_field(b, "id"), _field(b, "title"), _field(b, "author"))
        _console.print(table)
    else:
        for b in books:
            print(f"{_field(b, 'id')} - {_field(b, 'title')} by {_field(b, 'author')}")


def print_book_result(book: Any, heading: str = "Book Found") -> None:
    """Print a single book in the current output mode."""
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(book.to_dict(), ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]ID:[/] {_field(book, 'id')}\n"
            f"[bold]Title:[/] {_field(book, 'title')}\n"
            f"[bold]Author:[/] {_field(book, 'author')}"
        )
        _console.print(Panel.fit(content, title=heading, border_style="blue"))
    else:
        print(heading)
        print(f"ID: {_field(book, 'id')}")
        print(f"Title: {_field(book, 'title')}")
        print(f"Author: {_field(book, 'author')}")
