import subprocess
import sys
import webbrowser
from typing import Optional

import typer
from rich.console import Console

from config import settings
from library import BookError, Library
from ui_helpers import set_output_mode, print_list_result, print_book_result

console = Console()

app = typer.Typer(help="Books store CLI")


def get_library() -> Library:
    """Open the store configured in settings."""
    return Library(settings.data_file, id_length=settings.book_id_length)


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (e.g. output mode)."""
    if output:
        set_output_mode(output)


@app.command("list")
def cli_list():
    """List every book in the store."""
    print_list_result(get_library().list_books())


@app.command("add")
def cli_add(
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Title of the book"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="The author of the book"),
):
    """Create a book with a generated id."""
    book = get_library().add_book(title=title, author=author)
    print(f"Successfully added: {book}")


@app.command("find")
def cli_find(book_id: str):
    """Find a book by id and show its details."""
    book = get_library().find_book(book_id)
    if book:
        print_book_result(book)
    else:
        print(f"Book with ID {book_id} not found.")


@app.command("update")
def cli_update(
    book_id: str,
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    author: Optional[str] = typer.Option(None, "--author", "-a"),
):
    """Update the title and/or author of a book."""
    fields = {k: v for k, v in (("title", title), ("author", author)) if v is not None}
    if not fields:
        print("Nothing to update. Provide --title and/or --author.")
        raise typer.Exit(code=1)
    try:
        book = get_library().update_book(book_id, fields)
    except BookError as e:
        print(f"Error: {e.message}")
        raise typer.Exit(code=1)
    if book:
        print_book_result(book, heading="Book Updated")
    else:
        print(f"Book with ID {book_id} not found.")


@app.command("remove")
def cli_remove(book_id: str):
    """Remove a book by id."""
    if get_library().remove_book(book_id):
        print(f"Book with ID {book_id} has been removed.")
    else:
        print(f"Book with ID {book_id} not found.")


@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: API_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", help="Port (default: PORT or 8080)"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
    open_docs: bool = typer.Option(False, "--open-docs", help="Open the API docs in a browser"),
):
    """Start the HTTP API with uvicorn."""
    host = host or settings.api_host
    port = port or int(settings.api_port)
    url = f"http://{host}:{port}{settings.docs_url}"
    print(f"Starting API on http://{host}:{port}/")
    if open_docs:
        webbrowser.open(url)
    args = [
        sys.executable,
        "-m", "uvicorn",
        "api:app",
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        args.append("--reload")
    try:
        subprocess.run(args, check=True)
    except FileNotFoundError:
        console.print("[bold red]Error:[/] `uvicorn` could not be started. Make sure it is installed.")
        raise typer.Exit(code=1)
    except subprocess.CalledProcessError as e:
        raise typer.Exit(code=e.returncode)


if __name__ == "__main__":
    app()
