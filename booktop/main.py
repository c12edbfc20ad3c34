import logging
from dataclasses import dataclass
from functools import wraps
from pathlib import Path
from typing import List, Optional

import typer

from booktop import bookcase as store
from booktop.book import ReadState
from booktop.bookcase import Bookcase, SORT_KEYS
from booktop.config import configure_logging, settings
from booktop.errors import AlreadyExists, BooktopError, UsageError
from booktop.examples import example_bookcase
from booktop.filters import BookFilter
from booktop.ui_helpers import (
    print_book_result,
    print_list_result,
    print_message,
    set_output_mode,
)

APP_NAME = "booktop"

logger = logging.getLogger(__name__)


@dataclass
class BookcaseSession:
    """Per-invocation state: where the bookcase comes from and where it goes."""
    file: Optional[Path] = None
    no_file: bool = False
    dry_run: bool = False
    list_after: bool = False
    write_enabled: bool = True
    target: Optional[Path] = None
    bookcase: Optional[Bookcase] = None

    def open(self) -> Bookcase:
        """Load the bookcase once. Later calls return the same instance."""
        if self.bookcase is not None:
            return self.bookcase

        if self.no_file:
            # Only an explicit --file is ever written after --no-file
            self.target = self.file
            self.bookcase = Bookcase(name=settings.default_name)
        elif self.file is not None:
            self.target = self.file
            self.bookcase = store.load(self.file)
        else:
            default = Path(settings.default_file)
            if default.is_file():
                self.target = default
                self.bookcase = store.load(default)
            else:
                logger.warning(f"No bookcase file at {default}; changes will not be saved.")
                self.bookcase = Bookcase(name=settings.default_name)
        return self.bookcase

    def commit(self, changed: bool = True) -> None:
        """Echo the list if asked, then write the bookcase back if it changed."""
        bookcase = self.open()
        if self.list_after:
            print_list_result(bookcase.name, bookcase.items())

        if not changed or not self.write_enabled:
            return
        if self.dry_run:
            logger.warning("Dry run: bookcase not written.")
            print_message(f"Dry run: {self.target or 'bookcase'} not written.")
            return
        if self.target is None:
            logger.warning("No bookcase file to write to; changes discarded.")
            return
        store.save(self.target, bookcase)


# Turn store errors into a message on stderr and a non-zero exit status
def handle_errors(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BooktopError as e:
            logger.debug(f"{func.__name__} failed", exc_info=True)
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=e.exit_code)
    return wrapper


def _session(ctx: typer.Context) -> BookcaseSession:
    return ctx.ensure_object(BookcaseSession)


def _build_filter(statuses: Optional[List[str]], authors: Optional[List[str]], tag: Optional[str]) -> BookFilter:
    try:
        parsed = {ReadState.parse(s) for s in statuses or []}
    except ValueError as e:
        raise UsageError(str(e)) from e
    return BookFilter(statuses=parsed, authors=list(authors or []), tag=tag)


# --- Typer CLI application ---
app = typer.Typer(
    help="A basic tracker for books.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
util_app = typer.Typer(help="Use a utility function.", no_args_is_help=True)
app.add_typer(util_app, name="util")


@app.callback()
def _global_options(
    ctx: typer.Context,
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="File containing an existing bookcase"),
    no_file: bool = typer.Option(False, "--no-file", help="Do not attempt to open a (default) file"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Run commands without updating the file"),
    list_after: bool = typer.Option(False, "--list", "-l", help="Follow the command with list"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output format: plain | json | rich"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """A basic tracker for books."""
    try:
        set_output_mode(output or settings.output_mode)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="'--output'")
    logging.getLogger("booktop").setLevel(logging.DEBUG if verbose else logging.NOTSET)
    ctx.obj = BookcaseSession(file=file, no_file=no_file, dry_run=dry_run, list_after=list_after)


@app.command("add")
@handle_errors
def cli_add(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Title of the book"),
    author: Optional[str] = typer.Argument(None, help="Author of the book"),
    tags: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag the new book (repeatable)"),
):
    """Add a book."""
    session = _session(ctx)
    book_id, book = session.open().add(title, author, tags or [])
    print_book_result(book_id, book, label="Added")
    session.commit()


@app.command("remove")
@handle_errors
def cli_remove(ctx: typer.Context, book: str = typer.Argument(..., help="Title or id of the book")):
    """Remove a book."""
    session = _session(ctx)
    book_id, removed = session.open().remove(book)
    print_book_result(book_id, removed, label="Removed")
    session.commit()


@app.command("list")
@handle_errors
def cli_list(
    ctx: typer.Context,
    statuses: Optional[List[str]] = typer.Option(None, "--status", "-s", help="Only books with this status (repeatable)"),
    authors: Optional[List[str]] = typer.Option(None, "--author", "-a", help="Only books by this author (repeatable)"),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only books with this tag"),
    sort: str = typer.Option("id", "--sort", help="Sort by id, title or author"),
):
    """List all books."""
    if sort not in SORT_KEYS:
        raise UsageError(f"Unknown sort key: {sort}. Use one of {', '.join(SORT_KEYS)}.")
    session = _session(ctx)
    bookcase = session.open()
    book_filter = _build_filter(statuses, authors, tag)
    print_list_result(bookcase.name, list(book_filter.apply(bookcase.sorted_items(sort))))
    session.commit(changed=False)


@app.command("pick")
@handle_errors
def cli_pick(
    ctx: typer.Context,
    statuses: Optional[List[str]] = typer.Option(None, "--status", "-s", help="Eligible status (repeatable, default: Unread)"),
    authors: Optional[List[str]] = typer.Option(None, "--author", "-a", help="Eligible author (repeatable)"),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only books with this tag"),
):
    """Pick a book at random."""
    session = _session(ctx)
    if not statuses:
        statuses = [ReadState.UNREAD.value]
    book_filter = _build_filter(statuses, authors, tag)
    book_id, book = session.open().pick(book_filter)
    print_book_result(book_id, book)
    session.commit(changed=False)


def _transition(ctx: typer.Context, ref: str, action: str, label: str) -> None:
    session = _session(ctx)
    book_id, book = session.open().find(ref)
    getattr(book, action)()
    print_book_result(book_id, book, label=label)
    session.commit()


@app.command("start")
@handle_errors
def cli_start(ctx: typer.Context, book: str = typer.Argument(..., help="Title or id of the book")):
    """Start reading a book."""
    _transition(ctx, book, "start", "Started")


@app.command("stop")
@handle_errors
def cli_stop(ctx: typer.Context, book: str = typer.Argument(..., help="Title or id of the book")):
    """Pause reading a book."""
    _transition(ctx, book, "stop", "Stopped")


@app.command("finish")
@handle_errors
def cli_finish(ctx: typer.Context, book: str = typer.Argument(..., help="Title or id of the book")):
    """Finish reading a book."""
    _transition(ctx, book, "finish", "Finished")


@app.command("reset")
@handle_errors
def cli_reset(ctx: typer.Context, book: str = typer.Argument(..., help="Title or id of the book")):
    """Return a book to unread."""
    _transition(ctx, book, "reset", "Reset")


@app.command("tag")
@handle_errors
def cli_tag(
    ctx: typer.Context,
    book: str = typer.Argument(..., help="Title or id of the book"),
    tag: str = typer.Argument(..., help="Tag to add"),
):
    """Tag a book."""
    session = _session(ctx)
    book_id, found = session.open().find(book)
    try:
        changed = found.tag(tag)
    except ValueError as e:
        raise UsageError(str(e)) from e
    if not changed:
        print_message(f"'{found.title}' is already tagged '{tag.strip()}'.")
    print_book_result(book_id, found, label="Tagged")
    session.commit(changed=changed)


@app.command("untag")
@handle_errors
def cli_untag(
    ctx: typer.Context,
    book: str = typer.Argument(..., help="Title or id of the book"),
    tag: str = typer.Argument(..., help="Tag to remove"),
):
    """Remove a tag from a book."""
    session = _session(ctx)
    book_id, found = session.open().find(book)
    changed = found.untag(tag)
    if not changed:
        print_message(f"'{found.title}' is not tagged '{tag.strip()}'.")
    print_book_result(book_id, found, label="Untagged")
    session.commit(changed=changed)


@app.command("init")
@handle_errors
def cli_init(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Where to create the bookcase file"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Name of the bookcase"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
):
    """Initialise a bookcase file."""
    session = _session(ctx)
    if path.exists() and not force:
        raise AlreadyExists(f"{path} already exists. Use --force to overwrite it.")
    session.bookcase = Bookcase(name=name or settings.default_name)
    session.target = path
    session.commit()
    if not session.dry_run:
        print_message(f"Initialised empty bookcase at {path}")


@app.command("help")
@handle_errors
def cli_help(ctx: typer.Context, command: Optional[str] = typer.Argument(None, help="Command to describe")):
    """Show help for booktop or one of its commands."""
    group_ctx = ctx.parent
    if command is None:
        help_text = group_ctx.get_help()
    else:
        cmd = group_ctx.command.get_command(group_ctx, command)
        if cmd is None:
            raise UsageError(f"No such command: {command}")
        with typer.Context(cmd, info_name=command, parent=group_ctx) as sub_ctx:
            help_text = cmd.get_help(sub_ctx)
    # Rich-formatted help is printed directly and returns nothing
    if help_text:
        typer.echo(help_text)


@util_app.callback()
def _util_options(
    ctx: typer.Context,
    write: bool = typer.Option(False, "--write", "-w", help="Write the result back to the file"),
):
    """Use a utility function."""
    _session(ctx).write_enabled = write


@util_app.command("example-bookcase")
@handle_errors
def cli_util_example(ctx: typer.Context):
    """Set books to be a non-empty example bookcase."""
    session = _session(ctx)
    current = session.open()
    session.bookcase = example_bookcase(name=current.name)
    if not session.list_after:
        print_list_result(session.bookcase.name, session.bookcase.items())
    session.commit()


@util_app.command("renumber")
@handle_errors
def cli_util_renumber(ctx: typer.Context):
    """Re-index the bookcase, reassigning ids as 1..n."""
    session = _session(ctx)
    bookcase = session.open()
    bookcase.renumber()
    if not session.list_after:
        print_list_result(bookcase.name, bookcase.items())
    session.commit()


def main() -> None:
    configure_logging()
    app(prog_name=APP_NAME)


if __name__ == "__main__":
    main()
