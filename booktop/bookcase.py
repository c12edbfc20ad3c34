from __future__ import annotations

import json
import logging
import os
import random
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from booktop.book import Book
from booktop.errors import (
    AlreadyExists,
    BookcaseNotFound,
    EmptyList,
    NotFound,
    ParseError,
    UsageError,
    WriteError,
)
from booktop.filters import BookFilter

logger = logging.getLogger(__name__)

FORMAT_VERSION = "0.1.0"
DEFAULT_NAME = "Bookcase"
SORT_KEYS = ("id", "title", "author")


class Bookcase:
    """An ordered collection of books keyed by a stable integer id."""

    def __init__(self, name: str = DEFAULT_NAME, books: Optional[Dict[int, Book]] = None,
                 version: str = FORMAT_VERSION) -> None:
        self.name = name
        self.version = version
        self.books: Dict[int, Book] = dict(sorted((books or {}).items()))

    def __len__(self) -> int:
        return len(self.books)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bookcase):
            return NotImplemented
        return (self.name, self.version, self.books) == (other.name, other.version, other.books)

    # ------------------------- Core operations ------------------------- #
    def add(self, title: str, author: Optional[str] = None, tags: Iterable[str] = ()) -> Tuple[int, Book]:
        """Add a new Unread book. Titles are unique within a bookcase."""
        try:
            book = Book(title=title, author=author, tags=list(tags))
        except ValueError as e:
            raise UsageError(str(e)) from e
        if self._find_by_title(book.title) is not None:
            raise AlreadyExists(f"A book titled '{book.title}' already exists.")
        book_id = max(self.books, default=0) + 1
        self.books[book_id] = book
        logger.debug(f"Added {book_id}: {book}")
        return book_id, book

    def remove(self, ref: str | int) -> Tuple[int, Book]:
        book_id, book = self.find(ref)
        del self.books[book_id]
        logger.debug(f"Removed {book_id}: {book}")
        return book_id, book

    def get(self, book_id: int) -> Optional[Book]:
        return self.books.get(book_id)

    def find(self, ref: str | int) -> Tuple[int, Book]:
        """Find a book by exact title, falling back to its id."""
        if isinstance(ref, str):
            found = self._find_by_title(ref.strip())
            if found is not None:
                return found
            if ref.strip().isdecimal():
                ref = int(ref.strip())
        if isinstance(ref, int) and ref in self.books:
            return ref, self.books[ref]
        raise NotFound(f"No book matching '{ref}'.")

    def items(self) -> List[Tuple[int, Book]]:
        return list(self.books.items())

    def sorted_items(self, key: str = "id") -> List[Tuple[int, Book]]:
        if key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {key}. Use one of {', '.join(SORT_KEYS)}.")
        if key == "id":
            return self.items()
        return sorted(self.items(), key=lambda item: (getattr(item[1], key).casefold(), item[0]))

    def pick(self, book_filter: Optional[BookFilter] = None,
             rng: Optional[random.Random] = None) -> Tuple[int, Book]:
        """Pick a book uniformly at random among those the filter accepts.

        With no filter only Unread books are eligible.
        """
        book_filter = book_filter if book_filter is not None else BookFilter.unread()
        eligible = list(book_filter.apply(self.items()))
        if not eligible:
            raise EmptyList("No books to pick from.")
        return (rng or random).choice(eligible)

    def renumber(self) -> None:
        """Reassign ids as 1..n, keeping the current order."""
        self.books = {i: book for i, book in enumerate(self.books.values(), 1)}

    # ------------------------- Persistence ------------------------- #
    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "books": {str(book_id): book.to_dict() for book_id, book in self.books.items()},
        }

    @staticmethod
    def from_dict(data: dict) -> "Bookcase":
        if not isinstance(data, dict):
            raise ParseError("Bookcase file must contain a JSON object.")

        version = data["version"] if "version" in data else FORMAT_VERSION
        if not isinstance(version, str) or not _is_supported_version(version):
            raise ParseError(f"Unsupported bookcase version: {version!r}.")

        name = data["name"] if "name" in data else DEFAULT_NAME
        if not isinstance(name, str):
            raise ParseError("Bookcase name must be a string.")

        raw_books = data.get("books") or {}
        if not isinstance(raw_books, dict):
            raise ParseError("'books' must be an object keyed by id.")

        books: Dict[int, Book] = {}
        titles = set()
        for key, entry in raw_books.items():
            try:
                book_id = int(key)
            except (TypeError, ValueError) as e:
                raise ParseError(f"Invalid book id: {key!r}.") from e
            if book_id < 1:
                raise ParseError(f"Invalid book id: {key!r}.")
            try:
                book = Book.from_dict(entry)
            except ValueError as e:
                if isinstance(e, ParseError):
                    raise
                raise ParseError(str(e)) from e
            if book.title in titles:
                raise ParseError(f"Duplicate title in bookcase: '{book.title}'.")
            titles.add(book.title)
            books[book_id] = book

        return Bookcase(name=name, books=books, version=version)

    # ------------------------- Utilities ------------------------- #
    def _find_by_title(self, title: str) -> Optional[Tuple[int, Book]]:
        for book_id, book in self.books.items():
            if book.title == title:
                return book_id, book
        return None


def load(path: str | os.PathLike) -> Bookcase:
    """Read a whole bookcase from a JSON file."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise BookcaseNotFound(f"Bookcase file not found: {path}") from e
    except IsADirectoryError as e:
        raise BookcaseNotFound(f"Bookcase path is a directory: {path}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Could not parse {path}: {e}") from e
    except OSError as e:
        raise ParseError(f"Could not read {path}: {e}") from e

    try:
        bookcase = Bookcase.from_dict(data)
    except ParseError as e:
        raise ParseError(f"Could not parse {path}: {e}") from e
    logger.info(f"Loaded {len(bookcase)} books from {path}")
    return bookcase


def save(path: str | os.PathLike, bookcase: Bookcase) -> None:
    """Write the whole bookcase, replacing the file atomically."""
    path = Path(path)
    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(bookcase.to_dict(), f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise WriteError(f"Could not write {path}: {e}") from e
    finally:
        if tmp_name and os.path.exists(tmp_name):
            os.remove(tmp_name)
    logger.info(f"Saved {len(bookcase)} books to {path}")


def _is_supported_version(version: str) -> bool:
    try:
        major = int(version.split(".")[0])
    except ValueError:
        return False
    return major <= int(FORMAT_VERSION.split(".")[0])
