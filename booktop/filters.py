from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Tuple

from booktop.book import Book, ReadState


@dataclass
class BookFilter:
    """Selects books by status, author and tag.

    Empty criteria match everything. Authors compare case-insensitively and a
    book matches when its author equals any of the given ones.
    """
    statuses: set = field(default_factory=set)
    authors: list = field(default_factory=list)
    tag: str | None = None

    @classmethod
    def unread(cls) -> "BookFilter":
        return cls(statuses={ReadState.UNREAD})

    def match(self, book: Book) -> bool:
        if self.statuses and book.status not in self.statuses:
            return False
        if self.authors and not any(_same_text(a, book.author) for a in self.authors):
            return False
        if self.tag and self.tag not in book.tags:
            return False
        return True

    def apply(self, items: Iterable[Tuple[int, Book]]) -> Iterator[Tuple[int, Book]]:
        return ((book_id, book) for book_id, book in items if self.match(book))


def _same_text(a: str, b: str) -> bool:
    return a.strip().casefold() == b.strip().casefold()
