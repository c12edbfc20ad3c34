from __future__ import annotations

import logging
from enum import Enum

from booktop.errors import InvalidState, ParseError

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "Author Unknown"


class ReadState(Enum):
    """Reading status of a book."""
    UNREAD = "Unread"
    READING = "Reading"
    STOPPED = "Stopped"
    FINISHED = "Finished"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @classmethod
    def parse(cls, raw: str) -> "ReadState":
        """Accept a status by value, name or symbol, case-insensitively."""
        text = (raw or "").strip().lower()
        for state in cls:
            if text in (state.value.lower(), state.name.lower(), state.symbol.lower()):
                return state
        raise ValueError(f"Unknown status: {raw!r}")

    def __str__(self) -> str:
        return self.value


_SYMBOLS = {
    ReadState.UNREAD: "U",
    ReadState.READING: "R",
    ReadState.STOPPED: "S",
    ReadState.FINISHED: "F",
}

# Allowed source states for each transition
_TRANSITIONS = {
    "start": (ReadState.UNREAD, ReadState.STOPPED),
    "stop": (ReadState.READING,),
    "finish": (ReadState.READING,),
    "reset": (ReadState.READING, ReadState.STOPPED, ReadState.FINISHED),
}

_TARGETS = {
    "start": ReadState.READING,
    "stop": ReadState.STOPPED,
    "finish": ReadState.FINISHED,
    "reset": ReadState.UNREAD,
}


class Book:
    """A single book in the bookcase."""

    def __init__(self, title: str, author: str | None = None, status: ReadState = ReadState.UNREAD,
                 tags: set | list | None = None) -> None:
        self.title = (title or "").strip()
        if not self.title:
            raise ValueError("Title cannot be empty.")
        self.author = (author or "").strip() or DEFAULT_AUTHOR
        self.status = status
        self.tags = {t.strip() for t in (tags or []) if t and t.strip()}

    def __str__(self) -> str:
        return f'{self.title}---"{self.author}" ({self.status})'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return (self.title, self.author, self.status, self.tags) == (
            other.title, other.author, other.status, other.tags)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Book(title={self.title!r}, author={self.author!r}, status={self.status.name})"

    # ------------------------- Transitions ------------------------- #
    def start(self) -> None:
        self._transition("start")

    def stop(self) -> None:
        self._transition("stop")

    def finish(self) -> None:
        self._transition("finish")

    def reset(self) -> None:
        self._transition("reset")

    def _transition(self, action: str) -> None:
        allowed = _TRANSITIONS[action]
        if self.status not in allowed:
            expected = " or ".join(s.value for s in allowed)
            raise InvalidState(
                f"Cannot {action} '{self.title}': status is {self.status}, expected {expected}."
            )
        target = _TARGETS[action]
        logger.debug(f"{self.title}: {self.status} -> {target}")
        self.status = target

    # ------------------------- Tags ------------------------- #
    def tag(self, tag: str) -> bool:
        """Add a tag. Returns False if the book already had it."""
        tag = tag.strip()
        if not tag:
            raise ValueError("Tag cannot be empty.")
        if tag in self.tags:
            return False
        self.tags.add(tag)
        return True

    def untag(self, tag: str) -> bool:
        """Remove a tag. Returns False if the book did not have it."""
        tag = tag.strip()
        if tag not in self.tags:
            return False
        self.tags.discard(tag)
        return True

    # ------------------------- Serialisation ------------------------- #
    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "author": self.author,
            "status": self.status.value,
            "tags": sorted(self.tags),
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        if not isinstance(data, dict):
            raise ParseError(f"Book entry must be an object, got {type(data).__name__}.")
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ParseError("Book entry is missing a title.")

        raw_status = data.get("status", ReadState.UNREAD.value)
        try:
            status = ReadState(raw_status)
        except ValueError as e:
            raise ParseError(f"Unknown status {raw_status!r} for '{title}'.") from e

        tags = data.get("tags") or []
        if isinstance(tags, str):
            tags = [tags]
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ParseError(f"Tags for '{title}' must be a list of strings.")

        author = data.get("author")
        if author is not None and not isinstance(author, str):
            raise ParseError(f"Author for '{title}' must be a string.")

        return Book(title=title, author=author, status=status, tags=tags)
