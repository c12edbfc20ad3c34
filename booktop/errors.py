"""Errors raised by the bookcase store and the CLI.

Each error carries the exit status the CLI should use when it reaches the
user.
"""


class BooktopError(Exception):
    """Base error for everything booktop reports to the user."""

    exit_code = 1


class UsageError(BooktopError):
    """Bad command line input."""

    exit_code = 2


class BookcaseNotFound(BooktopError, FileNotFoundError):
    """The bookcase file does not exist."""


class ParseError(BooktopError, ValueError):
    """The bookcase file could not be decoded."""


class WriteError(BooktopError, OSError):
    """The bookcase file could not be written."""


class NotFound(BooktopError, LookupError):
    """No book matches the given title or id."""


class AlreadyExists(BooktopError, ValueError):
    """A book with the same title is already in the bookcase."""


class InvalidState(BooktopError, ValueError):
    """The requested status transition is not allowed from the current status."""


class EmptyList(BooktopError, LookupError):
    """No book qualifies for the request."""
