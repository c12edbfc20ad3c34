import pytest

from booktop.book import Book, ReadState, DEFAULT_AUTHOR
from booktop.errors import InvalidState, ParseError


def test_new_book_is_unread():
    book = Book("  Ulysses ", "James Joyce")
    assert book.title == "Ulysses"
    assert book.status is ReadState.UNREAD
    assert book.tags == set()


def test_missing_author_gets_placeholder():
    assert Book("Beowulf").author == DEFAULT_AUTHOR
    assert Book("Beowulf", "   ").author == DEFAULT_AUTHOR


def test_empty_title_rejected():
    with pytest.raises(ValueError):
        Book("   ", "Nobody")


def test_str_format():
    book = Book("Great Expectations", "Charles Dickens")
    assert str(book) == 'Great Expectations---"Charles Dickens" (Unread)'


def test_start_then_finish():
    book = Book("Sapiens", "Yuval Noah Harari")
    book.start()
    assert book.status is ReadState.READING
    book.finish()
    assert book.status is ReadState.FINISHED


def test_finish_without_start_fails():
    book = Book("Sapiens", "Yuval Noah Harari")
    with pytest.raises(InvalidState, match="Cannot finish 'Sapiens'"):
        book.finish()
    assert book.status is ReadState.UNREAD


def test_stop_and_resume():
    book = Book("Dune", "Frank Herbert")
    book.start()
    book.stop()
    assert book.status is ReadState.STOPPED
    book.start()
    assert book.status is ReadState.READING


@pytest.mark.parametrize("action", ["stop", "finish", "reset"])
def test_invalid_transitions_from_unread(action):
    book = Book("Dune", "Frank Herbert")
    with pytest.raises(InvalidState):
        getattr(book, action)()
    assert book.status is ReadState.UNREAD


def test_start_twice_fails():
    book = Book("Dune", "Frank Herbert")
    book.start()
    with pytest.raises(InvalidState):
        book.start()
    assert book.status is ReadState.READING


def test_start_finished_book_fails_until_reset():
    book = Book("Dune", "Frank Herbert", status=ReadState.FINISHED)
    with pytest.raises(InvalidState):
        book.start()
    book.reset()
    assert book.status is ReadState.UNREAD
    book.start()
    assert book.status is ReadState.READING


def test_tag_and_untag():
    book = Book("Emma", "Jane Austen")
    assert book.tag("classic") is True
    assert book.tag("classic") is False
    assert book.tags == {"classic"}
    assert book.untag("classic") is True
    assert book.untag("classic") is False
    assert book.tags == set()


@pytest.mark.parametrize("raw,expected", [
    ("Unread", ReadState.UNREAD),
    ("reading", ReadState.READING),
    ("S", ReadState.STOPPED),
    ("finished", ReadState.FINISHED),
    ("f", ReadState.FINISHED),
])
def test_parse_status(raw, expected):
    assert ReadState.parse(raw) is expected


def test_parse_unknown_status():
    with pytest.raises(ValueError, match="Unknown status"):
        ReadState.parse("borrowed")


def test_from_dict_defaults():
    book = Book.from_dict({"title": "Emma"})
    assert book == Book("Emma")


def test_to_dict_sorts_tags():
    book = Book("Emma", "Jane Austen", tags=["romance", "classic"])
    assert book.to_dict() == {
        "title": "Emma",
        "author": "Jane Austen",
        "status": "Unread",
        "tags": ["classic", "romance"],
    }


@pytest.mark.parametrize("data", [
    {"author": "No Title"},
    {"title": ""},
    {"title": "Emma", "status": "Borrowed"},
    {"title": "Emma", "tags": [1, 2]},
    {"title": "Emma", "author": 42},
    ["Emma"],
])
def test_from_dict_rejects_bad_entries(data):
    with pytest.raises(ParseError):
        Book.from_dict(data)
