from booktop.bookcase import Bookcase

EXAMPLE_BOOKS = [
    ("Great Expectations", "Charles Dickens"),
    ("Journey to the Center of the Earth", "Jules Verne"),
]


def example_bookcase(name: str = "Bookcase") -> Bookcase:
    """A small non-empty bookcase, handy for trying out commands."""
    bookcase = Bookcase(name=name)
    for title, author in EXAMPLE_BOOKS:
        bookcase.add(title, author)
    return bookcase
