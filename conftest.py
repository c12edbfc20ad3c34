import json

import pytest

from booktop import bookcase as store
from booktop.bookcase import Bookcase
from booktop.ui_helpers import set_output_mode


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    # Keep the default bookcase file out of the working tree
    monkeypatch.chdir(tmp_path)
    yield
    set_output_mode("plain")


@pytest.fixture
def bookcase():
    books = Bookcase()
    books.add("Great Expectations", "Charles Dickens")
    books.add("Journey to the Center of the Earth", "Jules Verne")
    books.add("Bleak House", "Charles Dickens", tags=["classic"])
    return books


@pytest.fixture
def bookcase_file(tmp_path, bookcase):
    path = tmp_path / "books.json"
    store.save(path, bookcase)
    return path


@pytest.fixture
def read_json():
    def _read(path):
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    return _read
