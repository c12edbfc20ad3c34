"""booktop - a small bookcase tracker for the command line.

This package contains:
- Book records and reading states (book.py)
- The file-backed bookcase store (bookcase.py)
- Book filters for list and pick (filters.py)
- Output helpers (ui_helpers.py)
- CLI interface (main.py)
"""

__version__ = "0.1.0"
