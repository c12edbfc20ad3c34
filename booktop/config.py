from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@dataclass
class Settings:
    # Bookcase file settings
    default_file: str = os.getenv("BOOKTOP_FILE", "bookcase.booktop.json")
    default_name: str = os.getenv("BOOKTOP_NAME", "Bookcase")

    # Output settings: plain | json | rich
    output_mode: str = os.getenv("BOOKTOP_OUTPUT", "plain")

    # Logging settings
    log_level: str = os.getenv("BOOKTOP_LOG_LEVEL", "WARNING")


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the console script."""
    name = (level or settings.log_level).upper()
    logging.basicConfig(level=getattr(logging, name, logging.WARNING), format=LOG_FORMAT)
