"""Process-wide logging setup shared by the server and the headless CLI."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s [%(levelname)-5s] %(name)-25s | %(message)s"
DATE_FORMAT = "%H:%M:%S"

# Request access logs drown out tick progress at INFO
_ACCESS_LOGGERS = ("uvicorn.access",)


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Route every logger through one handler on *stream* (stdout by default).

    Unknown level names fall back to INFO. Calling it again replaces the
    handler instead of stacking a second one.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)

    access_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in _ACCESS_LOGGERS:
        logging.getLogger(name).setLevel(access_level)
