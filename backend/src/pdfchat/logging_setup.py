"""
Logging configuration for the pdfchat backend.

Modules only ever call ``logging.getLogger(__name__)``; handlers and levels
are set up once here, from ``settings.log_level``.
"""

from __future__ import annotations

import logging
import sys

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | int = logging.INFO, fmt: str = DEFAULT_FORMAT, stream=sys.stdout) -> None:
    """
    Attach a single stream handler to the root logger and set its level.
    Calling it again only updates the level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)

    root.setLevel(level)
