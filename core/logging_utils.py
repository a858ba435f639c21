"""Logging setup shared by the library, the replay tool and tests.

Library modules only call get_logger(__name__). The process entry point decides
how records are rendered: a plain pipe-separated stream (default) or a rich
console handler for interactive tools.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
HANDLER_NAME = "sniper-handler"


def resolve_level(level: str | int | None = None) -> int:
    """Level from argument, else LOG_LEVEL env, else INFO."""
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return int(level)


def _stream_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    formatter.converter = time.gmtime  # UTC
    handler.setFormatter(formatter)
    return handler


def _rich_handler(console: Optional[Console]) -> logging.Handler:
    return RichHandler(console=console, rich_tracebacks=True, show_path=False, log_time_format="%H:%M:%S")


def _find_handler(root: logging.Logger) -> Optional[logging.Handler]:
    for handler in root.handlers:
        if getattr(handler, "name", "") == HANDLER_NAME:
            return handler
    return None


def setup_logging(
    level: str | int | None = None,
    use_rich: bool = False,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Attach the shared root handler once and apply the level.

    Switching between plain and rich output replaces the existing handler.
    """
    root = logging.getLogger()
    resolved = resolve_level(level)

    handler = _find_handler(root)
    wants_rich = use_rich or console is not None
    if handler is not None and isinstance(handler, RichHandler) != wants_rich:
        root.removeHandler(handler)
        handler = None

    if handler is None:
        handler = _rich_handler(console) if wants_rich else _stream_handler()
        handler.name = HANDLER_NAME
        root.addHandler(handler)

    root.setLevel(resolved)
    handler.setLevel(resolved)
    return root


def get_logger(name: str) -> logging.Logger:
    """Module logger; installs the default handler if nothing has yet."""
    if _find_handler(logging.getLogger()) is None:
        setup_logging()
    return logging.getLogger(name)
