"""Shared logging configuration for Listeria.

Call ``configure_logging()`` once at any CLI entry point to ensure logs are emitted.
The function is idempotent: if the root logger already has handlers, it does nothing.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from listeria.config.settings import settings


def configure_logging(level: int | str | None = None) -> None:
    """Configure the root logger with a rich console handler.

    Only configures if the root logger has no handlers (idempotent).
    """
    root = logging.getLogger()
    if root.handlers:
        return

    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
    root.addHandler(handler)

    if level is None:
        level = settings.log_level
    if isinstance(level, str):
        level = level.upper()
    root.setLevel(level)
