"""Centralized logging configuration for Quire."""

from __future__ import annotations

import logging
import os
from typing import Final

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["configure_logging", "console"]

_LOG_LEVEL_ENV: Final[str] = "QUIRE_LOG_LEVEL"
_DEFAULT_LEVEL_NAME: Final[str] = "INFO"
_MANAGED_ATTR: Final[str] = "_quire_managed"

console = Console(stderr=True)


def _resolve_level(level_name: str | None = None) -> int:
    """Return the logging level from the argument or the environment."""
    name = (level_name or os.getenv(_LOG_LEVEL_ENV, _DEFAULT_LEVEL_NAME)).upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level_name: str | None = None) -> None:
    """Configure logging once with a Rich handler.

    Calling this repeatedly (the CLI does so per command) reuses the handler
    installed the first time instead of stacking duplicates.
    """
    root_logger = logging.getLogger()

    managed = next(
        (handler for handler in root_logger.handlers if getattr(handler, _MANAGED_ATTR, False)),
        None,
    )
    if managed is None:
        root_logger.handlers.clear()
        handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            markup=False,
            log_time_format="[%Y-%m-%d %H:%M:%S]",
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        setattr(handler, _MANAGED_ATTR, True)
        root_logger.addHandler(handler)

    root_logger.setLevel(_resolve_level(level_name))

    # Quieten down noisy libraries
    logging.getLogger("markdown_it").setLevel(logging.WARNING)
    logging.captureWarnings(True)
