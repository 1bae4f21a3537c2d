"""Logging setup for the moola CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Configure the root logger to write through rich on stderr.

    Args:
        level: Level name ("DEBUG", "info", ...). Unknown names fall back to WARNING.

    Returns:
        The "moola" logger.
    """
    log_level = LOG_LEVELS.get(level.upper(), logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )

    return logging.getLogger("moola")
