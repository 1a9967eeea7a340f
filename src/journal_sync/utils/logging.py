"""Logging utilities for journal-sync."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(
    level: int | str = logging.INFO,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure logging with Rich handler for console output."""
    logger = logging.getLogger("journal_sync")
    logger.setLevel(logging.DEBUG if log_file else level)

    # Remove existing handlers
    logger.handlers.clear()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "journal_sync") -> logging.Logger:
    """Get a logger instance under the journal_sync namespace."""
    if name != "journal_sync" and not name.startswith("journal_sync."):
        name = f"journal_sync.{name}"
    return logging.getLogger(name)


class LogContext:
    """Context manager for logging with extra context."""

    def __init__(self, logger: logging.Logger, context: str):
        self.logger = logger
        self.context = context

    def __enter__(self):
        self.logger.debug("Starting: %s", self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.logger.error("Failed: %s - %s", self.context, exc_val)
        else:
            self.logger.debug("Completed: %s", self.context)
        return False
