"""Logging configuration for covid19mx."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path


class SafeRotatingFileHandler(RotatingFileHandler):
    """Rotating file handler that keeps writing when rollover fails.

    Rollover renames the log file, which fails on Windows while another
    process holds it open.
    """

    def doRollover(self) -> None:  # noqa: N802 - logging API name
        try:
            super().doRollover()
        except OSError:
            # Keep appending to the current file; rotation is retried on the next record.
            if self.stream is None:
                self.stream = self._open()

    def shouldRollover(self, record: logging.LogRecord) -> int:  # noqa: N802
        try:
            return super().shouldRollover(record)
        except OSError:
            return 0


def setup_logging(
    log_dir: Path, level: int = logging.INFO, console: bool = True
) -> logging.Logger:
    """Configure logging to rotating file and, optionally, console (stderr)."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "covid19mx.log"

    logger = logging.getLogger("covid19mx")
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    file_handler = SafeRotatingFileHandler(
        log_path,
        maxBytes=1_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    if console:
        logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    return logger
