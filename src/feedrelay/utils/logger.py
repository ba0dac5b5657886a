"""
Loguru sinks for the relay process.

The terminal sink level comes from ``--log-level`` or ``$LOG_LEVEL``; the
file sink always records DEBUG so a failed request can be traced after the
fact.  Records logged while a pipeline run is active carry the feed id
(``extra["price_feed_id"]``, ``-`` outside a run), which the file format
prints so interleaved requests from the worker pool can be told apart.
"""
import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LEVEL = "INFO"
LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

NO_FEED = "-"


def resolve_level(level: Optional[str] = None) -> str:
    """Pick the terminal level: explicit argument, then ``$LOG_LEVEL``, then INFO.

    Raises:
        ValueError: If the chosen name is not a Loguru level.
    """
    chosen = (level or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LEVEL).upper()
    if chosen not in LEVELS:
        raise ValueError(
            f"Unknown log level {chosen!r}, expected one of {', '.join(LEVELS)}"
        )
    return chosen


def setup_logger(log_dir: str = "logs", level: Optional[str] = None) -> logger:
    """Replace Loguru's default handler with the relay's two sinks.

    Args:
        log_dir: Directory for the daily log files, created if missing.
        level: Terminal sink level; see ``resolve_level``.

    Returns:
        The configured ``logger`` instance.
    """
    terminal_level = resolve_level(level)

    logger.remove()
    logger.configure(extra={"price_feed_id": NO_FEED})

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.add(
        sys.stderr,
        level=terminal_level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    # Request handlers run in worker threads, hence enqueue=True.
    logger.add(
        log_path / "feedrelay_{time:YYYY-MM-DD}.log",
        level="DEBUG",
        rotation="00:00",
        retention="14 days",
        format=(
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
            "feed={extra[price_feed_id]} | {name}:{line} - {message}"
        ),
        enqueue=True,
        encoding="utf-8",
    )

    return logger
