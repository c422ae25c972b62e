"""Operational logging for the coaching core.

Modules log with structured keyword arguments (``logger.info("Coach draft
produced", user_id=..., model=...)``); loguru stores them in the record's
extra dict, and both sinks print it. Audit records are not logs and never go
through here.
"""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level> {extra}"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message} {extra}"


def setup_logger(level: str = "INFO", log_file: str | None = None, serialize: bool = False) -> None:
    """Replace loguru's default sink with the coaching core's sinks.

    Args:
        level: Minimum level for every sink
        log_file: Optional file sink, rotated at 10 MB and kept for 7 days
        serialize: Write the file sink as JSON lines for log shippers
    """
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=level,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            serialize=serialize,
            # No variable values in tracebacks
            diagnose=False,
        )

    logger.info("Logger configured", level=level, log_file=log_file, serialize=serialize)
