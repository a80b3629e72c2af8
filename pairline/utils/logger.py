"""Logging utilities.

Records bound with ``room`` or ``connection`` (see ``get_logger``) carry that
context in every sink, so one call can be followed across the router, the
registry and the server.
"""

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

CONTEXT_KEYS = ("room", "connection")

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>{context} - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line}{context} - {message}"


def _formatter(template: str):
    """Build a loguru format callable that appends bound room/connection context.

    Only field references are inserted, never the values, so caller-supplied
    ids containing braces cannot break the template.
    """

    def format_record(record) -> str:
        context = "".join(
            f" {key}={{extra[{key}]}}" for key in CONTEXT_KEYS if key in record["extra"]
        )
        return template.replace("{context}", context) + "\n{exception}"

    return format_record


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Union[Path, str]] = None,
    rotation: str = "10 MB",
    retention: str = "1 week",
) -> None:
    """Setup logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (optional)
        rotation: Log rotation size
        retention: Log retention period
    """
    logger.remove()
    level = log_level.upper()

    logger.add(sys.stderr, format=_formatter(CONSOLE_FORMAT), level=level, colorize=True)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=_formatter(FILE_FORMAT),
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
        )


def get_logger(name: str, **context):
    """Get a logger instance.

    Args:
        name: Logger name (usually __name__)
        **context: Extra fields to bind, e.g. ``room="r1"`` or ``connection=cid``

    Returns:
        Logger instance
    """
    return logger.bind(name=name, **context)
