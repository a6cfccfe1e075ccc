"""Logging configuration using loguru."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .models import CheckerSettings


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan> | "
    "<level>{message}</level>"
)


def setup_logging(
    level: str = "INFO",
    file_path: Optional[Path] = None,
    serialize: bool = False,
    rotation_mb: int = 50,
    retention: int = 5,
) -> None:
    """
    Configure loguru sinks for the checker.

    Args:
        level: Minimum level for all sinks. Unknown names fall back to INFO.
        file_path: Optional log file; parent directories are created.
        serialize: Emit JSON lines instead of the human format.
        rotation_mb: Rotate the log file at this size.
        retention: Number of rotated files to keep.
    """
    logger.remove()

    try:
        logger.level(level)
        safe_level = level
    except ValueError:
        safe_level = "INFO"

    logger.add(
        sys.stderr,
        level=safe_level,
        format=LOG_FORMAT,
        serialize=serialize,
        colorize=not serialize,
    )

    if file_path:
        log_file = Path(file_path)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=safe_level,
            format=LOG_FORMAT,
            serialize=serialize,
            rotation=f"{rotation_mb} MB",
            retention=retention,
            encoding="utf-8",
        )

    if safe_level != level:
        logger.warning(f"Invalid logging level '{level}'; using 'INFO'")


def configure_logging(settings: CheckerSettings, serialize: bool = False) -> None:
    """Apply the log level and log file of loaded checker settings."""
    setup_logging(
        level=settings.log_level,
        file_path=settings.log_file,
        serialize=serialize,
    )
