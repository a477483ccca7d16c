"""
Unified output system using Loguru.
User-facing messages go to the console and the log file; everything else
goes to the log file only.
"""

import sys
from pathlib import Path

from loguru import logger

from .console import safe_print

# Console style per log level
LEVEL_STYLES = {
    "debug": "cyan",
    "info": None,
    "success": "green",
    "warning": "yellow",
    "error": "bold red",
}


def setup_loguru(log_file: Path, level: str = "INFO", console_output: bool = False) -> None:
    """
    Configure loguru for file logging, optionally mirrored to stderr.

    Args:
        log_file: Path to log file
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
        console_output: Also write log records to stderr
    """
    # Remove default handler
    logger.remove()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        rotation="10 MB",
        retention=5,  # Keep 5 backup files
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        enqueue=False,
    )

    if console_output:
        logger.add(sys.stderr, level=level, format="{level}: {message}")

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def log(message: str, level: str = "info") -> None:
    """
    Write a user-facing message to the log file and the console.

    Args:
        message: User-facing message
        level: Log level (debug, info, success, warning, error)
    """
    getattr(logger, level)(message)
    safe_print(message, style=LEVEL_STYLES.get(level), markup=False)
