"""
Spiegel Logging Configuration

Configurable logging with debug mode support.
"""

import os
import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

from spiegel.wizard.ui import mask_secrets


def is_debug_mode() -> bool:
    """Check the SPIEGEL_DEBUG environment flag."""
    return os.environ.get("SPIEGEL_DEBUG", "").lower() in ("1", "true", "yes")


def _level_from_env() -> Optional[int]:
    name = os.environ.get("SPIEGEL_LOG_LEVEL", "").upper()
    if name in ("DEBUG", "INFO", "WARNING", "ERROR"):
        return getattr(logging, name)
    return None


class SecretMaskingFormatter(logging.Formatter):
    """Formatter that masks secrets in log messages."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        return mask_secrets(message)


def setup_logging(
    level: Optional[int] = None,
    log_file: Optional[Path] = None,
    quiet: bool = False
) -> logging.Logger:
    """Set up logging configuration.

    Args:
        level: Logging level (default: DEBUG if SPIEGEL_DEBUG, else
            SPIEGEL_LOG_LEVEL, else WARNING)
        log_file: Optional path to log file
        quiet: If True, suppress console output

    Returns:
        Configured logger
    """
    debug = is_debug_mode()

    if level is None:
        if debug:
            level = logging.DEBUG
        else:
            level = _level_from_env() or logging.WARNING

    logger = logging.getLogger("spiegel")
    logger.setLevel(logging.DEBUG if log_file else level)

    logger.handlers.clear()

    if not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)

        if debug:
            console_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        else:
            console_format = "%(message)s"

        console_handler.setFormatter(SecretMaskingFormatter(console_format))
        logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_format = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
        file_handler.setFormatter(SecretMaskingFormatter(file_format))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "spiegel") -> logging.Logger:
    """Get a logger under the Spiegel namespace.

    Args:
        name: Logger name (will be prefixed with 'spiegel.')

    Returns:
        Logger instance
    """
    if not name.startswith("spiegel"):
        name = f"spiegel.{name}"

    return logging.getLogger(name)


def get_log_path(steps_dir: Path) -> Path:
    """Get the default log file path for a steps directory."""
    return steps_dir.parent / "logs" / f"spiegel-{datetime.now().strftime('%Y-%m-%d')}.log"

