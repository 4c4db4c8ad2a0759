"""
Centralized logging configuration for GroupTabs.

Library modules only ever call get_logger(__name__). Applications embedding the
engine call setup_logging() once at startup to get a rotating log file and,
in debug mode, colored console output.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_ROOT_LOGGER_NAME = "GroupTabs"
_LOG_FORMAT = '%(asctime)s - %(name)-36s - %(levelname)-8s - %(message)s'


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',       # Cyan
        'INFO': '\033[32m',        # Green
        'WARNING': '\033[33m',     # Yellow
        'ERROR': '\033[31m',       # Red
        'CRITICAL': '\033[35m',    # Magenta
    }
    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record):
        original_levelname = record.levelname
        color = self.COLORS.get(record.levelname)
        if color is None:
            return super().format(record)

        record.levelname = f"{self.BOLD}{color}{record.levelname}{self.RESET}"
        try:
            message = super().format(record)
        finally:
            record.levelname = original_levelname
        return f"{color}{message}{self.RESET}"


def setup_logging(debug: bool = False, log_dir: Path | str | None = None) -> logging.Logger:
    """
    Configure logging for the engine.

    Args:
        debug: If True, log at DEBUG level and mirror records to the console.
        log_dir: Directory for a rotating 'grouptabs.log'. No file is written
            when this is None.

    Returns:
        The package root logger.
    """
    level = logging.DEBUG if debug else logging.INFO
    root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    root_logger.setLevel(level)

    # Calling setup twice must not duplicate output.
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # File handler with rotation (1MB max, keep 5 backups)
        file_handler = RotatingFileHandler(
            log_path / "grouptabs.log",
            maxBytes=1 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    if debug:
        console_handler = logging.StreamHandler(sys.stdout)
        if sys.stdout.isatty():
            console_handler.setFormatter(ColoredFormatter(_LOG_FORMAT, datefmt='%H:%M:%S'))
        else:
            console_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt='%H:%M:%S'))
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

    root_logger.info("GroupTabs logging initialized (debug=%s, log_dir=%s)", debug, log_dir)
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger below the package root so setup_logging() governs it."""
    if name == _ROOT_LOGGER_NAME or name.startswith(_ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")
