"""
Logging configuration for the Horizon Telemetry API.

Console output plus two rotating files under LOG_DIR:
- horizon_api.log: everything at INFO and above
- horizon_api_errors.log: errors only

The API and the import/report scripts share this setup.
"""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional

from horizon_api.config import settings

LOG_FILE = "horizon_api.log"
ERROR_LOG_FILE = "horizon_api_errors.log"

MAX_LOG_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_BACKUPS = 5

DEBUG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
PRODUCTION_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Libraries that log every request or statement at INFO
NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_dir: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        log_dir: Directory for the log files (default: LOG_DIR setting)
        level: Root log level name (default: LOG_LEVEL setting)

    Returns:
        The configured root logger
    """
    directory = Path(log_dir or settings.LOG_DIR)
    directory.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level or settings.LOG_LEVEL)

    # Calling setup twice (app + script) must not duplicate output
    root.handlers.clear()

    formatter = logging.Formatter(
        fmt=DEBUG_FORMAT if settings.DEBUG else PRODUCTION_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    root.addHandler(_rotating_handler(directory / LOG_FILE, logging.INFO, formatter))
    root.addHandler(_rotating_handler(directory / ERROR_LOG_FILE, logging.ERROR, formatter))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.info(f"Logging to {directory.resolve()} (level {logging.getLevelName(root.level)})")
    return root


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
