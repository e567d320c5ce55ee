"""Root logger setup for the CLI entry points and the scheduler."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

from .config import AppConfig, LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# marks handlers installed here so a second call replaces only those
_OWNED = "_speedtracker_handler"


def resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def build_handlers(settings: LoggingConfig, log_path: Path) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [
        RotatingFileHandler(
            log_path,
            maxBytes=settings.max_bytes,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
    ]
    if settings.console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _OWNED, True)
    return handlers


def configure_logging(config: AppConfig) -> Path:
    """Attach the rotating log file and console output to the root logger.

    Returns the path of the active log file.
    """

    settings = config.logging
    log_dir = config.paths.logs_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / settings.filename

    root_logger = logging.getLogger()
    root_logger.setLevel(resolve_level(settings.level))

    for handler in list(root_logger.handlers):
        if getattr(handler, _OWNED, False):
            root_logger.removeHandler(handler)
            handler.close()
    for handler in build_handlers(settings, log_path):
        root_logger.addHandler(handler)

    for name in settings.quiet:
        logging.getLogger(name).setLevel(max(root_logger.level, logging.INFO))
    return log_path
