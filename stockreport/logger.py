import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from . import settings

CONSOLE_FORMAT = "%(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "stockreport.log"


def _file_handler(log_dir: Path, level: int | str) -> RotatingFileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def setup_logger(
    name: str | None = "stockreport",
    log_level: int | str = settings.LOG_LEVEL,
    log_dir: Path | None = None,
    console: bool = True,
) -> logging.Logger:
    """
    Configures the package logger: short messages on stdout for the operator,
    full records in a rotating file under `log_dir` (LOG_DIR by default).
    Module loggers (`stockreport.*`) propagate here. Safe to call twice.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    if logger.handlers:
        return logger

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    logger.addHandler(_file_handler(log_dir or settings.LOG_DIR, log_level))
    return logger
