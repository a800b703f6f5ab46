from __future__ import annotations

import logging
import logging.handlers
import os
from datetime import datetime
from pathlib import Path

from pydelegate.config import get_config

LOGGER_NAME = "pydelegate"


def clean_old_logs(log_dir: Path, max_files: int = 5):
    """Remove old log files, keeping only the most recent `max_files` logs

    Log files in the directory are sorted by modification time and the oldest are
    removed until only `max_files` remain.

    Args:
        log_dir (Path): The directory where the log files are stored.
        max_files (int, optional): The maximum number of log files to keep. Defaults to 5.
    """
    log_files = sorted(log_dir.glob("*.log"), key=os.path.getmtime)
    while len(log_files) > max_files:
        old_log = log_files.pop(0)
        old_log.unlink()


class CustomFormatter(logging.Formatter):
    def format(self, record):
        record.levelname = record.levelname.ljust(8)
        return super().format(record)


def configure_logger(
    log_level: int | None = None, log_dir: Path | None = None, max_log_files: int = 5
) -> logging.Logger:
    """Configures the pydelegate logger with format, level and an optional log file

    Console output uses a short format without timestamps. When `log_dir` is given, a log
    file named after the current date and time is written there as well, with the detailed
    format, and only the newest `max_log_files` files are kept.

    Handlers are attached to the "pydelegate" logger rather than the root logger, so an
    application's own logging setup is left alone. Calling this again replaces the handlers.

    Args:
        log_level (int | None): The log level to log at. Defaults to LOG_LEVEL of the active config.
        log_dir (Path | None): Where to store log files. Defaults to no log file.
        max_log_files (int): Keeps only the previous (n) number of log files. Defaults to 5.

    Returns:
        logging.Logger: The configured package logger.
    """
    if log_level is None:
        log_level = get_config().LOG_LEVEL

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_dir is not None:
        log_dir.mkdir(exist_ok=True, parents=True)
        clean_old_logs(log_dir=log_dir, max_files=max_log_files)

        log_filename = log_dir / datetime.now().strftime("%Y-%m-%d_%H-%M-%S.log")
        file_handler = logging.handlers.RotatingFileHandler(
            log_filename, maxBytes=10 * 1024**2, backupCount=5
        )
        file_handler.setFormatter(
            CustomFormatter(
                "[%(asctime)s] %(levelname)s %(name)s: %(message)s", datefmt="%d.%m.%Y %H:%M:%S"
            )
        )
        logger.addHandler(file_handler)

    logger.setLevel(log_level)
    return logger
