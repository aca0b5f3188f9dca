"""
Logger factory for the leaderboard service.

Every module logger gets stdout output; when LOG_DIR is set, DEBUG and above
also go to one dated file per day shared by all loggers.
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from leaderboard.config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def log_file_path(log_dir: str, day: Optional[date] = None) -> Path:
    """Path of the daily log file, e.g. logs/leaderboard_20261018.log"""
    day = day or date.today()
    return Path(log_dir) / f"leaderboard_{day:%Y%m%d}.log"


def setup_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Return the named logger, attaching handlers on first use only.

    Args:
        name: Logger name, normally ``__name__``
        level: Console level; defaults to DEBUG when Config.DEBUG is on, else INFO
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    console_level = level if level is not None else (logging.DEBUG if Config.DEBUG else logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    stream = logging.StreamHandler(sys.stdout)
    stream.setLevel(console_level)
    stream.setFormatter(formatter)
    logger.addHandler(stream)
    logger.setLevel(console_level)

    if Config.LOG_DIR:
        path = log_file_path(Config.LOG_DIR)
        path.parent.mkdir(parents=True, exist_ok=True)
        to_file = logging.FileHandler(path, encoding='utf-8')
        to_file.setLevel(logging.DEBUG)
        to_file.setFormatter(formatter)
        logger.addHandler(to_file)
        # The file captures debug output even when the console does not
        logger.setLevel(logging.DEBUG)

    return logger
