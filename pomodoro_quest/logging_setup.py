import os
import logging
from logging.handlers import RotatingFileHandler

from .config import LOG_FILE
from .utils import ensure_dir


def setup_logger(log_file: str = LOG_FILE) -> logging.Logger:
    ensure_dir(os.path.dirname(log_file))
    logger = logging.getLogger("PomodoroQuest")
    logger.setLevel(logging.INFO)

    if not logger.handlers:
        handler = RotatingFileHandler(
            log_file,
            maxBytes=1_000_000,
            backupCount=3,
            encoding="utf-8",
        )
        fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)

    return logger
