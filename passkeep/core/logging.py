import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import LOG_LEVEL, LOG_PATH

logger = logging.getLogger("passkeep")


def setup_logger(log_path: str = LOG_PATH, level: str = LOG_LEVEL):
    logger.setLevel(level.upper())

    # Prevent duplicate handlers if the app is re-created (tests, reloads)
    if logger.handlers:
        return logger

    Path(log_path).parent.mkdir(parents=True, exist_ok=True)

    # Rotating file log: ~2MB per file, keep 5 backups
    handler = RotatingFileHandler(
        log_path,
        maxBytes=2_000_000,
        backupCount=5,
        encoding="utf-8"
    )

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s"
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.propagate = False

    logger.info("Logger initialized path=%s", log_path)

    return logger
