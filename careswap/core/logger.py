import logging
import sys
from pathlib import Path
from typing import Optional

from careswap.core.config import settings

LOGGER_NAME = "careswap"


def configure_logging(level: str = settings.log_level, log_file: Optional[str] = settings.log_file) -> logging.Logger:
    """
    Sets up the shared "careswap" logger.

    stdout always (so docker / uvicorn picks it up), plus a file when one is configured.
    Safe to call more than once: each handler is attached only if it is not there yet,
    so a later call can still add a log file.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    # FileHandler is a StreamHandler subclass, so check the exact type
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s - %(message)s"))
        logger.addHandler(stream_handler)

    if log_file:
        path = Path(log_file).resolve()
        already_attached = any(
            isinstance(h, logging.FileHandler) and h.baseFilename == str(path)
            for h in logger.handlers
        )
        if not already_attached:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger under the careswap namespace, e.g. get_logger(__name__)."""
    if name.startswith(LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
