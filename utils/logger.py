"""
Logging helpers shared by the API and core modules.
"""
import logging

from core.config import settings

LOG_FORMAT = "%(asctime)s - [%(levelname)s] - %(name)s - %(funcName)s() - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger with a single console handler attached."""
    logger = logging.getLogger(name)

    # Configure handler/format only if no handlers present
    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
        logger.addHandler(console_handler)
        logger.setLevel(settings.log_level.upper())
        logger.propagate = False  # Prevent duplicate logging from uvicorn's root handler

    return logger
