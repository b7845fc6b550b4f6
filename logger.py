# order_workflow/logger.py

import os
import logging
from logging.handlers import RotatingFileHandler
from config import LOG_DIR, LOG_FILE, LOG_LEVEL, LOG_CONSOLE

FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _is_console(handler: logging.Handler) -> bool:
    # RotatingFileHandler is a StreamHandler too
    return type(handler) is logging.StreamHandler


def get_logger(name: str) -> logging.Logger:
    os.makedirs(LOG_DIR, exist_ok=True)
    logger = logging.getLogger(f"order_workflow.{name}")
    logger.setLevel(getattr(logging, LOG_LEVEL, logging.DEBUG))
    fmt = logging.Formatter(FORMAT)

    if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        handler = RotatingFileHandler(os.path.join(LOG_DIR, LOG_FILE), maxBytes=5 * 1024 * 1024, backupCount=5)
        handler.setFormatter(fmt)
        logger.addHandler(handler)

    if LOG_CONSOLE and not any(_is_console(h) for h in logger.handlers):
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        logger.addHandler(console)

    return logger
