"""JSON logger setup shared by the API and its services."""

import logging
import os

from pythonjsonlogger import jsonlogger


def get_logger(name: str, level: str = None) -> logging.Logger:
    """
    Configure a JSON logger once and reuse it.

    Extra fields passed via ``extra=`` land as top-level keys in the record.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        "%(levelname)s %(name)s %(message)s %(asctime)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(level or os.getenv("LOG_LEVEL", "INFO").upper())
    logger.propagate = False
    return logger
