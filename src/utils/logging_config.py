"""Structured logger setup shared across handlers and services."""

import logging
import os

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "campaign-analytics-copilot"


def get_logger(name: str) -> logging.Logger:
    """
    Configure a JSON logger once and reuse it.

    Callers attach request context (correlation id, rule, latency) via ``extra``.
    The level comes from ``LOG_LEVEL`` (INFO when unset).
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={"asctime": "timestamp", "levelname": "level"},
        static_fields={"service": SERVICE_NAME},
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())
    logger.propagate = False
    return logger
