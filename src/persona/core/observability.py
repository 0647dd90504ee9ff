"""Structured JSON logging setup."""

from __future__ import annotations

import logging

from pythonjsonlogger import jsonlogger

logger = logging.getLogger("persona")


def setup_json_logging(level: str = "INFO") -> None:
    """Route the root logger through a single JSON handler. Safe to call twice."""
    root_logger = logging.getLogger()
    if any(isinstance(h.formatter, jsonlogger.JsonFormatter) for h in root_logger.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(module)s %(funcName)s %(lineno)d %(message)s",
        rename_fields={"levelname": "level", "name": "logger_name", "asctime": "timestamp"},
    ))
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())
    logger.info("JSON logging configured at level %s", level.upper())
