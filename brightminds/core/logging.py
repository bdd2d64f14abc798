"""Structured JSON logging with per-request correlation ids"""

import logging
import sys
from contextvars import ContextVar
from typing import Optional

from pythonjsonlogger import jsonlogger

from brightminds.config import settings

# Set by RequestIDMiddleware for the lifetime of one request
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    return correlation_id_var.get()


class CorrelationIdFilter(logging.Filter):
    """
    Stamp ``record.correlation_id`` from the current request context.

    Attach it to handlers, not loggers, so records propagated from service
    loggers (``brightminds.services.*``) are stamped too. An explicit
    ``extra={"correlation_id": ...}`` wins over the context value.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "correlation_id", None) is None:
            record.correlation_id = correlation_id_var.get()
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding level, logger, environment and correlation fields"""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["environment"] = settings.ENVIRONMENT
        log_record["app_name"] = settings.APP_NAME

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id is not None:
            log_record["correlation_id"] = correlation_id


def setup_logging() -> None:
    """Install a single stdout handler on the root logger"""
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())

    if settings.LOG_FORMAT == "json":
        formatter = CustomJsonFormatter(
            fmt="%(asctime)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))
    root_logger.addHandler(handler)

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
