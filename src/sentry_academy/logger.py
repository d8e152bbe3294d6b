"""
logger.py — Logging setup shared by the generation pipeline
============================================================
Every module logs through ``logging.getLogger(__name__)``.  This module
adds a request-id context variable so that log lines emitted while a
background generation job runs carry the id of the request they belong to.

Usage
-----
    from sentry_academy.logger import configure_logging, request_context

    configure_logging("DEBUG")
    with request_context(request.id):
        ...
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

REQUEST_ID: ContextVar[str] = ContextVar("request_id", default="-")

_FORMAT  = "%(asctime)s %(levelname)-8s %(name)s request_id=%(request_id)s %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.request_id = REQUEST_ID.get("-")
        return True


def _parse_level(level: str) -> int:
    numeric = logging.getLevelName((level or "INFO").upper())
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stderr handler with the request-id filter to the package logger.
    Idempotent: safe to call multiple times.
    """
    from sentry_academy.config import get_settings

    logger = logging.getLogger("sentry_academy")
    if getattr(logger, "_configured", False):
        return logger

    numeric_level = _parse_level(level or get_settings().app.log_level)
    logger.setLevel(numeric_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    handler.addFilter(RequestIdFilter())
    logger.addHandler(handler)

    logger._configured = True  # type: ignore[attr-defined]
    return logger


def set_request_id(request_id: str) -> None:
    REQUEST_ID.set(request_id)


def clear_request_id() -> None:
    REQUEST_ID.set("-")


@contextmanager
def request_context(request_id: str) -> Iterator[None]:
    """Bind *request_id* to every log record emitted inside the block."""
    token = REQUEST_ID.set(request_id)
    try:
        yield
    finally:
        REQUEST_ID.reset(token)
