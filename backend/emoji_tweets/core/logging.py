"""Structured logging for the API.

Every request gets a correlation id (see ``main.assign_request_id``). It is
kept in a ContextVar, copied onto each record by ``RequestIdFilter`` and
rendered by ``JSONFormatter`` as one JSON object per line.
"""

import json
import logging
import sys
from contextvars import ContextVar

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(rid: str | None) -> None:
    _request_id.set(rid)


def get_request_id() -> str | None:
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Stamp the current request id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "level": record.levelname,
            "ts": round(record.created, 3),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        rid = getattr(record, "request_id", None)
        if rid:
            base["request_id"] = rid
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


def build_handler(stream=None) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(JSONFormatter())
    return handler


def configure_logging(level: int | str = "INFO") -> logging.Logger:
    """Send root logging to stdout as JSON lines and return the package logger."""
    logging.basicConfig(level=level, handlers=[build_handler()], force=True)
    return logging.getLogger("emoji_tweets")
