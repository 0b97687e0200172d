from __future__ import annotations

import json
import logging
import os
from logging.config import dictConfig
from traceback import format_exception

from quickscan.app.env import Env, get_env, pick

# Optional attributes handlers attach through ``extra=``; rendered under "http".
_HTTP_FIELDS = (
    ("method", "http_method"),
    ("path", "path"),
    ("status", "status_code"),
    ("client_ip", "client_ip"),
)
_CONTEXT_FIELDS = ("operation", "file_id", "error_type")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for prod and CI logs."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, object] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "pid": record.process,
            "message": record.getMessage(),
        }

        http_ctx = {
            key: getattr(record, attr)
            for key, attr in _HTTP_FIELDS
            if getattr(record, attr, None) is not None
        }
        if http_ctx:
            payload["http"] = http_ctx

        for attr in _CONTEXT_FIELDS:
            value = getattr(record, attr, None)
            if value is not None:
                payload[attr] = str(value)

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            stack = "".join(format_exception(*record.exc_info))
            max_stack = int(os.getenv("LOG_STACK_LIMIT", "4000"))
            payload["error"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "stack": stack[:max_stack] + ("...(truncated)" if len(stack) > max_stack else ""),
            }

        return json.dumps(payload, ensure_ascii=False, default=str)


def _read_level(env: Env) -> str:
    explicit = os.getenv("LOG_LEVEL")
    if explicit:
        return explicit.upper()
    return pick(prod="INFO", nonprod="DEBUG", env=env)


def _read_format(env: Env) -> str:
    fmt = os.getenv("LOG_FORMAT")
    if fmt:
        return fmt.lower()
    return pick(prod="json", nonprod="plain", env=env)


def setup_logging(env: Env | None = None) -> None:
    env = env or get_env()
    level = _read_level(env)
    formatter_name = "json" if _read_format(env) == "json" else "plain"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,  # keep uvicorn & friends
            "formatters": {
                "plain": {
                    "format": "%(asctime)s %(levelname)-5s [pid:%(process)d] %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                },
                "json": {
                    "()": JsonFormatter,
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                },
            },
            "handlers": {
                "stream": {
                    "class": "logging.StreamHandler",
                    "level": level,
                    "formatter": formatter_name,
                }
            },
            "root": {
                "level": level,
                "handlers": ["stream"],
            },
            # uvicorn bubbles up to the root handler but stays at INFO.
            "loggers": {
                "uvicorn": {"level": "INFO", "handlers": [], "propagate": True},
                "uvicorn.error": {"level": "INFO", "handlers": [], "propagate": True},
                "uvicorn.access": {"level": "INFO", "handlers": [], "propagate": True},
                "httpx": {"level": "WARNING", "handlers": [], "propagate": True},
            },
        }
    )
