"""Logging setup: JSON lines by default, plain text when disabled in settings."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.config import dictConfig
from typing import Any

from .config import settings

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED = frozenset(logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__) | {"message", "asctime"}


def _json_formatter(record: logging.LogRecord) -> str:
    payload: dict[str, Any] = {
        "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    payload.update({key: value for key, value in record.__dict__.items() if key not in _RESERVED})
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    return json.dumps(payload, ensure_ascii=False, default=str)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - overrides base
        return _json_formatter(record)


def build_config(level: str, json_logs: bool) -> dict[str, Any]:
    formatter: dict[str, Any] = {"()": JsonFormatter} if json_logs else {"format": PLAIN_FORMAT}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "handlers": {
            "default": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "default",
            }
        },
        "loggers": {
            "": {"handlers": ["default"], "level": level},
            "vietqr": {"level": level, "propagate": True},
        },
    }


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure global logging from settings, optionally overriding them."""

    dictConfig(
        build_config(
            level or settings.logging.level,
            settings.logging.json_logs if json_logs is None else json_logs,
        )
    )
