from __future__ import annotations

import json
import logging
import os
from logging.config import dictConfig

from .settings import RemarkableSettings, get_settings


class JsonFormatter(logging.Formatter):
    """Structured JSON formatter for CI and machine-read logs."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, object] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "pid": record.process,
            "message": record.getMessage(),
        }

        # HTTP context (only when present)
        http_ctx = {
            k: v for k, v in {
                "method": getattr(record, "http_method", None),
                "url": getattr(record, "url", None),
                "status": getattr(record, "status_code", None),
            }.items() if v is not None
        }
        if http_ctx:
            payload["http"] = http_ctx

        doc_id = getattr(record, "doc_id", None)
        if doc_id is not None:
            payload["doc_id"] = doc_id

        if record.exc_info and record.exc_info[0]:
            payload["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stack": self.formatException(record.exc_info),
            }

        return json.dumps(payload, ensure_ascii=False)


def _read_level(settings: RemarkableSettings) -> str:
    # Allow explicit override first
    explicit = os.getenv("LOG_LEVEL") or settings.log_level
    if explicit:
        return explicit.upper()
    return "WARNING"


def _read_format(settings: RemarkableSettings) -> str:
    fmt = os.getenv("LOG_FORMAT") or settings.log_format
    return "json" if fmt.lower() == "json" else "plain"


def setup_logging(settings: RemarkableSettings | None = None) -> None:
    settings = settings or get_settings()
    level = _read_level(settings)
    formatter_name = _read_format(settings)

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {
                    "format": "%(asctime)s %(levelname)-5s %(name)s: %(message)s",
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
            # httpx logs every request at INFO; keep it quiet unless asked
            "loggers": {
                "httpx": {"level": "WARNING", "handlers": [], "propagate": True},
                "httpcore": {"level": "WARNING", "handlers": [], "propagate": True},
            },
        }
    )
