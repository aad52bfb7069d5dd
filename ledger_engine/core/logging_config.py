"""
Logging configuration.

LOG_FORMAT selects human-readable console lines ("console") or JSON lines
("json") on stdout. LOG_LEVEL sets the root level.
"""

import json
import logging
import logging.config
from datetime import datetime, timezone

from ledger_engine.core.config import Settings, get_settings


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def get_logging_config(settings: Settings) -> dict:
    if settings.log_format == "json":
        formatter = {"()": "ledger_engine.core.logging_config.JsonFormatter"}
    else:
        formatter = {
            "format": "[{asctime}] {levelname} {name} {message}",
            "style": "{",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["console"], "level": settings.log_level},
        "loggers": {
            "sqlalchemy.engine": {"level": "WARNING"},
            "uvicorn.access": {"level": "WARNING"},
        },
    }


def configure_logging(settings: Settings | None = None) -> None:
    logging.config.dictConfig(get_logging_config(settings or get_settings()))
