"""Logging configuration for the spider entry points."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from cex_spider.config import Settings

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOGGER_NAME = "cex_spider"

_LEVELS: dict[str, int] = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for production log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def to_logging_level(name: str) -> int:
    try:
        return _LEVELS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown log level: {name}") from None


def configure_logging(settings: Settings) -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Calling this again replaces the previous handler, so entry points and
    tests can reconfigure freely.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(to_logging_level(settings.log_level))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = logging.StreamHandler(sys.stderr)
    if settings.app_env == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)
    return logger
