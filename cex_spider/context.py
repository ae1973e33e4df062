from __future__ import annotations

import logging
from dataclasses import dataclass

from cex_spider.config import Settings, load_settings
from cex_spider.logging_setup import configure_logging


@dataclass(frozen=True)
class AppContext:
    """Settings and logger shared by every component of one run."""

    settings: Settings
    logger: logging.Logger

    def child_logger(self, name: str) -> logging.Logger:
        return self.logger.getChild(name)


def build_context(settings: Settings | None = None) -> AppContext:
    """Load settings (unless given), configure logging and return the context.

    Raises:
        pydantic.ValidationError: If the environment holds malformed values.
    """
    if settings is None:
        settings = load_settings()
    logger = configure_logging(settings)
    logger.debug("Loaded configuration: %s", settings.redacted())
    return AppContext(settings=settings, logger=logger)
