"""structlog configuration shared by every module."""

import logging

import structlog

from city_insights.config import settings


def configure_logging(level: str = settings.log_level) -> None:
    """Configure structlog for JSON output with context-var support.

    Args:
        level: Minimum log level name, e.g. "INFO".
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=True,
    )


configure_logging()
logger = structlog.get_logger()
