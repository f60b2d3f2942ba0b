import logging
from logging.config import dictConfig
from typing import Optional

from optimistic_json.settings import settings

selected_log_level = logging.DEBUG if settings.debug else logging.INFO

DEVELOPMENT_LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
        "no_datetime": {"format": "%(name)s - %(levelname)s - %(message)s"},
    },
    "handlers": {
        "console": {
            "level": selected_log_level,
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": "no_datetime",
        },
    },
    "loggers": {
        "OptimisticJSON": {
            "level": selected_log_level,
            "handlers": ["console"],
            "propagate": False,
        },
    },
}


def get_logger(name: Optional[str] = None) -> "logging.Logger":
    """returns the project logger, scoped to a child name if provided
    Args:
        name: will define a child logger
    """
    dictConfig(DEVELOPMENT_LOGGING)
    parent_logger = logging.getLogger("OptimisticJSON")
    if name:
        return parent_logger.getChild(name)
    return parent_logger
