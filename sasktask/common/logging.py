import logging
import logging.config

from sasktask.config import settings

_ROOT = "sasktask"


def setup_logging(level: str | None = None) -> None:
    """Configure the ``sasktask`` logger tree once at process start."""
    level = (level or settings.LOG_LEVEL).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                _ROOT: {"handlers": ["console"], "level": level, "propagate": False},
                "uvicorn.access": {"level": "WARNING"},
            },
        }
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{_ROOT}.{name}")
