# idi_canarias/logging_config.py
from __future__ import annotations
import logging
import logging.config

from idi_canarias.config import LOG_LEVEL

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,  # mantiene los loggers de streamlit
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "default",
        },
    },
    "root": {
        "level": "WARNING",
        "handlers": ["console"]
    },
    "loggers": {
        # Logger de la app; los diagnósticos del emparejador van en DEBUG
        "idi_canarias": {
            "level": LOG_LEVEL,
            "handlers": ["console"],
            "propagate": False
        },
        "urllib3": {
            "level": "WARNING",
        },
    }
}


def setup_logging(level: str | None = None):
    cfg = dict(LOGGING)
    if level:
        cfg["loggers"] = {**LOGGING["loggers"], "idi_canarias": {**LOGGING["loggers"]["idi_canarias"], "level": level.upper()}}
    logging.config.dictConfig(cfg)
