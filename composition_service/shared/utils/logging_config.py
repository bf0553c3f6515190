# composition_service/shared/utils/logging_config.py

"""
Logging configuration.

Console logging configured once at startup through dictConfig. Tokens and
secrets are masked before a record is written. Dropped calculation jobs go
to their own logger (composition_service.dead_letter).
"""

import logging
import logging.config
import re

_SENSITIVE_PATTERNS = [
    (re.compile(r"Bearer\s+[^\s\"']+", re.IGNORECASE), "Bearer ***"),
    (re.compile(r"(password|api_key|secret|refresh_token|access_token)([\"']?\s*[:=]\s*[\"']?)[^\"'\s,&}]+",
                re.IGNORECASE), r"\1\2***"),
]


class SensitiveDataFilter(logging.Filter):
    """Mask credentials in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            message = record.msg
            for pattern, replacement in _SENSITIVE_PATTERNS:
                message = pattern.sub(replacement, message)
            record.msg = message
        return True


def build_logging_config(level: str = "INFO", debug: bool = False) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "sensitive": {"()": SensitiveDataFilter},
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            },
            "dead_letter": {
                "format": "%(asctime)s | DEAD-LETTER | %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["sensitive"],
            },
            "dead_letter": {
                "class": "logging.StreamHandler",
                "formatter": "dead_letter",
                "filters": ["sensitive"],
            },
        },
        "loggers": {
            "composition_service": {
                "handlers": ["console"],
                "level": "DEBUG" if debug else level,
                "propagate": False,
            },
            "composition_service.dead_letter": {
                "handlers": ["dead_letter"],
                "level": "ERROR",
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "handlers": ["console"],
                "level": "INFO" if debug else "WARNING",
                "propagate": False,
            },
        },
        "root": {"handlers": ["console"], "level": level},
    }


def setup_logging(level: str = "INFO", debug: bool = False) -> None:
    logging.config.dictConfig(build_logging_config(level, debug))
