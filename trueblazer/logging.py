"""Structured logging setup for the TrueBlazer backend."""

from __future__ import annotations

import logging
import sys

from .config import get_log_level

_HANDLER_NAME = "trueblazer-stdout"


class StructuredFormatter(logging.Formatter):
    """Render records as ``key=value`` pairs, including any ``extra_data``."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "module": record.module,
            "message": record.getMessage(),
        }
        extra = getattr(record, "extra_data", None)
        if isinstance(extra, dict):
            log_data.update(extra)
        line = " ".join(f"{key}={value}" for key, value in log_data.items())
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a single stdout handler to the ``trueblazer`` logger tree."""

    logger = logging.getLogger("trueblazer")
    logger.setLevel(level or get_log_level())
    if not any(handler.get_name() == _HANDLER_NAME for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
    return logger
