"""Logging utilities."""
from __future__ import annotations

import enum
import logging
import sys
from typing import IO, Optional

LOGGER_NAME = "ubuntu_report"


class Verbosity(enum.IntEnum):
    QUIET = 0
    INFO = 1
    DEBUG = 2

    @classmethod
    def from_count(cls, count: int) -> "Verbosity":
        return cls(min(max(count, 0), cls.DEBUG))

    @property
    def level(self) -> int:
        return {
            Verbosity.QUIET: logging.WARNING,
            Verbosity.INFO: logging.INFO,
            Verbosity.DEBUG: logging.DEBUG,
        }[self]


class _LevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.levelname_lower = record.levelname.lower()
        return super().format(record)


def configure_logging(verbosity: Verbosity = Verbosity.QUIET, stream: Optional[IO[str]] = None) -> logging.Logger:
    """Return the run's logger, writing only to ``stream`` at ``verbosity``."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(_LevelFormatter("level=%(levelname_lower)s %(name)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(verbosity.level)
    logger.propagate = False
    return logger


__all__ = ["Verbosity", "configure_logging", "LOGGER_NAME"]
