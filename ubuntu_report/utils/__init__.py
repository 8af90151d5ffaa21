"""Utility helpers."""

from .fileio import atomic_write_text
from .logging import Verbosity, configure_logging

__all__ = ["Verbosity", "atomic_write_text", "configure_logging"]
