"""Durable record of the last reporting decision, one per cache key."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from .report import OutcomeRecord, ReportError, record_from_payload
from .utils.fileio import atomic_write_text

LOGGER = logging.getLogger("ubuntu_report.store")

PRODUCT_DIR = "ubuntu-report"


class StoreWriteError(ReportError):
    """The decision could not be persisted."""


def default_cache_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    """``$XDG_CACHE_HOME/ubuntu-report``, or ``~/.cache/ubuntu-report``."""
    env = os.environ if env is None else env
    base = env.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return Path(base) / PRODUCT_DIR


class ReportStore:
    """Key to record mapping holding only the latest outcome."""

    def load(self, cache_key: str) -> Optional[OutcomeRecord]:
        raise NotImplementedError

    def save(self, cache_key: str, record: OutcomeRecord) -> None:
        raise NotImplementedError


class MemoryReportStore(ReportStore):
    def __init__(self) -> None:
        self.records: Dict[str, str] = {}

    def load(self, cache_key: str) -> Optional[OutcomeRecord]:
        raw = self.records.get(cache_key)
        return None if raw is None else _decode(raw, cache_key)

    def save(self, cache_key: str, record: OutcomeRecord) -> None:
        self.records[cache_key] = record.to_json()


class FileReportStore(ReportStore):
    def __init__(self, directory: Optional[Path] = None, logger: Optional[logging.Logger] = None) -> None:
        self.directory = Path(directory) if directory else default_cache_dir()
        self.logger = logger or LOGGER

    def path_for(self, cache_key: str) -> Path:
        name = cache_key.replace(os.sep, "_")
        if not name or name.startswith("."):
            raise StoreWriteError(f"invalid cache key {cache_key!r}")
        return self.directory / name

    def load(self, cache_key: str) -> Optional[OutcomeRecord]:
        path = self.path_for(cache_key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            self.logger.warning("couldn't read previous report %s: %s", path, exc)
            return None
        return _decode(raw, str(path), self.logger)

    def save(self, cache_key: str, record: OutcomeRecord) -> None:
        path = self.path_for(cache_key)
        try:
            atomic_write_text(path, record.to_json())
        except OSError as exc:
            raise StoreWriteError(f"couldn't save report to {path}: {exc}") from exc
        self.logger.debug("saved report to %s", path)


def _decode(raw: Union[str, bytes], origin: str, logger: logging.Logger = LOGGER) -> Optional[OutcomeRecord]:
    try:
        record = record_from_payload(json.loads(raw))
    except (json.JSONDecodeError, ValueError) as exc:
        logger.warning("ignoring malformed report %s: %s", origin, exc)
        return None
    if record is None:
        logger.warning("ignoring unrecognised report %s", origin)
    return record


__all__ = [
    "FileReportStore",
    "MemoryReportStore",
    "PRODUCT_DIR",
    "ReportStore",
    "StoreWriteError",
    "default_cache_dir",
]
