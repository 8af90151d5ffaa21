"""Report documents and the builder that assembles them from collected facts."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

REPORT_SCHEMA_VERSION = "1"
OPT_OUT_KEY = "OptOut"


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


class ReportError(Exception):
    """Raised when a run has to stop without a settled decision."""


@dataclass(frozen=True)
class Report:
    """Snapshot of host facts, keyed by category, with ``Version`` first."""

    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.data.get("Version"):
            raise ValueError("report is missing its Version field")
        object.__setattr__(self, "data", _freeze(self.data))

    @property
    def version(self) -> str:
        return str(self.data["Version"])

    def to_payload(self) -> Dict[str, Any]:
        return _thaw(self.data)

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_payload(), indent=indent)


@dataclass(frozen=True)
class OptOutMarker:
    """The fixed record stored and sent when the user declines reporting."""

    def to_payload(self) -> Dict[str, Any]:
        return {OPT_OUT_KEY: True}

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_payload(), indent=indent)


OutcomeRecord = Union[Report, OptOutMarker]


def build_report(facts: Mapping[str, Any]) -> Report:
    """Merge fact blobs into a report stamped with the schema version.

    Categories whose probe produced nothing are left out.
    """
    data: Dict[str, Any] = {"Version": REPORT_SCHEMA_VERSION}
    for category, blob in facts.items():
        if category == "Version" or blob is None:
            continue
        data[category] = blob
    return Report(data)


def record_from_payload(payload: Any) -> Optional[OutcomeRecord]:
    """Recognise a decoded JSON document as an outcome record by its shape."""
    if not isinstance(payload, dict):
        return None
    if payload == {OPT_OUT_KEY: True}:
        return OptOutMarker()
    if payload.get("Version") and OPT_OUT_KEY not in payload:
        return Report(payload)
    return None


__all__ = [
    "REPORT_SCHEMA_VERSION",
    "OptOutMarker",
    "OutcomeRecord",
    "Report",
    "ReportError",
    "build_report",
    "record_from_payload",
]
