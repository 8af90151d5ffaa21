"""Installer and release-upgrade telemetry left on disk by the distribution tools."""
from __future__ import annotations

import json
import logging
from typing import Any

from .host import Host, ProbeUnavailable

INSTALL_TELEMETRY = "var/log/installer/telemetry"
UPGRADE_TELEMETRY = "var/log/upgrade/telemetry"


def _telemetry_file(host: Host, relative: str) -> Any:
    path = host.path(relative)
    text = host.read(relative)
    if text is None:
        raise ProbeUnavailable(f"no telemetry data found at {path}", logging.INFO)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProbeUnavailable(f"invalid telemetry data in {path}: {exc}", logging.INFO) from exc


def collect_install(host: Host) -> Any:
    return _telemetry_file(host, INSTALL_TELEMETRY)


def collect_upgrade(host: Host) -> Any:
    return _telemetry_file(host, UPGRADE_TELEMETRY)


__all__ = ["INSTALL_TELEMETRY", "UPGRADE_TELEMETRY", "collect_install", "collect_upgrade"]
