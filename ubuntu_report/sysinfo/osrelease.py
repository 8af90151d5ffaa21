"""OS identity from os-release, the source of the report cache key."""
from __future__ import annotations

import platform
import shlex
from dataclasses import dataclass
from typing import Dict, Optional

from .host import Host, ProbeUnavailable

OS_RELEASE_PATHS = ("etc/os-release", "usr/lib/os-release")


@dataclass(frozen=True)
class OsIdentity:
    distribution: str
    version: str

    @property
    def cache_key(self) -> str:
        return f"{self.distribution}.{self.version}"


def parse_os_release(text: str) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw = line.partition("=")
        try:
            parts = shlex.split(raw)
        except ValueError:
            parts = [raw.strip("\"'")]
        values[key.strip()] = parts[0] if parts else ""
    return values


def _read_os_release(host: Host) -> Optional[Dict[str, str]]:
    for candidate in OS_RELEASE_PATHS:
        text = host.read(candidate)
        if text is not None:
            return parse_os_release(text)
    return None


def os_identity(host: Host) -> OsIdentity:
    """Distribution id and version, falling back to the kernel identity."""
    values = _read_os_release(host) or {}
    distribution = values.get("ID") or platform.system().lower() or "unknown"
    version = values.get("VERSION_ID") or "unknown"
    return OsIdentity(distribution=distribution, version=version)


def collect_os(host: Host) -> Dict[str, str]:
    values = _read_os_release(host)
    if values is None:
        raise ProbeUnavailable("no os-release file found")
    return {
        "Distribution": values.get("ID", ""),
        "Version": values.get("VERSION_ID", ""),
    }


__all__ = ["OsIdentity", "collect_os", "os_identity", "parse_os_release"]
