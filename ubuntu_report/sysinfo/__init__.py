"""Host fact collection.

Each fact source is a plain function taking a :class:`Host` and returning the
blob for one report category. A source with nothing to say raises
:class:`ProbeUnavailable`; that category is then simply absent from the report.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional

from .desktop import (
    collect_autologin,
    collect_language,
    collect_livepatch,
    collect_screens,
    collect_session,
    collect_timezone,
)
from .hardware import (
    collect_arch,
    collect_bios,
    collect_cpu,
    collect_disks,
    collect_gpu,
    collect_oem,
    collect_partitions,
    collect_ram,
)
from .host import Host, ProbeUnavailable, run_command
from .installer import collect_install, collect_upgrade
from .osrelease import OsIdentity, collect_os, os_identity

LOGGER = logging.getLogger("ubuntu_report.sysinfo")

FactSource = Callable[[Host], Any]

# report category order
FACT_SOURCES: Dict[str, FactSource] = {
    "OS": collect_os,
    "OEM": collect_oem,
    "BIOS": collect_bios,
    "CPU": collect_cpu,
    "Arch": collect_arch,
    "GPU": collect_gpu,
    "RAM": collect_ram,
    "Disks": collect_disks,
    "Partitions": collect_partitions,
    "Screens": collect_screens,
    "Autologin": collect_autologin,
    "LivePatch": collect_livepatch,
    "Session": collect_session,
    "Language": collect_language,
    "Timezone": collect_timezone,
    "Install": collect_install,
    "Upgrade": collect_upgrade,
}


def _probe(name: str, source: FactSource, host: Host, logger: logging.Logger) -> Optional[Any]:
    try:
        blob = source(host)
    except ProbeUnavailable as exc:
        logger.log(exc.level, "%s", exc)
        return None
    except Exception as exc:
        logger.debug("%s probe failed: %s", name, exc)
        return None
    logger.debug("collected %s: %r", name, blob)
    return blob


def collect_facts(
    host: Optional[Host] = None,
    logger: Optional[logging.Logger] = None,
    sources: Optional[Dict[str, FactSource]] = None,
    max_workers: int = 4,
) -> Dict[str, Any]:
    """Run every fact source and return the blobs that were produced, in table order."""
    host = host or Host()
    logger = logger or LOGGER
    table = FACT_SOURCES if sources is None else sources
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        futures = {name: pool.submit(_probe, name, source, host, logger) for name, source in table.items()}
        results = {name: future.result() for name, future in futures.items()}
    return {name: blob for name, blob in results.items() if blob is not None}


__all__ = [
    "FACT_SOURCES",
    "FactSource",
    "Host",
    "OsIdentity",
    "ProbeUnavailable",
    "collect_facts",
    "os_identity",
    "run_command",
]
