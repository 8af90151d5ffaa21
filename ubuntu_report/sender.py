"""One-way delivery of a settled record to the collection endpoint."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from . import __version__
from .report import OutcomeRecord
from .sysinfo import OsIdentity

LOGGER = logging.getLogger("ubuntu_report.sender")

DEFAULT_TIMEOUT_SECONDS = 10


@dataclass(frozen=True)
class DeliveryResult:
    ok: bool
    status_code: Optional[int] = None
    error: str = ""
    skipped: bool = False


def endpoint_url(base_url: str, identity: OsIdentity) -> str:
    return f"{base_url.rstrip('/')}/{identity.distribution}/desktop/{identity.version}"


def send_report(
    url: str,
    record: OutcomeRecord,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    logger: Optional[logging.Logger] = None,
) -> DeliveryResult:
    """POST ``record`` once. Never retries; failures come back as results."""
    logger = logger or LOGGER
    body = record.to_json().encode("utf-8")
    headers = {
        "Content-Type": "application/json",
        "User-Agent": f"ubuntu-report/{__version__}",
    }
    logger.debug("sending %d bytes to %s", len(body), url)
    try:
        response = requests.post(url, data=body, headers=headers, timeout=timeout, allow_redirects=False)
    except requests.RequestException as exc:
        return DeliveryResult(ok=False, error=str(exc))
    if not 200 <= response.status_code < 300:
        return DeliveryResult(
            ok=False,
            status_code=response.status_code,
            error=f"{url}: {response.status_code} {response.text.strip()[:200]}".strip(),
        )
    logger.debug("report accepted by %s: HTTP %d", url, response.status_code)
    return DeliveryResult(ok=True, status_code=response.status_code)


__all__ = ["DeliveryResult", "endpoint_url", "send_report"]
