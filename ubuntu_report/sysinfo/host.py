"""Access to the machine being described, rooted so tests can fake it."""
from __future__ import annotations

import logging
import os
import platform
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional

LOGGER = logging.getLogger("ubuntu_report.sysinfo")

CommandRunner = Callable[[List[str]], Optional[str]]


class ProbeUnavailable(Exception):
    """A fact source has nothing to contribute on this host."""

    def __init__(self, message: str, level: int = logging.DEBUG) -> None:
        super().__init__(message)
        self.level = level


def run_command(cmd: List[str]) -> Optional[str]:
    """Return stdout of ``cmd``, or None when it is missing or fails."""
    if shutil.which(cmd[0]) is None:
        return None
    try:
        process = subprocess.run(cmd, capture_output=True, text=True, check=False, timeout=10)
    except (OSError, subprocess.TimeoutExpired) as exc:
        LOGGER.debug("%s failed: %s", cmd[0], exc)
        return None
    if process.returncode != 0:
        LOGGER.debug("%s exited with %d: %s", cmd[0], process.returncode, process.stderr.strip())
        return None
    return process.stdout


@dataclass
class Host:
    root: Path = Path("/")
    env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    run: CommandRunner = run_command
    machine: str = field(default_factory=platform.machine)

    def path(self, *parts: str) -> Path:
        return self.root.joinpath(*(part.lstrip("/") for part in parts))

    def read(self, *parts: str) -> Optional[str]:
        target = self.path(*parts)
        try:
            return target.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return None

    def command(self, *cmd: str) -> Optional[str]:
        return self.run(list(cmd))


__all__ = ["CommandRunner", "Host", "ProbeUnavailable", "run_command"]
