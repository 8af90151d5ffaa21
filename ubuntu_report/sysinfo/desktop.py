"""Desktop fact sources: screens, login, session and locale."""
from __future__ import annotations

import configparser
import logging
import os
import re
from typing import Dict, List, Optional

from .host import Host, ProbeUnavailable

GDM_CONFIG = "etc/gdm3/custom.conf"
LIVEPATCH_TOKEN = "var/snap/canonical-livepatch/common/machine-token"

_XRANDR_OUTPUT = re.compile(r"^\S+ connected(?: primary)?(?: \d+x\d+\+\d+\+\d+)?.*?(?:(?P<w>\d+)mm x (?P<h>\d+)mm)?$")
_XRANDR_MODE = re.compile(r"^\s+(?P<res>\d+x\d+)\S*\s+(?P<rates>.*)$")


def parse_xrandr(output: str) -> List[Dict[str, str]]:
    screens: List[Dict[str, str]] = []
    current: Optional[Dict[str, str]] = None
    for line in output.splitlines():
        if not line.startswith(" "):
            current = None
            match = _XRANDR_OUTPUT.match(line)
            if match:
                current = {}
                if match.group("w"):
                    current["Size"] = f"{match.group('w')}mmx{match.group('h')}mm"
            continue
        if current is None or "Resolution" in current:
            continue
        mode = _XRANDR_MODE.match(line)
        if not mode:
            continue
        for rate in mode.group("rates").split():
            if "*" in rate:
                current["Resolution"] = mode.group("res")
                current["Frequency"] = rate.rstrip("*+")
                screens.append(current)
                break
    return screens


def collect_screens(host: Host) -> List[Dict[str, str]]:
    if not host.env.get("DISPLAY") and not host.env.get("WAYLAND_DISPLAY"):
        raise ProbeUnavailable("couldn't get Screen info: no display available", logging.INFO)
    output = host.command("xrandr", "-q")
    if output is None:
        raise ProbeUnavailable("couldn't get Screen info: xrandr is not available", logging.INFO)
    screens = parse_xrandr(output)
    if not screens:
        raise ProbeUnavailable("couldn't get Screen info: no active screen", logging.INFO)
    return screens


def collect_autologin(host: Host) -> bool:
    text = host.read(GDM_CONFIG)
    if text is None:
        raise ProbeUnavailable(
            f"couldn't get autologin information: {host.path(GDM_CONFIG)} is not readable", logging.INFO
        )
    parser = configparser.ConfigParser(strict=False, interpolation=None)
    try:
        parser.read_string(text)
    except configparser.Error as exc:
        raise ProbeUnavailable(f"couldn't get autologin information: {exc}", logging.INFO) from exc
    value = parser.get("daemon", "AutomaticLoginEnable", fallback="false")
    return value.strip().lower() in ("true", "1", "yes")


def collect_livepatch(host: Host) -> bool:
    return host.path(LIVEPATCH_TOKEN).exists()


def collect_session(host: Host) -> Dict[str, str]:
    names = {
        "DE": "XDG_CURRENT_DESKTOP",
        "Name": "XDG_SESSION_DESKTOP",
        "Type": "XDG_SESSION_TYPE",
    }
    session = {key: host.env[var] for key, var in names.items() if host.env.get(var)}
    if not session:
        raise ProbeUnavailable("no desktop session detected")
    return session


def collect_language(host: Host) -> str:
    raw = host.env.get("LANGUAGE", "").split(":")[0] or host.env.get("LANG", "")
    language = raw.split(".")[0]
    if not language or language in ("C", "POSIX"):
        raise ProbeUnavailable("no user language set")
    return language


def collect_timezone(host: Host) -> str:
    text = host.read("etc/timezone")
    if text and text.strip():
        return text.strip()
    try:
        target = os.readlink(host.path("etc/localtime"))
    except OSError as exc:
        raise ProbeUnavailable(f"no timezone configured: {exc}") from exc
    _, marker, zone = target.partition("zoneinfo/")
    if not marker or not zone:
        raise ProbeUnavailable(f"unrecognised localtime link {target}")
    return zone


__all__ = [
    "collect_autologin",
    "collect_language",
    "collect_livepatch",
    "collect_screens",
    "collect_session",
    "collect_timezone",
    "parse_xrandr",
]
