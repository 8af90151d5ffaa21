"""Hardware fact sources: firmware identity, CPU, GPU, memory and storage."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Iterable, List

from .host import Host, ProbeUnavailable

ARCH_ALIASES = {"x86_64": "amd64", "aarch64": "arm64", "armv7l": "armhf", "i686": "i386"}

LSCPU_FIELDS = {
    "CPU op-mode(s)": "OpMode",
    "CPU(s)": "CPUs",
    "Thread(s) per core": "Threads",
    "Core(s) per socket": "Cores",
    "Socket(s)": "Sockets",
    "Vendor ID": "Vendor",
    "CPU family": "Family",
    "Model": "Model",
    "Stepping": "Stepping",
    "Model name": "Name",
    "Virtualization": "Virtualization",
    "Hypervisor vendor": "Hypervisor",
}

# virtual block devices that don't describe installed storage
VIRTUAL_DISK_PREFIXES = ("loop", "ram", "zram", "dm-", "sr", "md", "nbd")
_LSPCI_LINE = re.compile(r"^\S+\s+(?P<cls>[0-9a-fA-F]{4}):\s+(?P<vendor>[0-9a-fA-F]{4}):(?P<model>[0-9a-fA-F]{4})")


def _dmi(host: Host, names: Dict[str, str], what: str) -> Dict[str, str]:
    values = {}
    for key, name in names.items():
        raw = host.read("sys/class/dmi/id", name)
        if raw is not None and raw.strip():
            values[key] = raw.strip()
    if not values:
        raise ProbeUnavailable(f"no DMI {what} data available")
    return values


def collect_oem(host: Host) -> Dict[str, str]:
    return _dmi(host, {"Vendor": "sys_vendor", "Product": "product_name", "Family": "product_family"}, "OEM")


def collect_bios(host: Host) -> Dict[str, str]:
    return _dmi(host, {"Vendor": "bios_vendor", "Version": "bios_version"}, "BIOS")


def _walk_lscpu(entries: Iterable[Dict[str, Any]]) -> Iterable[Dict[str, Any]]:
    for entry in entries:
        yield entry
        yield from _walk_lscpu(entry.get("children", []) or [])


def parse_lscpu(output: str) -> Dict[str, str]:
    try:
        entries = json.loads(output).get("lscpu", [])
    except (json.JSONDecodeError, AttributeError):
        return {}
    cpu: Dict[str, str] = {}
    for entry in _walk_lscpu(entries):
        name = str(entry.get("field", "")).rstrip(":").strip()
        key = LSCPU_FIELDS.get(name)
        if key and key not in cpu and entry.get("data") is not None:
            cpu[key] = str(entry["data"]).strip()
    return cpu


def collect_cpu(host: Host) -> Dict[str, str]:
    output = host.command("lscpu", "-J")
    if output is None:
        raise ProbeUnavailable("lscpu is not available")
    cpu = parse_lscpu(output)
    if not cpu:
        raise ProbeUnavailable("lscpu returned no usable data")
    return cpu


def collect_arch(host: Host) -> str:
    if not host.machine:
        raise ProbeUnavailable("unknown machine architecture")
    return ARCH_ALIASES.get(host.machine, host.machine)


def parse_lspci(output: str) -> List[Dict[str, str]]:
    gpus = []
    for line in output.splitlines():
        match = _LSPCI_LINE.match(line.strip())
        if match and match.group("cls").startswith("03"):
            gpus.append({"Vendor": match.group("vendor").lower(), "Model": match.group("model").lower()})
    return gpus


def collect_gpu(host: Host) -> List[Dict[str, str]]:
    output = host.command("lspci", "-n")
    if output is None:
        raise ProbeUnavailable("couldn't get GPU info: lspci is not available", logging.INFO)
    gpus = parse_lspci(output)
    if not gpus:
        raise ProbeUnavailable("couldn't get GPU info: no display controller found", logging.INFO)
    return gpus


def collect_ram(host: Host) -> float:
    meminfo = host.read("proc/meminfo")
    if meminfo is None:
        raise ProbeUnavailable("/proc/meminfo is not readable")
    for line in meminfo.splitlines():
        if line.startswith("MemTotal:"):
            fields = line.split()
            try:
                return round(int(fields[1]) / (1024 * 1024), 1)
            except (IndexError, ValueError):
                break
    raise ProbeUnavailable("no MemTotal entry in /proc/meminfo")


def collect_disks(host: Host) -> List[float]:
    block = host.path("sys/block")
    if not block.is_dir():
        raise ProbeUnavailable("no block devices listed")
    disks = []
    for device in sorted(block.iterdir(), key=lambda p: p.name):
        if device.name.startswith(VIRTUAL_DISK_PREFIXES):
            continue
        raw = host.read("sys/block", device.name, "size")
        if raw is None or not raw.strip().isdigit():
            continue
        sectors = int(raw.strip())
        if sectors:
            disks.append(round(sectors * 512 / 1e9, 1))
    if not disks:
        raise ProbeUnavailable("no physical disks found")
    return disks


def parse_df(output: str) -> List[float]:
    sizes = []
    for line in output.splitlines()[1:]:
        fields = line.split()
        if len(fields) < 2 or not fields[1].isdigit():
            continue
        sizes.append(round(int(fields[1]) / 1e9, 1))
    return sizes


def collect_partitions(host: Host) -> List[float]:
    output = host.command(
        "df", "-P", "-l", "-B1",
        "-x", "tmpfs", "-x", "devtmpfs", "-x", "squashfs", "-x", "overlay",
    )
    if output is None:
        raise ProbeUnavailable("df is not available")
    sizes = parse_df(output)
    if not sizes:
        raise ProbeUnavailable("no local partitions found")
    return sizes


__all__ = [
    "collect_arch",
    "collect_bios",
    "collect_cpu",
    "collect_disks",
    "collect_gpu",
    "collect_oem",
    "collect_partitions",
    "collect_ram",
    "parse_df",
    "parse_lscpu",
    "parse_lspci",
]
