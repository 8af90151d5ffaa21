from __future__ import annotations

import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from ubuntu_report.sysinfo import Host, OsIdentity

LSPCI = "00:02.0 0300: 8086:0126 (rev 09)\n00:1f.3 0403: 8086:9dc8 (rev 30)\n"
XRANDR = (
    "Screen 0: minimum 8 x 8, current 1920 x 1080, maximum 32767 x 32767\n"
    "eDP-1 connected primary 1920x1080+0+0 (normal left inverted right x axis y axis) 309mm x 174mm\n"
    "   1920x1080     60.02*+  59.93\n"
    "   1680x1050     59.95\n"
    "HDMI-1 disconnected (normal left inverted right x axis y axis)\n"
)
LSCPU = json.dumps(
    {
        "lscpu": [
            {"field": "Architecture:", "data": "x86_64"},
            {"field": "CPU op-mode(s):", "data": "32-bit, 64-bit"},
            {"field": "CPU(s):", "data": "4"},
            {"field": "Vendor ID:", "data": "GenuineIntel"},
            {"field": "Model name:", "data": "Intel(R) Core(TM) i5-3320M CPU @ 2.60GHz"},
        ]
    }
)
DF = (
    "Filesystem     1-blocks        Used   Available Capacity Mounted on\n"
    "/dev/sda1  250000000000 12000000000 238000000000       5% /\n"
)
COMMAND_OUTPUT = {"lspci": LSPCI, "xrandr": XRANDR, "lscpu": LSCPU, "df": DF}
HOST_ENV = {
    "DISPLAY": ":0",
    "XDG_CURRENT_DESKTOP": "ubuntu:GNOME",
    "XDG_SESSION_DESKTOP": "ubuntu",
    "XDG_SESSION_TYPE": "x11",
    "LANG": "fr_FR.UTF-8",
}


def _write(root: Path, relative: str, content: str) -> None:
    target = root / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")


def make_host_tree(root: Path) -> Path:
    _write(root, "etc/os-release", 'NAME="Ubuntu"\nID=ubuntu\nVERSION_ID="18.04"\n')
    _write(root, "sys/class/dmi/id/sys_vendor", "LENOVO\n")
    _write(root, "sys/class/dmi/id/product_name", "2347GH8\n")
    _write(root, "sys/class/dmi/id/product_family", "ThinkPad T430\n")
    _write(root, "sys/class/dmi/id/bios_vendor", "LENOVO\n")
    _write(root, "sys/class/dmi/id/bios_version", "G1ET73WW (2.09 )\n")
    _write(root, "proc/meminfo", "MemTotal:        8048312 kB\nMemFree:         1000000 kB\n")
    _write(root, "sys/block/sda/size", "488397168\n")
    _write(root, "sys/block/loop0/size", "1024\n")
    _write(root, "etc/gdm3/custom.conf", "[daemon]\nAutomaticLoginEnable=True\nAutomaticLogin=bob\n")
    _write(root, "etc/timezone", "Europe/Paris\n")
    _write(root, "var/log/installer/telemetry", json.dumps({"Type": "GTK", "OEM": False}))
    return root


def fake_runner(outputs: Dict[str, Optional[str]]):
    calls: List[List[str]] = []

    def _run(cmd: List[str]) -> Optional[str]:
        calls.append(cmd)
        return outputs.get(cmd[0])

    _run.calls = calls  # type: ignore[attr-defined]
    return _run


@pytest.fixture()
def host_root(tmp_path: Path) -> Path:
    return make_host_tree(tmp_path / "root")


@pytest.fixture()
def fake_host(host_root: Path) -> Host:
    return Host(root=host_root, env=dict(HOST_ENV), run=fake_runner(COMMAND_OUTPUT), machine="x86_64")


@pytest.fixture()
def bare_host(tmp_path: Path) -> Host:
    root = tmp_path / "empty"
    root.mkdir()
    return Host(root=root, env={}, run=fake_runner({}), machine="")


@pytest.fixture()
def identity() -> OsIdentity:
    return OsIdentity(distribution="ubuntu", version="18.04")


class _Recorder(BaseHTTPRequestHandler):
    def do_POST(self) -> None:  # noqa: N802
        length = int(self.headers.get("Content-Length", 0))
        self.server.methods.append(self.command)  # type: ignore[attr-defined]
        self.server.hits.append((self.path, self.rfile.read(length)))  # type: ignore[attr-defined]
        if self.server.location:  # type: ignore[attr-defined]
            self.send_response(302)
            self.send_header("Location", self.server.location)  # type: ignore[attr-defined]
        else:
            self.send_response(self.server.status)  # type: ignore[attr-defined]
        self.send_header("Content-Length", "0")
        self.end_headers()

    def do_GET(self) -> None:  # noqa: N802
        self.server.methods.append(self.command)  # type: ignore[attr-defined]
        self.send_response(200)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, *args) -> None:
        pass


@pytest.fixture()
def metrics_server(monkeypatch):
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Recorder)
    server.hits = []  # type: ignore[attr-defined]
    server.status = 200  # type: ignore[attr-defined]
    server.location = None  # type: ignore[attr-defined]
    server.methods = []  # type: ignore[attr-defined]
    server.url = f"http://127.0.0.1:{server.server_address[1]}"  # type: ignore[attr-defined]
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()
