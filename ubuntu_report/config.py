#!/usr/bin/env python3
"""Configuration loader for ubuntu-report."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "url": "https://metrics.ubuntu.com",
    "timeout_seconds": 10,
    # opt-out markers still notify the server unless this is turned off
    "send_opt_out": True,
    "auto_confirm": False,
    "cache_dir": None,
    "root": "/",
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str | None = None) -> Dict[str, Any]:
    """Load configuration from a YAML file or fall back to defaults."""
    cfg = dict(DEFAULT_CONFIG)
    config_path = path or os.getenv("UBUNTU_REPORT_CONFIG")
    if config_path:
        file = Path(config_path)
        if file.exists():
            data = yaml.safe_load(file.read_text(encoding="utf-8")) or {}
            if isinstance(data, dict):
                cfg = _deep_merge(cfg, data)
    url = os.getenv("UBUNTU_REPORT_URL")
    if url:
        cfg["url"] = url
    return cfg


__all__ = ["DEFAULT_CONFIG", "load_config"]
