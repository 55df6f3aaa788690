from __future__ import annotations
from typing import Any, Dict
from pathlib import Path
import copy
import sys

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "configs": [
        "/etc/hosts",
        "/etc/passwd",
        "/etc/ssh/sshd_config",
        "/etc/fstab",
        "/etc/resolv.conf",
    ],
    "proc_root": "/proc",
    "interval": 60,
    "network": {
        "max_listeners": 64,
        "max_connections": 128,
        "extra_common_ports": [],
        "decode_ipv6": True,
    },
    "thresholds": {
        "high_fd": 100,
        "high_fd_processes": 5,
        "long_running_days": 7,
        "unusual_ports_critical": 3,
    },
    "report": {
        "max_listeners": 10,
    },
    "api": {
        "secret_key": "hostwatch-secret-key-change-in-production",
        "require_auth": True,
        "users": {},
    },
}

# sections merged one level deep instead of replaced
NESTED_SECTIONS = ("network", "thresholds", "report", "api")

MIN_INTERVAL = 1
MAX_INTERVAL = 86400

def clamp_interval(value: Any) -> int:
    try:
        interval = int(value)
    except (TypeError, ValueError):
        interval = DEFAULT_CONFIG["interval"]
    return max(MIN_INTERVAL, min(MAX_INTERVAL, interval))

def load_config(path: str | None) -> Dict[str, Any]:
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if not path:
        return cfg
    try:
        data = yaml.safe_load(Path(path).read_text()) or {}
        if not isinstance(data, dict):
            raise ValueError("top level must be a mapping")
        for key, value in data.items():
            if key in NESTED_SECTIONS:
                if isinstance(value, dict):
                    cfg[key].update(value)
                elif value is not None:
                    print(f"Warning: ignoring {key!r} in {path}: expected a mapping", file=sys.stderr)
            else:
                cfg[key] = value
        print(f"Loaded config from {path}", file=sys.stderr)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Warning: Could not load config {path}: {e}", file=sys.stderr)
    cfg["interval"] = clamp_interval(cfg.get("interval"))
    return cfg
