from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Iterable

import psutil

from . import __version__
from .filecheck import check_config_files
from .models import Fingerprint, NetworkInfo, now_iso
from .network import NetworkProbe
from .proc import collect_processes
from .system import collect_system_info

def capture_fingerprint(
    cfg: Dict[str, Any],
    configs: Iterable[str] | None = None,
    network: bool = False,
) -> Fingerprint:
    """
    Run one full probe cycle.

    Sub-probe failures are counted in ``probe_errors`` and never abort the
    capture; the returned fingerprint may be partial.
    """
    proc_root = Path(cfg.get("proc_root", "/proc"))
    fp = Fingerprint(ts=now_iso(), version=__version__)

    try:
        fp.system = collect_system_info()
    except (psutil.Error, OSError):
        fp.probe_errors += 1

    fp.processes = collect_processes(proc_root)
    if not fp.processes:
        fp.probe_errors += 1

    paths = list(configs) if configs else list(cfg.get("configs", []))
    fp.configs = check_config_files(paths)
    fp.probe_errors += sum(1 for c in fp.configs if not c.exists)

    if network:
        fp.network = NetworkProbe.from_config(cfg).probe()
        fp.network_probed = True
        fp.probe_errors += fp.network.probe_errors
    else:
        fp.network = NetworkInfo()
    return fp
