import os
from pathlib import Path
from typing import Dict, List

from .utils import fd_targets, listdir, read_fields, read_line, socket_inode
from .models import ProcessInfo, KERNEL_OWNER, UNKNOWN_NAME

DEFAULT_PROC_ROOT = Path("/proc")

def get_proc_ids(proc_root: Path = DEFAULT_PROC_ROOT) -> List[int]:
    return [int(p) for p in listdir(Path(proc_root)) if p.isdigit()]

def build_inode_index(proc_root: Path = DEFAULT_PROC_ROOT) -> Dict[int, int]:
    """
    Map every socket inode held open by a live process to its owner pid.

    One pass over all descriptors of all processes. When several processes
    share a socket (fork, SCM_RIGHTS), the first pid in directory order wins.
    Processes we cannot inspect or that exit mid-scan contribute nothing.
    """
    proc_root = Path(proc_root)
    index: Dict[int, int] = {}
    for pid in get_proc_ids(proc_root):
        for _, target in fd_targets(proc_root / str(pid) / "fd"):
            inode = socket_inode(target)
            if inode:
                index.setdefault(inode, pid)
    return index

def get_process_name(pid: int, proc_root: Path = DEFAULT_PROC_ROOT) -> str:
    if pid <= 0:
        return KERNEL_OWNER
    name = read_line(Path(proc_root) / str(pid) / "comm", 256).strip()
    return name or UNKNOWN_NAME

def _clock_ticks() -> int:
    try:
        return os.sysconf(os.sysconf_names["SC_CLK_TCK"])
    except (ValueError, KeyError, OSError):
        return 100

def read_uptime(proc_root: Path = DEFAULT_PROC_ROOT) -> float:
    raw = read_line(Path(proc_root) / "uptime", 256).split()
    try:
        return float(raw[0])
    except (IndexError, ValueError):
        return 0.0

def _start_ticks(pid: int, proc_root: Path) -> int:
    stat = read_line(Path(proc_root) / str(pid) / "stat")
    # comm may contain spaces and parens; fields resume after the last ')'
    _, _, rest = stat.rpartition(")")
    fields = rest.split()
    try:
        return int(fields[19])
    except (IndexError, ValueError):
        return 0

def _kb(value: str) -> int:
    try:
        return int(value.split()[0])
    except (IndexError, ValueError):
        return 0

def analyze_process(pid: int, proc_root: Path, uptime: float, clk_tck: int) -> ProcessInfo | None:
    pdir = Path(proc_root) / str(pid)
    status = read_fields(pdir / "status")
    if not status:
        return None

    try:
        ppid = int(status.get("PPid", 0))
    except ValueError:
        ppid = 0
    try:
        threads = int(status.get("Threads", 0))
    except ValueError:
        threads = 0

    info = ProcessInfo(
        pid=pid,
        name=status.get("Name", ""),
        ppid=ppid,
        state=(status.get("State") or "?")[0],
        uid=status.get("Uid", "").split()[0] if status.get("Uid") else "",
        rss_kb=_kb(status.get("VmRSS", "")),
        threads=threads,
        fd_count=len(listdir(pdir / "fd")),
    )
    start = _start_ticks(pid, proc_root)
    if start and uptime:
        info.age_seconds = max(0.0, uptime - start / clk_tck)
    return info

def collect_processes(proc_root: Path = DEFAULT_PROC_ROOT) -> List[ProcessInfo]:
    uptime = read_uptime(proc_root)
    clk_tck = _clock_ticks()
    procs: List[ProcessInfo] = []
    for pid in sorted(get_proc_ids(proc_root)):
        info = analyze_process(pid, proc_root, uptime, clk_tck)
        if info:
            procs.append(info)
    return procs
