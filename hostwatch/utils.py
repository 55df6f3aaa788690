import errno
import os
from pathlib import Path
from typing import Dict, Iterator, List, Tuple

class C:
    RESET = '\033[0m'
    RED = '\033[31m'
    YELLOW = '\033[33m'
    GREEN = '\033[32m'
    CYAN = '\033[36m'
    GRAY = '\033[90m'

SOCKET_LINK_PREFIX = "socket:["

def readlink(path: Path) -> str:
    try:
        return os.readlink(path)
    except OSError:
        return ""

def listdir(path: Path) -> List[str]:
    try:
        return os.listdir(path)
    except OSError:
        return []

def read_line(path: Path, limit: int = 4096) -> str:
    """First line of a small /proc file (comm, stat, uptime); "" if gone."""
    try:
        with open(path, "r", errors="ignore") as f:
            return f.readline(limit).rstrip("\n")
    except OSError:
        return ""

def read_fields(path: Path, sep: str = ":", limit_lines: int = 200) -> Dict[str, str]:
    """Parse a ``Key:<tab>value`` file such as /proc/<pid>/status."""
    fields: Dict[str, str] = {}
    try:
        with open(path, "r", errors="ignore") as f:
            for i, line in enumerate(f):
                if i >= limit_lines:
                    break
                key, found, value = line.partition(sep)
                if found:
                    fields[key.strip()] = value.strip()
    except OSError:
        return {}
    return fields

def read_table(path: Path) -> List[str]:
    """
    Body lines of a header-prefixed kernel table (/proc/net/tcp and friends).

    Unlike the helpers above this raises OSError, so callers can tell an
    unreadable table from an empty one. A file without even a header line
    raises ENODATA.
    """
    with open(path, "r", errors="ignore") as f:
        if not f.readline():
            raise OSError(errno.ENODATA, "no header line", str(path))
        return [line.rstrip("\n") for line in f]

def socket_inode(link: str) -> int:
    """Return the inode named by a ``socket:[N]`` descriptor target, or 0."""
    if not (link.startswith(SOCKET_LINK_PREFIX) and link.endswith("]")):
        return 0
    inode = link[len(SOCKET_LINK_PREFIX):-1]
    return int(inode) if inode.isdigit() else 0

def fd_targets(fd_dir: Path) -> Iterator[Tuple[str, str]]:
    """Yield (fd, target) for every descriptor that still resolves."""
    for fd in listdir(fd_dir):
        target = readlink(fd_dir / fd)
        if target:
            yield fd, target
