import copy
import os
from pathlib import Path
from typing import Iterable

import pytest

from hostwatch.config import DEFAULT_CONFIG

NET_HEADER = ("  sl  local_address rem_address   st tx_queue rx_queue tr tm->when "
              "retrnsmt   uid  timeout inode\n")

def socket_line(sl: int, laddr: str, lport: int, raddr: str, rport: int, state: int, inode: int) -> str:
    return (f"  {sl:>3}: {laddr}:{lport:04X} {raddr}:{rport:04X} {state:02X} "
            f"00000000:00000000 00:00000000 00000000  1000        0 {inode} 1 0000000000000000 100 0 0 10 0\n")


class FakeProc:
    """A throwaway /proc tree: socket tables under net/ and per-pid dirs."""

    def __init__(self, root: Path, uptime: float = 1_000_000.0):
        self.root = root
        (root / "net").mkdir(parents=True)
        (root / "uptime").write_text(f"{uptime:.2f} 0.00\n")
        self._lines = {}

    def add_socket(self, table: str, laddr: str, lport: int, raddr: str | None = None,
                   rport: int = 0, state: int = 0x0A, inode: int = 0):
        if raddr is None:
            raddr = "0" * (32 if table.endswith("6") else 8)
        lines = self._lines.setdefault(table, [])
        lines.append(socket_line(len(lines), laddr, lport, raddr, rport, state, inode))
        self.write_table(table, lines)

    def write_table(self, table: str, lines: Iterable[str], header: bool = True):
        text = (NET_HEADER if header else "") + "".join(lines)
        (self.root / "net" / table).write_text(text)

    def add_all_tables(self):
        for table in ("tcp", "tcp6", "udp", "udp6"):
            if not (self.root / "net" / table).exists():
                self.write_table(table, [])

    def add_process(self, pid: int, name: str, inodes: Iterable[int] = (), state: str = "S",
                    ppid: int = 1, extra_fds: int = 0, start_ticks: int = 1, comm: bool = True):
        pdir = self.root / str(pid)
        fd_dir = pdir / "fd"
        fd_dir.mkdir(parents=True)
        if comm:
            (pdir / "comm").write_text(name + "\n")
        (pdir / "status").write_text(
            f"Name:\t{name}\n"
            f"State:\t{state} (sleeping)\n"
            f"PPid:\t{ppid}\n"
            f"Uid:\t1000\t1000\t1000\t1000\n"
            f"VmRSS:\t    2048 kB\n"
            f"Threads:\t2\n"
        )
        fields = [state, str(ppid)] + ["0"] * 17 + [str(start_ticks)] + ["0"] * 5
        (pdir / "stat").write_text(f"{pid} ({name}) " + " ".join(fields) + "\n")
        for fd in range(3):
            os.symlink("/dev/null", fd_dir / str(fd))
        fd = 3
        for inode in inodes:
            os.symlink(f"socket:[{inode}]", fd_dir / str(fd))
            fd += 1
        for _ in range(extra_fds):
            os.symlink("/dev/null", fd_dir / str(fd))
            fd += 1
        return pdir


@pytest.fixture
def fake_proc(tmp_path):
    return FakeProc(tmp_path / "proc")

@pytest.fixture
def cfg(fake_proc):
    c = copy.deepcopy(DEFAULT_CONFIG)
    c["proc_root"] = str(fake_proc.root)
    c["configs"] = []
    return c
