from dataclasses import dataclass, field
from typing import Dict, List, Tuple
import datetime as dt

KERNEL_OWNER = "[kernel]"
UNKNOWN_NAME = "[unknown]"

@dataclass
class SocketRecord:
    protocol: str          # tcp, tcp6, udp, udp6
    local_addr: str
    local_port: int
    remote_addr: str
    remote_port: int
    state: int
    inode: int

@dataclass
class ListenerEntry:
    protocol: str
    local_addr: str
    local_port: int
    state: str
    pid: int = 0
    process_name: str = KERNEL_OWNER
    unusual: bool = False
    service: str = ""

@dataclass
class ConnectionEntry:
    protocol: str
    local_addr: str
    local_port: int
    remote_addr: str
    remote_port: int
    state: str
    pid: int = 0
    process_name: str = KERNEL_OWNER

@dataclass
class NetworkInfo:
    max_listeners: int = 64
    max_connections: int = 128
    listeners: List[ListenerEntry] = field(default_factory=list)
    connections: List[ConnectionEntry] = field(default_factory=list)

    # totals count every observed entry, stored or not
    total_listening: int = 0
    total_established: int = 0
    unusual_port_count: int = 0
    listeners_truncated: bool = False
    connections_truncated: bool = False

    probe_errors: int = 0
    errors: List[str] = field(default_factory=list)

    def add_listener(self, entry: ListenerEntry, unusual: bool) -> bool:
        self.total_listening += 1
        if unusual:
            self.unusual_port_count += 1
        if len(self.listeners) >= self.max_listeners:
            self.listeners_truncated = True
            return False
        self.listeners.append(entry)
        return True

    def add_connection(self, entry: ConnectionEntry) -> bool:
        self.total_established += 1
        if len(self.connections) >= self.max_connections:
            self.connections_truncated = True
            return False
        self.connections.append(entry)
        return True

@dataclass
class SystemInfo:
    hostname: str = ""
    kernel: str = ""
    uptime_seconds: float = 0.0
    load_avg: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    total_ram: int = 0
    free_ram: int = 0
    available_ram: int = 0

    @property
    def memory_used_pct(self) -> float:
        if not self.total_ram:
            return 0.0
        return 100.0 * (1.0 - self.available_ram / self.total_ram)

@dataclass
class ProcessInfo:
    pid: int
    name: str = ""
    ppid: int = 0
    state: str = "?"
    uid: str = ""
    rss_kb: int = 0
    threads: int = 0
    fd_count: int = 0
    age_seconds: float = 0.0

@dataclass
class ConfigFileInfo:
    path: str
    exists: bool = False
    mode: str = ""
    uid: int = -1
    gid: int = -1
    size: int = 0
    mtime: float = 0.0
    issues: List[str] = field(default_factory=list)

@dataclass
class Fingerprint:
    ts: str
    version: str
    system: SystemInfo = field(default_factory=SystemInfo)
    processes: List[ProcessInfo] = field(default_factory=list)
    configs: List[ConfigFileInfo] = field(default_factory=list)
    network: NetworkInfo = field(default_factory=NetworkInfo)
    network_probed: bool = False
    probe_errors: int = 0

    @property
    def process_count(self) -> int:
        return len(self.processes)

@dataclass
class Finding:
    score: int
    reason: str

@dataclass
class QuickAnalysis:
    zombie_process_count: int = 0
    high_fd_process_count: int = 0
    long_running_process_count: int = 0
    config_permission_issues: int = 0
    unusual_listeners: int = 0
    findings: List[Finding] = field(default_factory=list)
    exit_code: int = 0

    def as_dict(self) -> Dict:
        return {
            "zombie_process_count": self.zombie_process_count,
            "high_fd_process_count": self.high_fd_process_count,
            "long_running_process_count": self.long_running_process_count,
            "config_permission_issues": self.config_permission_issues,
            "unusual_listeners": self.unusual_listeners,
            "findings": [{"score": f.score, "reason": f.reason} for f in self.findings],
            "exit_code": self.exit_code,
        }

def now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()
