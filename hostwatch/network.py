from __future__ import annotations
from pathlib import Path
import ipaddress
import re
from typing import Dict, Iterable, Iterator, List, Tuple

from .models import SocketRecord, ListenerEntry, ConnectionEntry, NetworkInfo
from .ports import PortClassifier
from .proc import DEFAULT_PROC_ROOT, build_inode_index, get_process_name
from .utils import read_table

# (protocol tag, path below the proc root), read in this order
SOURCES: Tuple[Tuple[str, str], ...] = (
    ("tcp", "net/tcp"),
    ("tcp6", "net/tcp6"),
    ("udp", "net/udp"),
    ("udp6", "net/udp6"),
)

TCP_ESTABLISHED = 0x01
TCP_LISTEN = 0x0A
UDP_UNCONNECTED = 0x07

TCP_STATES = (
    "UNKNOWN",
    "ESTABLISHED",
    "SYN_SENT",
    "SYN_RECV",
    "FIN_WAIT1",
    "FIN_WAIT2",
    "TIME_WAIT",
    "CLOSE",
    "CLOSE_WAIT",
    "LAST_ACK",
    "LISTEN",
    "CLOSING",
)

#   sl  local_address rem_address   st tx_queue:rx_queue tr:tm->when retrnsmt   uid  timeout inode
LINE_RE = re.compile(
    r"^\s*\d+:\s+"
    r"(?P<laddr>[0-9A-Fa-f]+):(?P<lport>[0-9A-Fa-f]+)\s+"
    r"(?P<raddr>[0-9A-Fa-f]+):(?P<rport>[0-9A-Fa-f]+)\s+"
    r"(?P<state>[0-9A-Fa-f]+)\s+\S+\s+\S+\s+\S+\s+\d+\s+\d+\s+(?P<inode>\d+)"
)

class SourceUnavailable(OSError):
    """A kernel socket table could not be opened or has no header."""


def tcp_state_name(state: int) -> str:
    if 0 <= state < len(TCP_STATES):
        return TCP_STATES[state]
    return "UNKNOWN"

def decode_ipv4(hex_addr: str) -> str:
    # kernel prints the address as a host-order (little-endian) word
    value = int(hex_addr, 16)
    return f"{value & 0xFF}.{(value >> 8) & 0xFF}.{(value >> 16) & 0xFF}.{(value >> 24) & 0xFF}"

def decode_ipv6(hex_addr: str, canonical: bool = True) -> str:
    """
    Decode a 32-hex-digit /proc/net address.

    The kernel prints four 32-bit words, each in host byte order. With
    ``canonical=False`` the raw string is returned unchanged.
    """
    if not canonical or len(hex_addr) != 32:
        return hex_addr
    try:
        raw = b"".join(bytes.fromhex(hex_addr[i:i + 8])[::-1] for i in range(0, 32, 8))
        return str(ipaddress.IPv6Address(raw))
    except ValueError:
        return hex_addr

def decode_port(hex_port: str) -> int:
    return int(hex_port, 16)

def decode_address(hex_addr: str, protocol: str, canonical_ipv6: bool = True) -> str:
    if protocol.endswith("6"):
        return decode_ipv6(hex_addr, canonical_ipv6)
    return decode_ipv4(hex_addr)

def parse_socket_line(line: str, protocol: str, canonical_ipv6: bool = True) -> SocketRecord | None:
    m = LINE_RE.match(line)
    if not m:
        return None
    addr_len = 32 if protocol.endswith("6") else 8
    if len(m.group("laddr")) != addr_len or len(m.group("raddr")) != addr_len:
        return None
    try:
        return SocketRecord(
            protocol=protocol,
            local_addr=decode_address(m.group("laddr"), protocol, canonical_ipv6),
            local_port=decode_port(m.group("lport")),
            remote_addr=decode_address(m.group("raddr"), protocol, canonical_ipv6),
            remote_port=decode_port(m.group("rport")),
            state=int(m.group("state"), 16),
            inode=int(m.group("inode")),
        )
    except ValueError:
        return None

def parse_socket_table(lines: Iterable[str], protocol: str, canonical_ipv6: bool = True) -> Iterator[SocketRecord]:
    """Yield records from a socket table body; malformed lines are skipped."""
    for line in lines:
        rec = parse_socket_line(line, protocol, canonical_ipv6)
        if rec is not None:
            yield rec

def read_socket_table(path: Path, protocol: str, canonical_ipv6: bool = True) -> List[SocketRecord]:
    try:
        lines = read_table(path)
    except OSError as e:
        raise SourceUnavailable(f"{path}: {e.strerror or e}") from e
    return list(parse_socket_table(lines, protocol, canonical_ipv6))

def is_listener(rec: SocketRecord) -> bool:
    if rec.protocol.startswith("udp"):
        # UDP has no handshake: any bound socket is modelled as a listener
        return rec.state == UDP_UNCONNECTED or rec.local_port != 0
    return rec.state == TCP_LISTEN

def is_connection(rec: SocketRecord) -> bool:
    return rec.protocol.startswith("tcp") and rec.state == TCP_ESTABLISHED


class NetworkProbe:
    """
    Reads the four kernel socket tables in order, resolves socket owners and
    aggregates listeners and established connections into a NetworkInfo.

    Each call to ``probe()`` builds a fresh NetworkInfo and a fresh
    inode -> pid index; nothing is shared between probes.
    """

    def __init__(
        self,
        proc_root: Path | str = DEFAULT_PROC_ROOT,
        classifier: PortClassifier | None = None,
        max_listeners: int = 64,
        max_connections: int = 128,
        decode_ipv6: bool = True,
    ):
        self.proc_root = Path(proc_root)
        self.classifier = classifier or PortClassifier()
        self.max_listeners = max_listeners
        self.max_connections = max_connections
        self.decode_ipv6 = decode_ipv6

    @classmethod
    def from_config(cls, cfg: Dict) -> "NetworkProbe":
        net = cfg.get("network", {})
        return cls(
            proc_root=cfg.get("proc_root", DEFAULT_PROC_ROOT),
            classifier=PortClassifier(net.get("extra_common_ports", [])),
            max_listeners=int(net.get("max_listeners", 64)),
            max_connections=int(net.get("max_connections", 128)),
            decode_ipv6=bool(net.get("decode_ipv6", True)),
        )

    def probe(self) -> NetworkInfo:
        info = NetworkInfo(max_listeners=self.max_listeners, max_connections=self.max_connections)
        owners: Dict[int, int] | None = None
        names: Dict[int, str] = {}

        def owner_of(inode: int) -> Tuple[int, str]:
            nonlocal owners
            if owners is None:
                owners = build_inode_index(self.proc_root)
            pid = owners.get(inode, 0)
            if pid not in names:
                names[pid] = get_process_name(pid, self.proc_root)
            return pid, names[pid]

        for protocol, rel in SOURCES:
            path = self.proc_root / rel
            try:
                records = read_socket_table(path, protocol, self.decode_ipv6)
            except SourceUnavailable as e:
                info.probe_errors += 1
                info.errors.append(str(e))
                continue

            for rec in records:
                if is_listener(rec):
                    pid, name = owner_of(rec.inode)
                    state = "LISTEN" if protocol.startswith("udp") else tcp_state_name(rec.state)
                    unusual = self.classifier.is_unusual(rec.local_port)
                    info.add_listener(
                        ListenerEntry(protocol, rec.local_addr, rec.local_port, state, pid, name, unusual,
                                      self.classifier.service_name(rec.local_port)),
                        unusual=unusual,
                    )
                elif is_connection(rec):
                    pid, name = owner_of(rec.inode)
                    info.add_connection(
                        ConnectionEntry(
                            protocol,
                            rec.local_addr,
                            rec.local_port,
                            rec.remote_addr,
                            rec.remote_port,
                            tcp_state_name(rec.state),
                            pid,
                            name,
                        )
                    )
        return info


def probe_network(cfg: Dict) -> NetworkInfo:
    return NetworkProbe.from_config(cfg).probe()
