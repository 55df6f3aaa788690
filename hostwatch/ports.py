from typing import Dict, Iterable, Set

# Service ports that are expected to be listening on a typical server
WELL_KNOWN_PORTS: Dict[int, str] = {
    22: "ssh",
    25: "smtp",
    53: "dns",
    80: "http",
    110: "pop3",
    143: "imap",
    443: "https",
    465: "smtps",
    587: "submission",
    993: "imaps",
    995: "pop3s",
    3306: "mysql",
    5432: "postgresql",
    6379: "redis",
    8080: "http-alt",
    8443: "https-alt",
    27017: "mongodb",
}

EPHEMERAL_PORT_MIN = 32768

class PortClassifier:
    def __init__(self, extra_ports: Iterable[int] | None = None):
        self.common: Set[int] = set(WELL_KNOWN_PORTS)
        for p in extra_ports or []:
            self.common.add(int(p))

    def is_common(self, port: int) -> bool:
        return port in self.common or port >= EPHEMERAL_PORT_MIN

    def is_unusual(self, port: int) -> bool:
        return not self.is_common(port)

    def service_name(self, port: int) -> str:
        if port in WELL_KNOWN_PORTS:
            return WELL_KNOWN_PORTS[port]
        if port >= EPHEMERAL_PORT_MIN:
            return "ephemeral"
        return ""
