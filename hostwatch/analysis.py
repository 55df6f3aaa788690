from typing import Any, Dict

from .models import Fingerprint, Finding, QuickAnalysis

EXIT_OK = 0
EXIT_WARNINGS = 1
EXIT_CRITICAL = 2
EXIT_ERROR = 3

SEVERITY_LABELS = {
    EXIT_OK: "OK",
    EXIT_WARNINGS: "WARNINGS",
    EXIT_CRITICAL: "CRITICAL",
    EXIT_ERROR: "ERROR",
}

SECONDS_PER_DAY = 86400

class FingerprintAnalyzer:
    def __init__(
        self,
        high_fd: int = 100,
        high_fd_processes: int = 5,
        long_running_days: float = 7,
        unusual_ports_critical: int = 3,
    ):
        self.high_fd = high_fd
        self.high_fd_processes = high_fd_processes
        self.long_running_days = long_running_days
        self.unusual_ports_critical = unusual_ports_critical

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "FingerprintAnalyzer":
        th = cfg.get("thresholds", {})
        return cls(
            high_fd=int(th.get("high_fd", 100)),
            high_fd_processes=int(th.get("high_fd_processes", 5)),
            long_running_days=float(th.get("long_running_days", 7)),
            unusual_ports_critical=int(th.get("unusual_ports_critical", 3)),
        )

    def analyze(self, fp: Fingerprint) -> QuickAnalysis:
        qa = QuickAnalysis()
        self._check_processes(fp, qa)
        self._check_configs(fp, qa)
        self._check_network(fp, qa)
        qa.exit_code = self.exit_code(qa)
        return qa

    def _check_processes(self, fp: Fingerprint, qa: QuickAnalysis):
        long_running = self.long_running_days * SECONDS_PER_DAY
        for proc in fp.processes:
            if proc.state == "Z":
                qa.zombie_process_count += 1
                qa.findings.append(Finding(3, f"Zombie process {proc.pid} ({proc.name}), parent {proc.ppid}"))
            if proc.fd_count > self.high_fd:
                qa.high_fd_process_count += 1
                qa.findings.append(Finding(1, f"Process {proc.pid} ({proc.name}) has {proc.fd_count} open descriptors"))
            if proc.age_seconds > long_running:
                qa.long_running_process_count += 1

    def _check_configs(self, fp: Fingerprint, qa: QuickAnalysis):
        for cf in fp.configs:
            if cf.issues:
                qa.config_permission_issues += 1
                qa.findings.append(Finding(3, f"{cf.path}: {', '.join(cf.issues)} (mode {cf.mode})"))

    def _check_network(self, fp: Fingerprint, qa: QuickAnalysis):
        net = fp.network
        qa.unusual_listeners = net.unusual_port_count
        if not net.unusual_port_count:
            return
        ports = sorted({(l.local_port, l.protocol) for l in net.listeners if l.unusual})
        ports = [f"{port}/{proto}" for port, proto in ports]
        detail = f": {', '.join(ports)}" if ports else ""
        qa.findings.append(Finding(2, f"{net.unusual_port_count} listener(s) on unusual ports{detail}"))

    def exit_code(self, qa: QuickAnalysis) -> int:
        if (qa.zombie_process_count > 0
                or qa.config_permission_issues > 0
                or qa.unusual_listeners > self.unusual_ports_critical):
            return EXIT_CRITICAL
        if qa.high_fd_process_count > self.high_fd_processes or qa.unusual_listeners > 0:
            return EXIT_WARNINGS
        return EXIT_OK
