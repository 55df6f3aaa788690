from __future__ import annotations
from dataclasses import asdict
import json
from typing import Any, Dict, List

from .analysis import FingerprintAnalyzer, SEVERITY_LABELS, EXIT_CRITICAL, EXIT_WARNINGS
from .models import Fingerprint, QuickAnalysis
from .utils import C

WARN_MARK = " ⚠"

def fingerprint_to_dict(fp: Fingerprint, analysis: QuickAnalysis | None = None) -> Dict[str, Any]:
    data = asdict(fp)
    data["system"]["memory_used_pct"] = round(fp.system.memory_used_pct, 1)
    data["process_count"] = fp.process_count
    if not fp.network_probed:
        data.pop("network")
    if analysis is not None:
        data["analysis"] = analysis.as_dict()
    return data

def fingerprint_to_json(fp: Fingerprint, analysis: QuickAnalysis | None = None) -> str:
    return json.dumps(fingerprint_to_dict(fp, analysis), indent=2) + "\n"

def _mark(flag: bool) -> str:
    return f"{C.YELLOW}{WARN_MARK}{C.RESET}" if flag else ""

def severity_tag(exit_code: int) -> str:
    label = SEVERITY_LABELS.get(exit_code, "ERROR")
    if exit_code >= EXIT_CRITICAL:
        color = C.RED
    elif exit_code == EXIT_WARNINGS:
        color = C.YELLOW
    else:
        color = C.GREEN
    return f"{color}[{label}]{C.RESET}"

def render_quick(
    fp: Fingerprint,
    qa: QuickAnalysis,
    max_listeners: int = 10,
    analyzer: FingerprintAnalyzer | None = None,
) -> str:
    analyzer = analyzer or FingerprintAnalyzer()
    sysinfo = fp.system
    lines: List[str] = [
        "HostWatch Quick Analysis",
        "========================",
        f"Hostname: {sysinfo.hostname}",
        f"Uptime: {sysinfo.uptime_seconds / 86400.0:.1f} days",
        "Load: {:.2f} {:.2f} {:.2f}".format(*sysinfo.load_avg),
        f"Memory: {sysinfo.memory_used_pct:.1f}% used",
        f"Processes: {fp.process_count} total",
        "",
        "Potential Issues:",
        f"  Zombie processes: {qa.zombie_process_count}{_mark(qa.zombie_process_count > 0)}",
        f"  High FD processes: {qa.high_fd_process_count}{_mark(qa.high_fd_process_count > analyzer.high_fd_processes)}",
        f"  Long-running (>{analyzer.long_running_days:g}d): {qa.long_running_process_count}",
        f"  Config permission issues: {qa.config_permission_issues}{_mark(qa.config_permission_issues > 0)}",
    ]

    if fp.network_probed:
        net = fp.network
        lines += [
            "",
            "Network:",
            f"  Listening ports: {net.total_listening}",
            f"  Established connections: {net.total_established}",
            f"  Unusual ports: {qa.unusual_listeners}{_mark(qa.unusual_listeners > 0)}",
        ]
        if net.listeners:
            lines += ["", "  Listeners:"]
            for l in net.listeners[:max_listeners]:
                name = f"{C.CYAN}{l.process_name}{C.RESET}"
                flag = f" {C.YELLOW}(unusual){C.RESET}" if l.unusual else ""
                proto = f"{l.protocol}/{l.service}" if l.service else l.protocol
                lines.append(f"    {l.local_addr}:{l.local_port} ({proto}) - {name}{flag}")
            if len(net.listeners) > max_listeners:
                lines.append(f"    ... and {len(net.listeners) - max_listeners} more")
        if net.listeners_truncated or net.connections_truncated:
            lines.append(f"  {C.GRAY}(storage capacity reached: listeners {len(net.listeners)}/{net.total_listening}, "
                         f"connections {len(net.connections)}/{net.total_established}){C.RESET}")

    if qa.findings:
        lines += ["", "Findings:"]
        for f in sorted(qa.findings, key=lambda f: f.score, reverse=True):
            lines.append(f"  [{f.score}] {f.reason}")
    return "\n".join(lines) + "\n"
