from __future__ import annotations
import argparse
import signal
import sys
import threading
import time
from typing import Any, Callable, Dict, List

from . import __version__
from .analysis import FingerprintAnalyzer, EXIT_OK, EXIT_ERROR, EXIT_WARNINGS, EXIT_CRITICAL
from .config import load_config, clamp_interval
from .fingerprint import capture_fingerprint
from .report import fingerprint_to_json, render_quick, severity_tag

def run_analysis(
    cfg: Dict[str, Any],
    configs: List[str] | None,
    quick_mode: bool,
    json_mode: bool,
    network_mode: bool,
) -> int:
    fp = capture_fingerprint(cfg, configs, network=network_mode)
    if fp.probe_errors:
        print(f"Warning: Some probes failed (errors: {fp.probe_errors})", file=sys.stderr)
        for err in fp.network.errors:
            print(f"Warning: {err}", file=sys.stderr)

    analyzer = FingerprintAnalyzer.from_config(cfg)
    qa = analyzer.analyze(fp)

    if quick_mode and not json_mode:
        sys.stdout.write(render_quick(fp, qa, int(cfg["report"].get("max_listeners", 10)), analyzer))
    else:
        try:
            sys.stdout.write(fingerprint_to_json(fp, qa))
        except (TypeError, ValueError) as e:
            print(f"Error: Failed to serialize fingerprint to JSON: {e}", file=sys.stderr)
            return EXIT_ERROR
    sys.stdout.flush()
    return qa.exit_code

def watch_loop(
    probe: Callable[[], int],
    interval: float,
    stop: threading.Event,
) -> int:
    """
    Run ``probe`` every ``interval`` seconds until ``stop`` is set.

    ``stop`` is only consulted between probes; a probe that has started
    always runs to completion. Returns the worst exit code seen.
    """
    worst = EXIT_OK
    while not stop.is_set():
        print(f"[{time.strftime('%Y-%m-%d %H:%M:%S')}] ", end="")
        code = probe()
        worst = max(worst, code)
        print(f" {severity_tag(code)}")
        sys.stdout.flush()
        stop.wait(interval)
    return worst

def cmd_probe(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    if args.interval is not None:
        cfg["interval"] = clamp_interval(args.interval)
    configs = args.files or None

    if not args.watch:
        return run_analysis(cfg, configs, args.quick, args.json, args.network)

    stop = threading.Event()

    def handle_signal(signum, frame):
        print("\nShutting down...", file=sys.stderr)
        stop.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    print(f"HostWatch v{__version__} - Watch Mode (Ctrl+C to stop)", file=sys.stderr)
    print(f"Interval: {cfg['interval']} seconds\n", file=sys.stderr)
    # watch mode always prints the quick summary unless JSON was asked for
    return watch_loop(
        lambda: run_analysis(cfg, configs, True, args.json, args.network),
        cfg["interval"],
        stop,
    )

def cmd_api(args: argparse.Namespace) -> int:
    from .api import run_api_server
    run_api_server(args.host, args.port, args.config)
    return EXIT_OK

EPILOG = f"""\
exit codes:
  {EXIT_OK} - no issues detected
  {EXIT_WARNINGS} - warnings (minor issues)
  {EXIT_CRITICAL} - critical (zombies, permission issues, unusual ports)
  {EXIT_ERROR} - error (probe failed)
"""

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description=f"hostwatch v{__version__} - host diagnostic fingerprint",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_probe = sub.add_parser("probe", help="Capture and analyze a host fingerprint",
                             epilog=EPILOG, formatter_class=argparse.RawDescriptionHelpFormatter)
    p_probe.add_argument("files", nargs="*", help="Config files to check (default: common system configs)")
    p_probe.add_argument("-q", "--quick", action="store_true", help="Only show quick analysis summary")
    p_probe.add_argument("-j", "--json", action="store_true", help="Output JSON to stdout (even in quick mode)")
    p_probe.add_argument("-w", "--watch", action="store_true", help="Continuous monitoring mode")
    p_probe.add_argument("-i", "--interval", type=int, help="Seconds between probes in watch mode (default: 60)")
    p_probe.add_argument("-n", "--network", action="store_true", help="Include network probe (listeners, connections)")
    p_probe.add_argument("--config", type=str, help="Config YAML")
    p_probe.set_defaults(func=cmd_probe)

    p_api = sub.add_parser("api", help="Run REST API server")
    p_api.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")
    p_api.add_argument("--port", type=int, default=5000, help="Port to bind to")
    p_api.add_argument("--config", type=str, help="Config YAML")
    p_api.set_defaults(func=cmd_api)

    return ap

def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(args.func(args))
