"""
HostWatch — point-in-time diagnostic fingerprint of a Linux host:
processes, load, config permissions and socket state, with a severity
exit code.

CLI entry: hostwatch (see pyproject.toml)
"""

__version__ = "1.0.0"

from .models import Fingerprint, NetworkInfo, ListenerEntry, ConnectionEntry, QuickAnalysis
from .network import NetworkProbe, probe_network
from .ports import PortClassifier
from .fingerprint import capture_fingerprint
from .analysis import FingerprintAnalyzer

__all__ = [
    "Fingerprint",
    "NetworkInfo",
    "ListenerEntry",
    "ConnectionEntry",
    "QuickAnalysis",
    "NetworkProbe",
    "probe_network",
    "PortClassifier",
    "capture_fingerprint",
    "FingerprintAnalyzer",
]
