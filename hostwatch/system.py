import os
import platform
import socket
import time

import psutil

from .models import SystemInfo

def collect_system_info() -> SystemInfo:
    info = SystemInfo(
        hostname=socket.gethostname(),
        kernel=platform.release(),
    )
    try:
        info.uptime_seconds = max(0.0, time.time() - psutil.boot_time())
    except (psutil.Error, OSError):
        pass
    try:
        info.load_avg = tuple(os.getloadavg())
    except OSError:
        pass

    mem = psutil.virtual_memory()
    info.total_ram = mem.total
    info.free_ram = mem.free
    info.available_ram = mem.available
    return info
