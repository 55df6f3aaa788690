import os
import stat
from pathlib import Path
from typing import Iterable, List

from .models import ConfigFileInfo

# Files whose contents should not be readable by everyone
SENSITIVE_NAMES = {"shadow", "gshadow", "shadow-", "gshadow-", "sudoers", "ssh_host_rsa_key",
                   "ssh_host_ecdsa_key", "ssh_host_ed25519_key"}

def permission_issues(st: os.stat_result, path: str) -> List[str]:
    issues: List[str] = []
    mode = st.st_mode
    if mode & stat.S_IWOTH:
        issues.append("world-writable")
    if mode & stat.S_IWGRP and st.st_gid != 0:
        issues.append("group-writable")
    if st.st_uid != 0:
        issues.append("not owned by root")
    if mode & stat.S_IROTH and os.path.basename(path) in SENSITIVE_NAMES:
        issues.append("world-readable sensitive file")
    return issues

def check_config_file(path: str) -> ConfigFileInfo:
    info = ConfigFileInfo(path=path)
    try:
        st = os.stat(path)
    except OSError:
        return info

    info.exists = True
    info.mode = oct(stat.S_IMODE(st.st_mode))
    info.uid = st.st_uid
    info.gid = st.st_gid
    info.size = st.st_size
    info.mtime = st.st_mtime
    info.issues = permission_issues(st, path)
    return info

def check_config_files(paths: Iterable[str]) -> List[ConfigFileInfo]:
    return [check_config_file(str(Path(p))) for p in paths]
