from __future__ import annotations

"""
Process Introspection Utilities.

Samples the resident memory of the running interpreter. Linux exposes the
current value through procfs; other POSIX systems only report the peak
resident size via getrusage, which is used as an upper bound.
"""

import os
import sys
from typing import Optional

_PROC_STATUS = "/proc/self/status"


def get_resident_memory_bytes() -> Optional[int]:
    """
    Return the resident set size of the current process in bytes.

    Returns:
        Optional[int]: Memory in bytes, or None when the platform offers no probe.
    """
    rss = _read_proc_status_rss()
    if rss is not None:
        return rss

    if os.name == "nt":
        return None

    import resource

    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # macOS reports bytes, Linux reports kilobytes
    if sys.platform == "darwin":
        return int(peak)
    return int(peak) * 1024


def _read_proc_status_rss() -> Optional[int]:
    """Parse 'VmRSS' from procfs (kB) when available."""
    if not os.path.exists(_PROC_STATUS):
        return None
    try:
        with open(_PROC_STATUS, "r", encoding="utf-8") as f:
            for line in f:
                if line.startswith("VmRSS:"):
                    parts = line.split()
                    return int(parts[1]) * 1024
    except (OSError, ValueError, IndexError):
        return None
    return None
