from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path manipulation, run directory preparation and
project census utilities. Acts as an abstraction over the 'os' module to
ensure uniform behavior across Windows and Unix-like systems.
"""

import os
from datetime import datetime
from typing import Iterable, List, Optional

from depmap4ai.domain.constants import ARTIFACT_PATH_DELIMITER, TIMESTAMP_FORMAT

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "DepMap4AI"
UNIX_APP_DIR_NAME = ".depmap4ai"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Standards:
    - Windows: %LOCALAPPDATA%/DepMap4AI
    - Linux/Mac: ~/.depmap4ai

    The directory is not created here; writers create it on demand.

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        home = os.path.expanduser("~")
        path = os.path.join(home, UNIX_APP_DIR_NAME)

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def to_posix(path: str) -> str:
    """Render a path with forward slashes regardless of platform."""
    return path.replace(os.sep, "/")


def get_relative_path(target: str, base: str) -> str:
    """
    Compute the POSIX-style path of 'target' relative to 'base'.

    Targets outside 'base' are returned unchanged (absolute).
    """
    base_abs = os.path.abspath(base)
    target_abs = os.path.abspath(target)
    try:
        common = os.path.commonpath([base_abs, target_abs])
    except ValueError:
        return to_posix(target_abs)
    if common != base_abs:
        return to_posix(target_abs)
    return to_posix(os.path.relpath(target_abs, base_abs))


def flatten_relative_path(rel_path: str) -> str:
    """
    Build a flat artifact filename from a relative path.

    Example:
        'app/src/main/java/A.kt' -> 'app_src_main_java_A.kt'
    """
    return to_posix(rel_path).strip("/").replace("/", ARTIFACT_PATH_DELIMITER)

# -----------------------------------------------------------------------------
# RUN DIRECTORY MANAGEMENT
# -----------------------------------------------------------------------------

def build_run_dir_name(prefix: str, now: Optional[datetime] = None) -> str:
    """
    Compose the timestamped name of a run directory.

    Args:
        prefix: Directory name prefix (e.g. 'dependency_analysis').
        now: Optional clock override.

    Returns:
        str: '<prefix>_<YYYYmmdd_HHMMSS>'.
    """
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"{prefix}_{stamp}"


def create_unique_dir(base_dir: str, name: str) -> str:
    """
    Create '<base_dir>/<name>', appending '_1', '_2', ... if it already exists.

    Raises:
        OSError: If the directory cannot be created.

    Returns:
        str: Absolute path of the newly created directory.
    """
    candidate = os.path.join(base_dir, name)
    counter = 1
    while os.path.exists(candidate):
        candidate = os.path.join(base_dir, f"{name}_{counter}")
        counter += 1
    os.makedirs(candidate)
    return os.path.abspath(candidate)


def list_dir_entries(path: str) -> List[str]:
    """
    Describe the immediate contents of a directory, one line per entry.

    Directories carry a trailing slash; files report their size in bytes.
    """
    lines: List[str] = []
    for name in sorted(os.listdir(path)):
        full = os.path.join(path, name)
        if os.path.isdir(full):
            lines.append(f"{name}/")
        else:
            lines.append(f"{name} ({os.path.getsize(full)} bytes)")
    return lines

# -----------------------------------------------------------------------------
# PROJECT CENSUS
# -----------------------------------------------------------------------------

def count_project_files(root: str, extensions: Iterable[str]) -> int:
    """
    Count files under 'root' carrying one of the given extensions.

    Hidden files and hidden directories are skipped.
    """
    exts = tuple(e.lower() for e in extensions)
    total = 0
    for _dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        for file_name in filenames:
            if file_name.startswith("."):
                continue
            if file_name.lower().endswith(exts):
                total += 1
    return total
