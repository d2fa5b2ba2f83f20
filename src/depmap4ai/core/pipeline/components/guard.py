from __future__ import annotations

"""
Resource Guard.

Side-effect free admission checks applied to every candidate file before it
is materialized: glob-based path exclusion and a size ceiling. The process
memory check is a run-level advisory and never rejects an individual file.
"""

import fnmatch
import logging
import os
from typing import List, Optional, Sequence

from depmap4ai.domain.analysis_models import (
    SKIP_EXCLUDED,
    SKIP_TOO_LARGE,
    SKIP_UNREADABLE,
    GuardDecision,
)
from depmap4ai.infra.fs import to_posix
from depmap4ai.infra.process import get_resident_memory_bytes

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PATH EXCLUSION
# -----------------------------------------------------------------------------

def match_exclusion(path: str, patterns: Sequence[str]) -> Optional[str]:
    """
    Find the first glob pattern matching the absolute POSIX form of 'path'.

    Args:
        path: Candidate file path.
        patterns: Glob patterns such as '*/build/*'.

    Returns:
        Optional[str]: The matching pattern, or None.
    """
    posix_path = to_posix(os.path.abspath(path))
    for pattern in patterns:
        if fnmatch.fnmatchcase(posix_path, pattern):
            return pattern
    return None


# -----------------------------------------------------------------------------
# GUARD
# -----------------------------------------------------------------------------

class ResourceGuard:
    """
    Applies exclusion, size and memory policies.

    Attributes:
        exclude_patterns: Glob patterns matched against absolute paths.
        max_file_size: Maximum file size in bytes.
        max_memory: Resident memory budget in bytes.
    """

    def __init__(
            self,
            exclude_patterns: Sequence[str],
            max_file_size: int,
            max_memory: int,
    ) -> None:
        self.exclude_patterns: List[str] = list(exclude_patterns)
        self.max_file_size = int(max_file_size)
        self.max_memory = int(max_memory)

    def should_process(self, path: str) -> GuardDecision:
        """
        Decide whether a file may be materialized.

        Exclusion is checked before size so that excluded trees are never
        stat-ed.

        Args:
            path: Absolute path of the candidate file.

        Returns:
            GuardDecision: Proceed, or skip with a reason.
        """
        pattern = match_exclusion(path, self.exclude_patterns)
        if pattern is not None:
            logger.debug(f"File excluded by pattern ({pattern}): {path}")
            return GuardDecision(False, SKIP_EXCLUDED, pattern)

        try:
            size = os.path.getsize(path)
        except OSError as e:
            logger.warning(f"Cannot stat file: {path} ({e})")
            return GuardDecision(False, SKIP_UNREADABLE, str(e))

        if size > self.max_file_size:
            logger.warning(f"Skipping large file: {path} ({size // 1024}KB)")
            return GuardDecision(False, SKIP_TOO_LARGE, f"{size} bytes")

        return GuardDecision(True)

    def memory_exceeded(self) -> bool:
        """
        Sample resident memory and report whether it is over budget.

        Logs a WARN when the budget is exceeded. An unavailable probe never
        counts as exceeded.
        """
        used = get_resident_memory_bytes()
        if used is None:
            return False
        if used > self.max_memory:
            logger.warning(f"High memory usage detected: {used // (1024 * 1024)}MB")
            return True
        return False
