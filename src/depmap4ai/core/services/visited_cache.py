from __future__ import annotations

"""
Visited File Cache.

Run-scoped membership set guaranteeing that each file is materialized at
most once. Entries are keyed by a digest of the normalized absolute path so
that different spellings of the same path ('a/./b', 'a/b') collapse onto one
key. Files rejected by the Resource Guard are remembered as well, which turns
repeated references to them into cheap no-ops.
"""

import hashlib
import os
from typing import Dict, List, Optional

from depmap4ai.domain.analysis_models import VisitRecord


class VisitedCache:
    """
    In-memory cache of visited and rejected files.

    Single-threaded by contract: the traversal engine is its only writer.
    """

    def __init__(self) -> None:
        self._visits: Dict[str, VisitRecord] = {}
        self._rejected: Dict[str, str] = {}

    @staticmethod
    def key_for(path: str) -> str:
        """Compute the cache key of a path."""
        normalized = os.path.normcase(os.path.abspath(path))
        return hashlib.md5(normalized.encode("utf-8")).hexdigest()

    def __contains__(self, path: str) -> bool:
        key = self.key_for(path)
        return key in self._visits or key in self._rejected

    def __len__(self) -> int:
        return len(self._visits) + len(self._rejected)

    def record_visit(self, path: str, depth: int, parent: Optional[str] = None) -> VisitRecord:
        """
        Register a file as visited.

        Raises:
            ValueError: If the path is already cached.
        """
        key = self.key_for(path)
        if key in self._visits or key in self._rejected:
            raise ValueError(f"Path already cached: {path}")
        record = VisitRecord(os.path.abspath(path), depth, parent)
        self._visits[key] = record
        return record

    def mark_rejected(self, path: str, reason: str) -> None:
        """Remember a file refused by the Resource Guard."""
        key = self.key_for(path)
        if key not in self._visits:
            self._rejected[key] = reason

    def rejection_reason(self, path: str) -> Optional[str]:
        """Return why a path was rejected, or None."""
        return self._rejected.get(self.key_for(path))

    def get(self, path: str) -> Optional[VisitRecord]:
        """Return the visit record of a path, if it was materialized."""
        return self._visits.get(self.key_for(path))

    @property
    def records(self) -> List[VisitRecord]:
        """Visit records in discovery order."""
        return list(self._visits.values())
