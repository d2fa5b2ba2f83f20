from __future__ import annotations

"""
Symbol-to-File Resolution Engine.

Maps fully qualified project symbols and markup layout names to files on
disk. The project tree is walked once, pruning build/test/generated and
hidden directories in place, and indexed by basename. Lookups then keep
only candidates whose path ends with the symbol's package segments and
break ties on the lexicographically smallest path so results do not depend
on filesystem enumeration order.
"""

import logging
import os
from typing import Dict, Iterable, List, Optional, Sequence

from depmap4ai.infra.fs import to_posix

logger = logging.getLogger(__name__)


class FileResolver:
    """
    Resolves qualified symbols and layout names inside one project.

    Attributes:
        project_root: Absolute project root.
        source_roots: Source convention segments (e.g. 'src/main/java').
        source_extensions: Extensions tried for a symbol's leaf name.
        markup_extensions: Extensions of layout/markup files.
        prune_dirs: Directory names never descended into.
    """

    def __init__(
            self,
            project_root: str,
            source_roots: Sequence[str],
            source_extensions: Sequence[str],
            markup_extensions: Sequence[str],
            prune_dirs: Iterable[str],
    ) -> None:
        self.project_root = os.path.abspath(project_root)
        self.source_roots = [r.strip("/") for r in source_roots if r.strip("/")]
        self.source_extensions = list(source_extensions)
        self.markup_extensions = list(markup_extensions)
        self.prune_dirs = set(prune_dirs)

        self._source_index: Optional[Dict[str, List[str]]] = None
        self._markup_index: Optional[Dict[str, List[str]]] = None

    # -------------------------------------------------------------------------
    # INDEXING
    # -------------------------------------------------------------------------

    def _build_index(self) -> None:
        """Walk the pruned project tree once and index candidate files by basename."""
        source_index: Dict[str, List[str]] = {}
        markup_index: Dict[str, List[str]] = {}
        root_markers = ["/" + r + "/" for r in self.source_roots]

        for dirpath, dirnames, filenames in os.walk(self.project_root):
            dirnames[:] = sorted(
                d for d in dirnames
                if d not in self.prune_dirs and not d.startswith(".")
            )
            posix_dir = to_posix(dirpath) + "/"
            under_source_root = any(m in posix_dir for m in root_markers)

            for file_name in filenames:
                _, ext = os.path.splitext(file_name)
                full_path = os.path.join(dirpath, file_name)
                if ext in self.markup_extensions:
                    markup_index.setdefault(file_name, []).append(full_path)
                if under_source_root and ext in self.source_extensions:
                    source_index.setdefault(file_name, []).append(full_path)

        for paths in source_index.values():
            paths.sort(key=to_posix)
        for paths in markup_index.values():
            paths.sort(key=to_posix)

        self._source_index = source_index
        self._markup_index = markup_index
        logger.debug(
            f"Resolver index built: {sum(len(v) for v in source_index.values())} source files, "
            f"{sum(len(v) for v in markup_index.values())} markup files"
        )

    def _sources(self) -> Dict[str, List[str]]:
        if self._source_index is None:
            self._build_index()
        return self._source_index or {}

    def _markups(self) -> Dict[str, List[str]]:
        if self._markup_index is None:
            self._build_index()
        return self._markup_index or {}

    # -------------------------------------------------------------------------
    # LOOKUPS
    # -------------------------------------------------------------------------

    def _match_symbol(self, symbol: str) -> Optional[str]:
        """Apply the basename lookup and package-suffix test for one symbol."""
        segments = [s for s in symbol.split(".") if s]
        if not segments or segments[-1] == "*":
            return None

        leaf = segments[-1]
        suffix = "/" + "/".join(segments)
        matches: List[str] = []

        for ext in self.source_extensions:
            for candidate in self._sources().get(leaf + ext, []):
                if to_posix(candidate).endswith(suffix + ext):
                    matches.append(candidate)

        if not matches:
            return None
        return min(matches, key=to_posix)

    def resolve(self, symbol: str) -> Optional[str]:
        """
        Map a qualified symbol to its source file.

        When the full symbol has no file, enclosing type names are tried
        (nested classes, static members), stopping at the first segment
        that does not look like a type. Binary names such as
        'Outer$Inner' are treated like 'Outer.Inner'.

        Args:
            symbol: Dotted qualified symbol, e.g. 'proj.pkg.Foo'.

        Returns:
            Optional[str]: Absolute file path, or None if unresolved.
        """
        symbol = symbol.replace("$", ".")
        logger.debug(f"Looking for class: {symbol.rsplit('.', 1)[-1]} in package: {symbol}")
        found = self._match_symbol(symbol)

        parts = symbol.split(".")
        while found is None and len(parts) > 2:
            parts = parts[:-1]
            if not parts[-1][:1].isupper():
                break
            found = self._match_symbol(".".join(parts))

        if found:
            logger.debug(f"Found file: {found}")
        else:
            logger.debug(f"Could not find file for import: {symbol}")
        return found

    def resolve_layout(self, layout_name: str) -> Optional[str]:
        """
        Map a layout resource name ('activity_main') to its markup file.

        Returns:
            Optional[str]: Lexicographically first matching file, or None.
        """
        candidates: List[str] = []
        for ext in self.markup_extensions:
            candidates.extend(self._markups().get(layout_name + ext, []))
        if not candidates:
            logger.debug(f"Could not find layout: {layout_name}")
            return None
        return min(candidates, key=to_posix)


def resolve(
        symbol: str,
        project_root: str,
        *,
        source_roots: Sequence[str],
        source_extensions: Sequence[str],
        prune_dirs: Iterable[str],
) -> Optional[str]:
    """
    One-shot symbol resolution without reusing an index.

    Args:
        symbol: Dotted qualified symbol.
        project_root: Project root directory.
        source_roots: Source convention segments.
        source_extensions: Extensions tried for the leaf name.
        prune_dirs: Directory names never descended into.

    Returns:
        Optional[str]: Absolute file path, or None.
    """
    resolver = FileResolver(project_root, source_roots, source_extensions, [], prune_dirs)
    return resolver.resolve(symbol)
