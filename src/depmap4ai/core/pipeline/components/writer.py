from __future__ import annotations

"""
Per-File Artifact Materializer.

Writes one artifact per visited file into the run's processed-files
directory: a short header (relative path, depth, timestamp) followed by the
filtered content. Import lines are dropped from source files; every other
file type is copied verbatim. Content is streamed, never held in memory.
"""

import logging
import os
from datetime import datetime
from typing import Iterator, Optional

from depmap4ai.core.pipeline.components.classifier import is_import_line
from depmap4ai.core.pipeline.components.reader import stream_file_content
from depmap4ai.domain.constants import HEADER_DATE_FORMAT
from depmap4ai.infra.fs import flatten_relative_path, get_relative_path

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# CONTENT FILTERS
# -----------------------------------------------------------------------------

def strip_import_lines(lines: Iterator[str]) -> Iterator[str]:
    """Drop every import statement line from a stream."""
    for line in lines:
        if not is_import_line(line):
            yield line


def format_header(rel_path: str, depth: int, processed_at: Optional[datetime] = None) -> str:
    """
    Render the artifact header block.

    Format:
        === File: <rel_path> ===
        === Depth: <depth> ===
        === Processed: <timestamp> ===
        === Content ===
        <blank line>
    """
    stamp = (processed_at or datetime.now()).strftime(HEADER_DATE_FORMAT)
    return (
        f"=== File: {rel_path} ===\n"
        f"=== Depth: {depth} ===\n"
        f"=== Processed: {stamp} ===\n"
        "=== Content ===\n"
        "\n"
    )

# -----------------------------------------------------------------------------
# FILE OUTPUT MANAGEMENT
# -----------------------------------------------------------------------------

def materialize(
        path: str,
        depth: int,
        project_root: str,
        output_dir: str,
        *,
        strip_imports: bool,
) -> Optional[str]:
    """
    Write the filtered content of one file to its artifact.

    Args:
        path: Absolute path of the visited file.
        depth: Traversal depth of the file.
        project_root: Project root used for the relative header path.
        output_dir: Directory receiving the artifact.
        strip_imports: Drop import lines (source files).

    Returns:
        Optional[str]: Artifact path, or None if an artifact with the same
        flat name was already written during this run.

    Raises:
        OSError: If reading the source or writing the artifact fails.
    """
    rel_path = get_relative_path(path, project_root)
    artifact_path = os.path.join(output_dir, flatten_relative_path(rel_path))

    if os.path.exists(artifact_path):
        logger.debug(f"File already processed: {rel_path}")
        return None

    content: Iterator[str] = stream_file_content(path)
    if strip_imports:
        logger.debug("Filtering imports from source file")
        content = strip_import_lines(content)
    else:
        logger.debug("Copying entire file content")

    try:
        with open(artifact_path, "w", encoding="utf-8") as out:
            out.write(format_header(rel_path, depth))
            for line in content:
                out.write(line)
    except OSError:
        # Never leave a partial artifact behind
        if os.path.exists(artifact_path):
            os.remove(artifact_path)
        raise

    return artifact_path
