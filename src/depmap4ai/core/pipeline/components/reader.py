from __future__ import annotations

"""
Resilient File Reading Component.

Streams file content line by line. Undecodable byte sequences are replaced
rather than raised so a single badly encoded file never interrupts a run.
"""

from typing import Iterator, Tuple

# -----------------------------------------------------------------------------
# STREAM READING OPERATIONS
# -----------------------------------------------------------------------------

def stream_file_content(file_path: str) -> Iterator[str]:
    """
    Generate a line-by-line stream of file content.

    Args:
        file_path: Absolute path to the target file.

    Yields:
        str: Lines from the file, line terminators preserved.
    """
    with open(file_path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            yield line


def stream_numbered_lines(file_path: str) -> Iterator[Tuple[int, str]]:
    """Same as stream_file_content, paired with 1-based line numbers."""
    return enumerate(stream_file_content(file_path), start=1)
