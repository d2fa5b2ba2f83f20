from __future__ import annotations

"""
Reference Extraction by File Type.

Scans a file for import-like references:
- source files (Kotlin/Java): every import line;
- markup files (XML): layout="@layout/<name>" attributes, class="<fqcn>"
  attributes and fully qualified custom-view element tags;
- build descriptors (Gradle): recognized, nothing extracted.
"""

import logging
import os
import re
from typing import Iterator, List, Optional, Sequence

from depmap4ai.core.pipeline.components.classifier import (
    is_import_line,
    parse_package_declaration,
)
from depmap4ai.core.pipeline.components.reader import stream_numbered_lines
from depmap4ai.domain.analysis_models import ImportReference

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# FILE KINDS
# -----------------------------------------------------------------------------

KIND_SOURCE = "source"
KIND_MARKUP = "markup"
KIND_BUILD = "build"
KIND_OTHER = "other"

REF_IMPORT = "import"
REF_LAYOUT = "layout"
REF_CLASS = "class"

# -----------------------------------------------------------------------------
# REGEX CONSTANTS
# -----------------------------------------------------------------------------

_LAYOUT_ATTR_RX = re.compile(r'layout="@layout/([^"]+)"')
_CLASS_ATTR_RX = re.compile(r'class="([^"]+)"')
_QUALIFIED_TAG_RX = re.compile(r"<([A-Za-z_]\w*(?:\.[A-Za-z_]\w*)+)[\s/>]")


def detect_file_kind(
        path: str,
        source_extensions: Sequence[str],
        markup_extensions: Sequence[str],
        build_extensions: Sequence[str],
) -> str:
    """
    Classify a file by extension.

    Returns:
        str: One of 'source', 'markup', 'build' or 'other'.
    """
    _, ext = os.path.splitext(path)
    if ext in source_extensions:
        return KIND_SOURCE
    if ext in markup_extensions:
        return KIND_MARKUP
    if ext in build_extensions:
        return KIND_BUILD
    return KIND_OTHER


# -----------------------------------------------------------------------------
# EXTRACTORS
# -----------------------------------------------------------------------------

def extract_source_references(path: str) -> Iterator[ImportReference]:
    """Yield every import statement of a Kotlin/Java file."""
    for line_number, line in stream_numbered_lines(path):
        if is_import_line(line):
            yield ImportReference(line.strip(), path, line_number, REF_IMPORT)


def extract_markup_references(path: str) -> Iterator[ImportReference]:
    """
    Yield layout and class references of a markup file.

    Class references are not filtered here; the caller applies the
    project namespace test.
    """
    for line_number, line in stream_numbered_lines(path):
        for layout in _LAYOUT_ATTR_RX.findall(line):
            yield ImportReference(layout, path, line_number, REF_LAYOUT)
        for class_name in _CLASS_ATTR_RX.findall(line):
            yield ImportReference(class_name, path, line_number, REF_CLASS)
        for tag in _QUALIFIED_TAG_RX.findall(line):
            yield ImportReference(tag, path, line_number, REF_CLASS)


def extract_references(path: str, kind: str) -> List[ImportReference]:
    """
    Dispatch extraction on file kind.

    Args:
        path: Absolute path of an already admitted file.
        kind: Value returned by detect_file_kind.

    Returns:
        List[ImportReference]: References in file order.
    """
    if kind == KIND_SOURCE:
        logger.debug(f"Analyzing source file: {path}")
        return list(extract_source_references(path))
    if kind == KIND_MARKUP:
        logger.debug(f"Analyzing markup file: {path}")
        return list(extract_markup_references(path))
    if kind == KIND_BUILD:
        logger.debug(f"Build descriptor, no references extracted: {path}")
    return []


def sniff_package(path: str, max_lines: int = 50) -> Optional[str]:
    """
    Read the 'package' declaration near the top of a source file.

    Args:
        path: Source file path.
        max_lines: Number of leading lines inspected.

    Returns:
        Optional[str]: Declared package, or None.
    """
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line_number, line in enumerate(f, start=1):
            if line_number > max_lines:
                break
            package = parse_package_declaration(line)
            if package:
                return package
    return None
