from __future__ import annotations

"""
Import Statement Classifier.

Line-level normalization of Kotlin/Java import statements and the
internal-vs-external decision. Following is allow-list driven (the project
namespace prefix); the denylist of platform namespaces only short-circuits
the obvious cases.
"""

import re
from typing import Optional, Sequence

from depmap4ai.domain.analysis_models import ImportClassification

# -----------------------------------------------------------------------------
# REGEX CONSTANTS
# -----------------------------------------------------------------------------

IMPORT_LINE_RX = re.compile(r"^\s*import\s")
_IMPORT_KEYWORD_RX = re.compile(r"^\s*import\s+(?:static\s+)?")
_ALIAS_RX = re.compile(r"\s+as\s+.+$")
_PACKAGE_RX = re.compile(r"^\s*package\s+([A-Za-z_][\w.]*)")

REASON_DENYLIST = "denylisted"
REASON_PROJECT = "project"
REASON_FOREIGN = "foreign"
REASON_EMPTY = "empty"


# -----------------------------------------------------------------------------
# NORMALIZATION
# -----------------------------------------------------------------------------

def is_import_line(line: str) -> bool:
    """Check whether a source line is an import statement."""
    return IMPORT_LINE_RX.match(line) is not None


def extract_symbol(statement: str) -> str:
    """
    Reduce an import statement to its dotted qualified symbol.

    Strips the 'import' (and 'static') keyword, any trailing comment,
    the statement terminator and an 'as Alias' suffix.

    Example:
        'import proj.pkg.Foo as Bar;' -> 'proj.pkg.Foo'
    """
    symbol = _IMPORT_KEYWORD_RX.sub("", statement, count=1)
    symbol = symbol.split("//", 1)[0].strip()
    symbol = symbol.rstrip(";").strip()
    symbol = _ALIAS_RX.sub("", symbol)
    return symbol.replace("`", "").strip()


def parse_package_declaration(line: str) -> Optional[str]:
    """Return the package name declared on a 'package x.y.z' line, if any."""
    match = _PACKAGE_RX.match(line)
    if not match:
        return None
    return match.group(1).rstrip(";")


# -----------------------------------------------------------------------------
# CLASSIFICATION
# -----------------------------------------------------------------------------

def _has_prefix(symbol: str, prefix: str, *, ignore_case: bool) -> bool:
    """Segment-aware prefix test ('com.google' does not match 'com.googlex')."""
    if not prefix:
        return False
    prefix = prefix.rstrip(".")
    if ignore_case:
        symbol = symbol.lower()
        prefix = prefix.lower()
    return symbol == prefix or symbol.startswith(prefix + ".")


def classify_symbol(
        symbol: str,
        project_prefix: str,
        external_prefixes: Sequence[str],
) -> ImportClassification:
    """
    Classify an already normalized qualified symbol.

    Args:
        symbol: Dotted qualified symbol.
        project_prefix: Project namespace prefix (e.g. 'sg.com.sph').
        external_prefixes: Denylisted namespaces, compared case-insensitively.

    Returns:
        ImportClassification: internal only under the project prefix.
    """
    if not symbol:
        return ImportClassification(False, symbol, REASON_EMPTY)

    for prefix in external_prefixes:
        if _has_prefix(symbol, prefix, ignore_case=True):
            return ImportClassification(False, symbol, REASON_DENYLIST)

    if _has_prefix(symbol, project_prefix, ignore_case=False):
        return ImportClassification(True, symbol, REASON_PROJECT)

    return ImportClassification(False, symbol, REASON_FOREIGN)


def classify(
        statement: str,
        project_prefix: str,
        external_prefixes: Sequence[str],
) -> ImportClassification:
    """
    Classify a raw import statement as internal or external.

    Args:
        statement: Raw statement text, e.g. 'import proj.pkg.B'.
        project_prefix: Project namespace prefix.
        external_prefixes: Denylisted namespaces.

    Returns:
        ImportClassification: The decision and the extracted symbol.
    """
    return classify_symbol(extract_symbol(statement), project_prefix, external_prefixes)
