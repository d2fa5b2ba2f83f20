from __future__ import annotations

"""
Analysis Domain Data Models.

Defines the records exchanged between the traversal components and the
result object handed back to the interface layer (CLI).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# TRAVERSAL RECORDS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class VisitRecord:
    """
    A file materialized during the run.

    Attributes:
        path: Absolute path of the file.
        depth: Depth at first visit (entry file = 0).
        parent: Absolute path of the file that referenced it (None for the entry).
    """
    path: str
    depth: int
    parent: Optional[str] = None


@dataclass(frozen=True)
class ImportReference:
    """
    A raw reference found inside a file. Never persisted.

    Attributes:
        statement: Raw text (import line, attribute value or tag name).
        source_file: Absolute path of the file it was found in.
        line_number: 1-based line number, if known.
        kind: 'import', 'layout' or 'class'.
    """
    statement: str
    source_file: str
    line_number: Optional[int] = None
    kind: str = "import"


@dataclass(frozen=True)
class ResolvedDependency:
    """An ImportReference paired with the file it maps to (None if unresolved)."""
    reference: ImportReference
    path: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.path is not None


@dataclass(frozen=True)
class ImportClassification:
    """
    Outcome of classifying an import statement.

    Attributes:
        internal: True when the import belongs to the project namespace.
        symbol: Dotted qualified symbol (aliases and terminators stripped).
        reason: Short tag explaining the decision.
    """
    internal: bool
    symbol: str
    reason: str = ""


@dataclass(frozen=True)
class GuardDecision:
    """
    Verdict of the Resource Guard for one candidate file.

    Attributes:
        proceed: True when the file may be materialized.
        reason: '' when proceeding, else 'excluded-pattern', 'too-large' or 'unreadable'.
        detail: Human readable context (matched pattern, size).
    """
    proceed: bool
    reason: str = ""
    detail: str = ""


SKIP_EXCLUDED = "excluded-pattern"
SKIP_TOO_LARGE = "too-large"
SKIP_UNREADABLE = "unreadable"
SKIP_COLLISION = "artifact-collision"

# -----------------------------------------------------------------------------
# RESULT MODEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AnalysisResult:
    """
    Unified result object of a complete analysis run.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        project_root: Normalized project root.
        entry_file: Normalized entry file.
        max_depth: Depth bound used (-1 = unbounded).
        project_package: Project namespace prefix actually used.
        output_dir: Run directory containing all artifacts.
        processed_files_dir: Directory of per-file artifacts.
        log_file: Path of the run log.
        summary_file: Path of the summary artifact.
        combined_file: Path of the combined artifact.
        visited: Materialized files in discovery order.
        counters: Per-outcome counters of the traversal.
        token_count: Estimated token density of the combined artifact.
        summary: Technical execution summary.
    """
    ok: bool
    error: str

    project_root: str
    entry_file: str
    max_depth: int
    project_package: str

    output_dir: str = ""
    processed_files_dir: str = ""
    log_file: str = ""
    summary_file: str = ""
    combined_file: str = ""

    visited: List[VisitRecord] = field(default_factory=list)
    counters: Dict[str, int] = field(default_factory=dict)
    token_count: int = 0

    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        cfg: Dict[str, Any],
        project_root: str = "",
        entry_file: str = "",
        output_dir: str = "",
) -> AnalysisResult:
    """
    Create a failed analysis result instance.

    Args:
        error: Detailed error description.
        cfg: The configuration used during the failed run.
        project_root: The normalized project root, if known.
        entry_file: The normalized entry file, if known.
        output_dir: The run directory, if it was already created.

    Returns:
        AnalysisResult: An immutable error result object.
    """
    return AnalysisResult(
        ok=False,
        error=error,
        project_root=project_root or str(cfg.get("project_root", "")),
        entry_file=entry_file or str(cfg.get("entry_file", "")),
        max_depth=int(cfg.get("max_depth", -1)),
        project_package=str(cfg.get("project_package", "")),
        output_dir=output_dir,
    )


def create_success_result(
        cfg: Dict[str, Any],
        env_context: Dict[str, Any],
        visited: List[VisitRecord],
        counters: Dict[str, int],
        token_count: int = 0,
        summary_extra: Optional[Dict[str, Any]] = None,
) -> AnalysisResult:
    """
    Create a successful analysis result instance.

    Args:
        cfg: Final configuration used during execution.
        env_context: Environment mapping produced by the setup stage.
        visited: Visit records in discovery order.
        counters: Traversal counters.
        token_count: Token estimate of the combined artifact.
        summary_extra: Final execution metrics.

    Returns:
        AnalysisResult: An immutable success result object.
    """
    paths = env_context["paths"]
    return AnalysisResult(
        ok=True,
        error="",
        project_root=env_context["project_root"],
        entry_file=env_context["entry_file"],
        max_depth=int(cfg.get("max_depth", -1)),
        project_package=env_context["project_package"],
        output_dir=env_context["output_dir"],
        processed_files_dir=paths["processed"],
        log_file=paths["log"],
        summary_file=paths["summary"],
        combined_file=paths["combined"],
        visited=list(visited),
        counters=dict(counters),
        token_count=token_count,
        summary=summary_extra or {},
    )
