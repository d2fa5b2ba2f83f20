from __future__ import annotations

"""
Integration tests for the analysis engine.

Runs run_analysis end to end on a synthetic Android project and checks the
run directory, the artifacts, the run log and the result object.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from depmap4ai.core.pipeline.engine import run_analysis

_COUNT_TOKENS = "depmap4ai.core.pipeline.stages.assembler.count_tokens"


@pytest.fixture
def two_file_project(tmp_path: Path, make_file):
    """A.kt imports proj.pkg.B and android.os.Bundle; B.kt has its own import."""
    java = tmp_path / "project" / "app" / "src" / "main" / "java" / "proj" / "pkg"
    a = make_file(java / "A.kt", (
        "package proj.pkg\n"
        "import proj.pkg.B\n"
        "import android.os.Bundle\n"
        "class A(val b: B)\n"
    ))
    b = make_file(java / "B.kt", (
        "package proj.pkg\n"
        "import kotlin.collections.List\n"
        "class B\n"
    ))
    return {"root": tmp_path / "project", "A": a, "B": b, "out": tmp_path / "out"}


def _config(project, **extra):
    cfg = {
        "project_root": str(project["root"]),
        "entry_file": str(project["A"]),
        "output_base_dir": str(project["out"]),
        "project_package": "proj.pkg",
    }
    cfg.update(extra)
    return cfg


def test_entry_and_direct_dependency_are_combined(two_file_project) -> None:
    """TC-01: B is materialized at depth 1, Bundle is ignored, imports are stripped."""
    with patch(_COUNT_TOKENS, return_value=321):
        result = run_analysis(_config(two_file_project))

    assert result.ok is True
    assert [(os.path.basename(r.path), r.depth) for r in result.visited] == [("A.kt", 0), ("B.kt", 1)]
    assert result.counters["external"] == 2
    assert result.token_count == 321

    combined = Path(result.combined_file).read_text(encoding="utf-8")
    assert "=== File: app/src/main/java/proj/pkg/A.kt ===" in combined
    assert "=== File: app/src/main/java/proj/pkg/B.kt ===" in combined
    assert "class A(val b: B)" in combined
    assert "class B" in combined
    detail = combined.split("=== Detailed Analysis ===", 1)[1]
    assert "import " not in detail


def test_run_directory_contents(two_file_project) -> None:
    with patch(_COUNT_TOKENS, return_value=0):
        result = run_analysis(_config(two_file_project))

    run_dir = Path(result.output_dir)
    assert run_dir.parent == two_file_project["out"]
    assert sorted(os.listdir(run_dir)) == [
        "analysis_summary.txt", "combined_analysis.txt", "logs", "processed_files",
    ]
    assert sorted(os.listdir(result.processed_files_dir)) == [
        "app_src_main_java_proj_pkg_A.kt",
        "app_src_main_java_proj_pkg_B.kt",
    ]

    summary = Path(result.summary_file).read_text(encoding="utf-8")
    assert f"Entry File   : {two_file_project['A']}" in summary
    assert "Max Depth    : -1" in summary
    assert result.summary["files"] == sorted(os.listdir(result.processed_files_dir))
    assert result.summary["project_files"] == 2
    assert result.summary["halted"] is False


def test_run_log_records_decisions(two_file_project) -> None:
    with patch(_COUNT_TOKENS, return_value=0):
        result = run_analysis(_config(two_file_project))

    log_text = Path(result.log_file).read_text(encoding="utf-8")

    assert "[INFO] Starting analysis with:" in log_text
    assert "[DEBUG] Skipping non-project import: import android.os.Bundle" in log_text
    assert "[DEBUG] Processing project import: import proj.pkg.B" in log_text
    assert "[INFO] Analysis complete!" in log_text
    assert "processed_files/" in log_text


def test_depth_zero_materializes_only_entry(two_file_project) -> None:
    with patch(_COUNT_TOKENS, return_value=0):
        result = run_analysis(_config(two_file_project, max_depth=0))

    assert [os.path.basename(r.path) for r in result.visited] == ["A.kt"]
    assert os.listdir(result.processed_files_dir) == ["app_src_main_java_proj_pkg_A.kt"]


def test_package_inferred_from_entry(two_file_project) -> None:
    with patch(_COUNT_TOKENS, return_value=0):
        result = run_analysis(_config(two_file_project, project_package=""))

    assert result.project_package == "proj.pkg"
    assert len(result.visited) == 2


def test_abort_policy_still_writes_summary(two_file_project) -> None:
    with patch(_COUNT_TOKENS, return_value=0):
        with patch(
                "depmap4ai.core.pipeline.components.guard.get_resident_memory_bytes",
                return_value=4 * 1024 * 1024 * 1024,
        ):
            result = run_analysis(_config(two_file_project, memory_policy="abort"))

    assert result.ok is True
    assert result.summary["halted"] is True
    assert result.visited == []
    assert Path(result.combined_file).exists()


def test_invalid_root_fails_before_traversal(two_file_project, tmp_path) -> None:
    result = run_analysis(_config(two_file_project, project_root=str(tmp_path / "missing")))

    assert result.ok is False
    assert "is not a directory" in result.error
    assert not two_file_project["out"].exists()


def test_missing_entry_fails(two_file_project, tmp_path) -> None:
    result = run_analysis(_config(two_file_project, entry_file=str(tmp_path / "Nope.kt")))

    assert result.ok is False
    assert "does not exist" in result.error
