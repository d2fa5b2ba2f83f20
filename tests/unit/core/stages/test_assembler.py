from __future__ import annotations

"""
Unit tests for the Summary & Combine stage.

Verifies the summary layout, sorted artifact ordering in the combined
artifact, and token estimation failure handling.
"""

from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from depmap4ai.core.pipeline.stages.assembler import (
    assemble_outputs,
    list_materialized,
    render_summary,
)

_COUNT_TOKENS = "depmap4ai.core.pipeline.stages.assembler.count_tokens"


@pytest.fixture
def env_context(tmp_path: Path) -> dict:
    """Provides a run directory with two artifacts written out of order."""
    run_dir = tmp_path / "run"
    processed = run_dir / "processed_files"
    processed.mkdir(parents=True)

    (processed / "b_B.kt").write_text("=== File: b/B.kt ===\nBBB\n", encoding="utf-8")
    (processed / "a_A.kt").write_text("=== File: a/A.kt ===\nAAA\n", encoding="utf-8")

    return {
        "project_root": "/project",
        "entry_file": "/project/a/A.kt",
        "project_package": "proj",
        "output_dir": str(run_dir),
        "paths": {
            "processed": str(processed),
            "log": str(run_dir / "logs" / "analysis.log"),
            "summary": str(run_dir / "analysis_summary.txt"),
            "combined": str(run_dir / "combined_analysis.txt"),
        },
    }


def test_render_summary_layout():
    text = render_summary("/p", "/p/A.kt", -1, ["x.kt", "y.kt"], datetime(2024, 1, 31, 9, 5, 7))

    assert text == (
        "=== Dependency Analysis Summary ===\n"
        "Generated    : Wed Jan 31 09:05:07 2024\n"
        "Project Root : /p\n"
        "Entry File   : /p/A.kt\n"
        "Max Depth    : -1\n"
        "\n"
        "=== Processed Files ===\n"
        "x.kt\n"
        "y.kt\n"
    )


def test_list_materialized_sorted(env_context: dict) -> None:
    assert list_materialized(env_context["paths"]["processed"]) == ["a_A.kt", "b_B.kt"]


def test_list_materialized_missing_dir(tmp_path: Path) -> None:
    assert list_materialized(str(tmp_path / "nope")) == []


def test_assemble_outputs_combines_in_sorted_order(env_context: dict) -> None:
    """TC-01: Combined artifact is summary, marker, then artifacts by name."""
    with patch(_COUNT_TOKENS, return_value=123):
        res = assemble_outputs({"max_depth": 3, "target_model": "gpt-4o"}, env_context)

    assert res == {"files": ["a_A.kt", "b_B.kt"], "token_count": 123}

    summary = Path(env_context["paths"]["summary"]).read_text(encoding="utf-8")
    combined = Path(env_context["paths"]["combined"]).read_text(encoding="utf-8")

    assert "Max Depth    : 3" in summary
    assert summary.endswith("=== Processed Files ===\na_A.kt\nb_B.kt\n")
    assert combined.startswith(summary)
    detail = combined[len(summary):]
    assert detail.startswith("\n=== Detailed Analysis ===\n")
    assert detail.index("AAA") < detail.index("BBB")


def test_assemble_outputs_token_failure_is_not_fatal(env_context: dict, caplog) -> None:
    """TC-02: A tokenizer crash leaves the artifacts in place and reports 0."""
    with patch(_COUNT_TOKENS, side_effect=RuntimeError("encoder exploded")):
        res = assemble_outputs({"max_depth": -1}, env_context)

    assert res["token_count"] == 0
    assert Path(env_context["paths"]["combined"]).exists()
    assert "Failed to count tokens" in caplog.text


def test_assemble_outputs_with_no_artifacts(env_context: dict) -> None:
    for f in Path(env_context["paths"]["processed"]).iterdir():
        f.unlink()

    with patch(_COUNT_TOKENS, return_value=0):
        res = assemble_outputs({"max_depth": -1}, env_context)

    assert res["files"] == []
    combined = Path(env_context["paths"]["combined"]).read_text(encoding="utf-8")
    assert combined.endswith("=== Processed Files ===\n\n=== Detailed Analysis ===\n")
