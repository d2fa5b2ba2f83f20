from __future__ import annotations

"""
Unit tests for the Pipeline Setup stage.

Validates fatal pre-flight checks, project namespace inference and the
run directory layout.
"""

import os
from pathlib import Path

from depmap4ai.core.pipeline.stages.setup import infer_project_package, prepare_environment
from depmap4ai.core.pipeline.stages.validator import validate_config


def _prepare(cfg):
    clean, _ = validate_config(cfg)
    return prepare_environment(clean)


def test_invalid_project_root(tmp_path: Path, analysis_config) -> None:
    """TC-01: A missing root returns an error result before anything is created."""
    analysis_config["project_root"] = str(tmp_path / "void")

    result, context = _prepare(analysis_config)

    assert result is not None
    assert result.ok is False
    assert "is not a directory" in result.error
    assert context == {}
    assert not (tmp_path / "out").exists()


def test_missing_entry_file(tmp_path: Path, analysis_config) -> None:
    """TC-02: A missing entry file is fatal."""
    analysis_config["entry_file"] = str(tmp_path / "Nope.kt")

    result, _ = _prepare(analysis_config)

    assert result is not None
    assert "does not exist" in result.error


def test_run_directory_layout(analysis_config, android_project) -> None:
    """TC-03: Timestamped run dir with processed_files/ and logs/."""
    result, context = _prepare(analysis_config)

    assert result is None
    out_dir = context["output_dir"]
    assert os.path.dirname(out_dir) == str(android_project["output"])
    assert os.path.basename(out_dir).startswith("dependency_analysis_")
    assert os.path.isdir(context["paths"]["processed"])
    assert os.path.isdir(os.path.dirname(context["paths"]["log"]))
    assert context["paths"]["summary"].endswith("analysis_summary.txt")
    assert context["paths"]["combined"].endswith("combined_analysis.txt")
    assert context["project_package"] == "proj.pkg"


def test_two_runs_get_distinct_directories(analysis_config) -> None:
    _, first = _prepare(analysis_config)
    _, second = _prepare(analysis_config)

    assert first["output_dir"] != second["output_dir"]


def test_project_package_inferred_when_empty(analysis_config) -> None:
    analysis_config["project_package"] = ""

    _, context = _prepare(analysis_config)

    assert context["project_package"] == "proj.pkg"


def test_infer_project_package_keeps_three_segments(tmp_path: Path, make_file) -> None:
    f = make_file(tmp_path / "Deep.kt", "package sg.com.sph.news.ui\n")
    assert infer_project_package(str(f)) == "sg.com.sph"

    none = make_file(tmp_path / "Bare.kt", "class Bare\n")
    assert infer_project_package(str(none)) == ""
