from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared configuration dictionaries used across unit tests.
3. A synthetic Android-style project tree built under tmp_path.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from depmap4ai.domain.config import get_default_config  # noqa: E402


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def write_file(path: Path, content: str) -> Path:
    """Create parent directories and write text content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def android_project(tmp_path: Path) -> Dict[str, Path]:
    """
    Build a small Android-style project.

    Layout:
        app/src/main/java/proj/pkg/A.kt      imports B and android.os.Bundle
        app/src/main/java/proj/pkg/B.kt      imports util.C
        app/src/main/java/proj/pkg/util/C.kt imports A (cycle)
        app/src/main/res/layout/activity_main.xml
        app/build.gradle

    Returns:
        Dict[str, Path]: Named paths of the project.
    """
    root = tmp_path / "project"
    java = root / "app" / "src" / "main" / "java" / "proj" / "pkg"

    a = write_file(java / "A.kt", (
        "package proj.pkg\n"
        "\n"
        "import proj.pkg.B\n"
        "import android.os.Bundle\n"
        "\n"
        "class A {\n"
        "    val b = B()\n"
        "}\n"
    ))
    b = write_file(java / "B.kt", (
        "package proj.pkg\n"
        "\n"
        "import proj.pkg.util.C\n"
        "\n"
        "class B\n"
    ))
    c = write_file(java / "util" / "C.kt", (
        "package proj.pkg.util\n"
        "\n"
        "import proj.pkg.A\n"
        "\n"
        "class C\n"
    ))
    layout = write_file(root / "app" / "src" / "main" / "res" / "layout" / "activity_main.xml", (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        "<LinearLayout>\n"
        "</LinearLayout>\n"
    ))
    gradle = write_file(root / "app" / "build.gradle", "apply plugin: 'com.android.application'\n")

    return {
        "root": root,
        "A": a,
        "B": b,
        "C": c,
        "layout": layout,
        "gradle": gradle,
        "output": tmp_path / "out",
    }


@pytest.fixture
def analysis_config(android_project: Dict[str, Path]) -> Dict[str, Any]:
    """
    Return a complete configuration dictionary pointing at android_project.

    Returns:
        Dict[str, Any]: Configuration ready for run_analysis.
    """
    cfg = get_default_config()
    cfg.update({
        "project_root": str(android_project["root"]),
        "entry_file": str(android_project["A"]),
        "output_base_dir": str(android_project["output"]),
        "project_package": "proj.pkg",
    })
    return cfg


@pytest.fixture
def make_file():
    """Expose write_file to tests as a fixture."""
    return write_file
