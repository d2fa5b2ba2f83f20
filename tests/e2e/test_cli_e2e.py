from __future__ import annotations

"""
End-to-End (E2E) CLI Tests.

Verifies the application's external behavior by invoking the entry point
script via subprocess. These tests validate argument parsing, exit codes,
stream output (stdout/stderr), and file system side effects (run directory
and artifacts).
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SRC_DIR = PROJECT_ROOT / "src"
ENTRY_POINT = SRC_DIR / "depmap4ai" / "main.py"


def run_cli(args: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    """
    Helper to execute the CLI in a separate process.

    Injects the 'src' directory into PYTHONPATH to ensure the package
    is resolvable without being installed in site-packages.

    Args:
        args: List of command line arguments (excluding 'python' and script path).
        cwd: Optional working directory for the subprocess.

    Returns:
        subprocess.CompletedProcess: The result object containing returncode, stdout, and stderr.
    """
    env = os.environ.copy()
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")

    cmd = [sys.executable, str(ENTRY_POINT)] + args

    return subprocess.run(
        cmd,
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
        encoding="utf-8"
    )


def test_cli_json_run(android_project) -> None:
    """TC-01: A full run exits 0 and reports every reachable file."""
    out_dir = android_project["output"]
    proc = run_cli([
        str(android_project["root"]), str(android_project["A"]),
        "-o", str(out_dir), "--package", "proj.pkg", "--use-defaults", "--json",
    ])

    assert proc.returncode == 0, proc.stderr
    payload = json.loads(proc.stdout)

    assert payload["ok"] is True
    assert [os.path.basename(v["path"]) for v in payload["visited"]] == ["A.kt", "B.kt", "C.kt"]
    assert Path(payload["combined_file"]).exists()
    assert Path(payload["log_file"]).exists()
    assert Path(payload["output_dir"]).parent == out_dir


def test_cli_depth_argument(android_project) -> None:
    """TC-02: The optional third positional bounds the traversal."""
    proc = run_cli([
        str(android_project["root"]), str(android_project["A"]), "1",
        "-o", str(android_project["output"]), "--use-defaults", "--json",
    ])

    assert proc.returncode == 0, proc.stderr
    payload = json.loads(proc.stdout)
    assert payload["max_depth"] == 1
    assert [v["depth"] for v in payload["visited"]] == [0, 1]


def test_cli_human_summary(android_project) -> None:
    proc = run_cli([
        str(android_project["root"]), str(android_project["A"]),
        "-o", str(android_project["output"]), "--use-defaults",
    ])

    assert proc.returncode == 0, proc.stderr
    assert "Analysis complete." in proc.stdout
    assert "Files collected: 3" in proc.stdout
    assert "Starting analysis with:" in proc.stderr


def test_cli_invalid_root_exit_code(tmp_path: Path) -> None:
    """TC-03: An invalid project root is a usage failure (exit 2)."""
    proc = run_cli([str(tmp_path / "missing"), str(tmp_path / "A.kt"), "--use-defaults"])

    assert proc.returncode == 2
    assert "is not a directory" in proc.stderr


def test_cli_missing_entry_exit_code(android_project) -> None:
    proc = run_cli([
        str(android_project["root"]), str(android_project["root"] / "Nope.kt"),
        "-o", str(android_project["output"]), "--use-defaults",
    ])

    assert proc.returncode == 2
    assert "does not exist" in proc.stderr
    assert not android_project["output"].exists()


def test_cli_dump_config(android_project) -> None:
    proc = run_cli([
        str(android_project["root"]), str(android_project["A"]),
        "--use-defaults", "--dump-config", "--memory-policy", "abort", "--exclude", "*/gen/*",
    ])

    assert proc.returncode == 0, proc.stderr
    cfg = json.loads(proc.stdout)
    assert cfg["memory_policy"] == "abort"
    assert cfg["exclude_patterns"] == ["*/gen/*"]
    assert cfg["entry_file"] == str(android_project["A"])


@pytest.mark.parametrize("flag", ["--help"])
def test_cli_help(flag: str) -> None:
    proc = run_cli([flag])

    assert proc.returncode == 0
    assert "project_root" in proc.stdout
