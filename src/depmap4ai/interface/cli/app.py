from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of logging, loading and merging
of configuration sources (defaults, persistent storage, and CLI overrides),
analysis execution, and result rendering.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from depmap4ai.core.pipeline.engine import run_analysis
from depmap4ai.core.pipeline.stages.validator import validate_config
from depmap4ai.domain.analysis_models import AnalysisResult
from depmap4ai.domain.config import get_default_config, load_config, save_config
from depmap4ai.infra.fs import normalize_path
from depmap4ai.infra.logging import LoggingConfig, configure_logging, get_logger
from depmap4ai.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 2 invalid input, 1 failure,
        130 interrupted).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console stderr, optional rotating diagnostic file)
    log_level = "DEBUG" if args.debug else "INFO"
    logging_conf = LoggingConfig(level=log_level, console=True, log_file=args.log_file)
    configure_logging(logging_conf)

    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 3. Resolve base configuration (Default vs Persistent state)
    if args.use_defaults:
        base_conf = get_default_config()
    else:
        base_conf = load_config()

    # 4. Map and merge command-line overrides
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)

    # 5. Schema validation and normalization
    clean_conf, warnings = validate_config(raw_conf, strict=False)

    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    # Short-circuit if configuration dump is requested
    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    if args.save_config:
        save_config(clean_conf)

    # 6. Pre-flight input verification (same normalization as the setup stage)
    cwd = os.getcwd()
    project_root = normalize_path(clean_conf.get("project_root", ""), cwd)
    if not os.path.isdir(project_root):
        msg = f"Project root '{project_root}' is not a directory."
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2

    raw_entry = (clean_conf.get("entry_file") or "").strip()
    entry_file = normalize_path(raw_entry, cwd) if raw_entry else ""
    if not entry_file or not os.path.isfile(entry_file):
        msg = f"Entry file '{entry_file or raw_entry}' does not exist."
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2

    # 7. Analysis execution phase
    try:
        result = run_analysis(clean_conf)
    except KeyboardInterrupt:
        msg = "Analysis interrupted by user."
        logger.warning(msg)
        print(msg, file=sys.stderr)
        return 130
    except Exception as e:
        msg = f"Analysis failed: {e}"
        logger.critical(msg, exc_info=True)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 1

    # 8. Output rendering phase
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result)

    return 0 if result.ok else 1

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys are merged; None means "not given on the command line".
    """
    out = dict(base)
    keys_to_merge = [
        "project_root", "entry_file", "max_depth", "output_base_dir",
        "output_dir_prefix", "project_package", "max_file_size", "max_memory",
        "memory_policy", "target_model", "exclude_patterns",
        "source_extensions", "source_roots",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: AnalysisResult) -> None:
    """
    Format and print the analysis result to the standard output.

    Args:
        result: The analysis result to render.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    summary = result.summary

    print("Analysis complete.")
    print(f"Output directory: {result.output_dir}")
    print(f"Project package: {result.project_package or '(none)'}")

    if summary.get("halted"):
        print("Traversal halted early: memory threshold exceeded.")

    print(f"Files in project: {summary.get('project_files', 0)}")
    print(f"Files collected: {len(result.visited)}")
    if result.token_count > 0:
        print(f"Estimated Token Density: {result.token_count:,}")

    stats_keys = {
        "cached": "Already visited",
        "rejected": "Rejected by guard",
        "depth_exceeded": "Beyond max depth",
        "external": "External imports",
        "unresolved": "Unresolved imports",
        "errors": "I/O errors",
    }
    for key, label in stats_keys.items():
        if result.counters.get(key):
            print(f"{label}: {result.counters[key]}")

    print("\nGenerated artifacts:")
    print(f"  - combined: {result.combined_file}")
    print(f"  - summary: {result.summary_file}")
    print(f"  - log: {result.log_file}")
    print(f"  - processed files: {result.processed_files_dir}")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
