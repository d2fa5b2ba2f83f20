from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema, including help messages,
argument types, and defaults. Provides logic to translate raw argparse
namespaces into domain-compatible configuration overrides.
"""

import argparse
from typing import Any, Dict, List, Optional

from depmap4ai.domain.constants import MEMORY_POLICIES

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the DepMap4AI CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="depmap4ai",
        description=(
            "Follow the project-internal imports of an Android source file and "
            "collect every reachable file into a single LLM-ready context."
        ),
    )

    # --- Analysis Target ---
    p.add_argument(
        "project_root",
        help="Root directory of the project to analyze.",
    )
    p.add_argument(
        "entry_file",
        help="Source file the dependency traversal starts from.",
    )
    p.add_argument(
        "max_depth",
        nargs="?",
        type=int,
        default=None,
        help="Maximum traversal depth (negative or omitted = unbounded).",
    )

    # --- Output Management ---
    p.add_argument(
        "-o", "--output-base",
        dest="output_base_dir",
        default=None,
        help="Directory in which the timestamped run directory is created.",
    )
    p.add_argument(
        "--prefix",
        dest="output_dir_prefix",
        default=None,
        help="Name prefix of the run directory.",
    )

    # --- Import Classification ---
    p.add_argument(
        "--package",
        dest="project_package",
        default=None,
        help="Project namespace prefix (inferred from the entry file when omitted).",
    )

    # --- Resource Limits ---
    p.add_argument(
        "--max-file-size",
        dest="max_file_size",
        type=int,
        default=None,
        help="Skip files larger than this many bytes.",
    )
    p.add_argument(
        "--max-memory",
        dest="max_memory",
        type=int,
        default=None,
        help="Resident memory threshold in bytes.",
    )
    p.add_argument(
        "--memory-policy",
        dest="memory_policy",
        choices=list(MEMORY_POLICIES),
        default=None,
        help="What to do when the memory threshold is crossed.",
    )

    # --- Filtering & Resolution ---
    p.add_argument(
        "--exclude",
        dest="exclude_patterns",
        default=None,
        help="Comma-separated glob patterns matched against absolute paths.",
    )
    p.add_argument(
        "--ext",
        dest="source_extensions",
        default=None,
        help="Comma-separated source extensions whose imports are followed.",
    )
    p.add_argument(
        "--source-roots",
        dest="source_roots",
        default=None,
        help="Comma-separated source root segments (e.g. src/main/java).",
    )
    p.add_argument(
        "--model",
        dest="target_model",
        default=None,
        help="Model used for the token estimate of the combined artifact.",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the saved configuration file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Persist the effective configuration before running.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write the console log to this rotating file.",
    )

    # --- Format Selection ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the analysis result as JSON.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a domain configuration dictionary.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    overrides["project_root"] = args.project_root
    overrides["entry_file"] = args.entry_file
    overrides["max_depth"] = args.max_depth
    overrides["output_base_dir"] = args.output_base_dir
    overrides["output_dir_prefix"] = args.output_dir_prefix
    overrides["project_package"] = args.project_package

    overrides["max_file_size"] = args.max_file_size
    overrides["max_memory"] = args.max_memory
    overrides["memory_policy"] = args.memory_policy
    overrides["target_model"] = args.target_model

    if args.exclude_patterns:
        overrides["exclude_patterns"] = _split_csv(args.exclude_patterns)
    if args.source_extensions:
        overrides["source_extensions"] = _split_csv(args.source_extensions)
    if args.source_roots:
        overrides["source_roots"] = _split_csv(args.source_roots)

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """
    Convert a comma-separated string into a list of sanitized strings.
    """
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
