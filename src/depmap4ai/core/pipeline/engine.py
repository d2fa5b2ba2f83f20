from __future__ import annotations

"""
Core orchestration pipeline.

This module coordinates the entire analysis workflow:
1. Validates configuration.
2. Runs fatal pre-flight checks and prepares the run directory.
3. Attaches the per-run analysis log.
4. Counts the project's candidate files.
5. Traverses dependencies from the entry file.
6. Writes the summary and combined artifacts.
7. Reports the generated artifacts.
"""

import logging
from typing import Any, Dict, Optional

from depmap4ai.core.pipeline.stages.assembler import assemble_outputs
from depmap4ai.core.pipeline.stages.setup import prepare_environment
from depmap4ai.core.pipeline.stages.traversal import build_context, visit
from depmap4ai.core.pipeline.stages.validator import validate_config
from depmap4ai.domain.analysis_models import (
    AnalysisResult,
    create_error_result,
    create_success_result,
)
from depmap4ai.infra.fs import count_project_files, list_dir_entries
from depmap4ai.infra.logging import attach_run_log, detach_run_log

logger = logging.getLogger(__name__)


def run_analysis(config: Optional[Dict[str, Any]]) -> AnalysisResult:
    """
    Execute a full dependency analysis.

    Fatal input problems (invalid project root, missing entry file) are
    returned as a failed result before any traversal starts. Once traversal
    begins, per-file problems are logged and counted, never raised.

    Args:
        config: The configuration dictionary (raw or partial).

    Returns:
        AnalysisResult: Object containing status, artifact paths and metrics.
    """
    logger.debug("Analysis execution started.")

    # -------------------------------------------------------------------------
    # 1) Config validation
    # -------------------------------------------------------------------------
    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    # -------------------------------------------------------------------------
    # 2) Pre-flight checks & run directory
    # -------------------------------------------------------------------------
    error_result, env_context = prepare_environment(cfg)
    if error_result:
        return error_result

    paths = env_context["paths"]

    # -------------------------------------------------------------------------
    # 3) Run log
    # -------------------------------------------------------------------------
    try:
        run_handler, previous_level = attach_run_log(paths["log"])
    except OSError as e:
        msg = f"Failed to open run log {paths['log']}: {e}"
        logger.critical(msg)
        return create_error_result(
            msg, cfg, env_context["project_root"], env_context["entry_file"], env_context["output_dir"]
        )

    try:
        return _run_stages(cfg, env_context)
    finally:
        detach_run_log(run_handler, previous_level)


def _run_stages(cfg: Dict[str, Any], env_context: Dict[str, Any]) -> AnalysisResult:
    """Traverse, assemble and report for a prepared environment."""
    paths = env_context["paths"]
    project_root = env_context["project_root"]
    entry_file = env_context["entry_file"]

    logger.info("Starting analysis with:")
    logger.info(f"Project root: {project_root}")
    logger.info(f"Entry file: {entry_file}")
    logger.info(f"Max depth: {cfg['max_depth']}")
    logger.info(f"Project package: {env_context['project_package'] or '(none)'}")
    logger.info(f"Output directory: {env_context['output_dir']}")

    # -------------------------------------------------------------------------
    # 4) Project census
    # -------------------------------------------------------------------------
    census_exts = cfg["source_extensions"] + cfg["markup_extensions"] + cfg["build_extensions"]
    total_files = count_project_files(project_root, census_exts)
    logger.info(f"Total files found in project: {total_files}")

    # -------------------------------------------------------------------------
    # 5) Traversal
    # -------------------------------------------------------------------------
    logger.info("Starting main file processing")
    ctx = build_context(cfg, project_root, paths["processed"], env_context["project_package"])
    visited = visit(ctx, entry_file, 0)

    # -------------------------------------------------------------------------
    # 6) Summary & combined artifacts
    # -------------------------------------------------------------------------
    try:
        assembly = assemble_outputs(cfg, env_context)
    except OSError as e:
        msg = f"Failed to write summary artifacts: {e}"
        logger.error(msg)
        return create_error_result(msg, cfg, project_root, entry_file, env_context["output_dir"])

    # -------------------------------------------------------------------------
    # 7) Completion report
    # -------------------------------------------------------------------------
    logger.info("Analysis complete!")
    logger.info("Files generated:")
    logger.info(f"  Combined analysis: {paths['combined']}")
    logger.info(f"  Summary          : {paths['summary']}")
    logger.info(f"  Logs             : {paths['log']}")
    logger.info(f"  Processed files  : {paths['processed']}")
    logger.info("Output directory contents:")
    for line in list_dir_entries(env_context["output_dir"]):
        logger.info(f"  {line}")

    summary = {
        "output_dir": env_context["output_dir"],
        "project_files": total_files,
        "files": assembly["files"],
        "counters": dict(ctx.counters),
        "halted": ctx.halted,
        "memory_policy": cfg["memory_policy"],
    }

    return create_success_result(
        cfg, env_context, visited, ctx.counters,
        token_count=assembly["token_count"],
        summary_extra=summary,
    )
