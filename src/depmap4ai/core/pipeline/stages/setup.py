from __future__ import annotations

"""
Pipeline Setup & Environment Preparation Stage.

Handles the initialization lifecycle of an analysis run:
1. Path normalization and fatal pre-flight validation (root, entry file).
2. Resolution of the effective project namespace prefix.
3. Creation of the timestamped run directory and its sub-directories.
4. Context mapping for downstream stages.
"""

import logging
import os
from typing import Any, Dict, Optional, Tuple

from depmap4ai.core.pipeline.components.extractor import sniff_package
from depmap4ai.domain.analysis_models import AnalysisResult, create_error_result
from depmap4ai.domain.constants import (
    COMBINED_FILENAME,
    LOGS_DIRNAME,
    PACKAGE_INFERENCE_SEGMENTS,
    PROCESSED_FILES_DIRNAME,
    RUN_LOG_FILENAME,
    SUMMARY_FILENAME,
)
from depmap4ai.infra.fs import build_run_dir_name, create_unique_dir, normalize_path

logger = logging.getLogger(__name__)


# ==============================================================================
# PROJECT NAMESPACE
# ==============================================================================

def infer_project_package(entry_file: str, segments: int = PACKAGE_INFERENCE_SEGMENTS) -> str:
    """
    Derive a project namespace prefix from the entry file's package declaration.

    Example:
        'package sg.com.sph.news.ui' -> 'sg.com.sph'

    Returns:
        str: Inferred prefix, or '' when the entry declares no package.
    """
    try:
        package = sniff_package(entry_file)
    except OSError as e:
        logger.warning(f"Cannot read package declaration from {entry_file}: {e}")
        return ""
    if not package:
        return ""
    return ".".join(package.split(".")[:segments])


# ==============================================================================
# ENVIRONMENT PREPARATION LOGIC
# ==============================================================================

def prepare_environment(cfg: Dict[str, Any]) -> Tuple[Optional[AnalysisResult], Dict[str, Any]]:
    """
    Validate inputs and create the run directory layout.

    Args:
        cfg: Validated configuration dictionary.

    Returns:
        Tuple[Optional[AnalysisResult], Dict[str, Any]]:
            An error result if a fatal check fails (and an empty context),
            else None and the environment context dictionary.
    """
    # --- 1. Fatal pre-flight validation ---
    cwd = os.getcwd()
    project_root = normalize_path(cfg.get("project_root", ""), cwd)

    if not os.path.isdir(project_root):
        msg = f"Project root '{project_root}' is not a directory."
        logger.error(msg)
        return create_error_result(msg, cfg, project_root), {}

    raw_entry = (cfg.get("entry_file") or "").strip()
    entry_file = normalize_path(raw_entry, cwd) if raw_entry else ""

    if not entry_file or not os.path.isfile(entry_file):
        msg = f"Entry file '{entry_file or raw_entry}' does not exist."
        logger.error(msg)
        return create_error_result(msg, cfg, project_root, entry_file), {}

    # --- 2. Project namespace ---
    project_package = cfg.get("project_package") or ""
    if not project_package:
        project_package = infer_project_package(entry_file)
        if project_package:
            logger.info(f"Project package inferred from entry file: {project_package}")
        else:
            logger.warning("No project package configured or declared; no import will be followed.")

    # --- 3. Run directory layout ---
    output_base_dir = normalize_path(cfg.get("output_base_dir", ""), cwd)
    try:
        os.makedirs(output_base_dir, exist_ok=True)
        output_dir = create_unique_dir(output_base_dir, build_run_dir_name(cfg["output_dir_prefix"]))
        processed_dir = os.path.join(output_dir, PROCESSED_FILES_DIRNAME)
        logs_dir = os.path.join(output_dir, LOGS_DIRNAME)
        os.makedirs(processed_dir)
        os.makedirs(logs_dir)
    except OSError as e:
        msg = f"Failed to create output directory under {output_base_dir}: {e}"
        logger.critical(msg)
        return create_error_result(msg, cfg, project_root, entry_file), {}

    paths = {
        "processed": processed_dir,
        "log": os.path.join(logs_dir, RUN_LOG_FILENAME),
        "summary": os.path.join(output_dir, SUMMARY_FILENAME),
        "combined": os.path.join(output_dir, COMBINED_FILENAME),
    }

    env_context = {
        "project_root": project_root,
        "entry_file": entry_file,
        "project_package": project_package,
        "output_dir": output_dir,
        "paths": paths,
    }

    logger.debug(f"Run directory prepared: {output_dir}")
    return None, env_context
