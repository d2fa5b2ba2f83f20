from __future__ import annotations

"""
Summary & Combine Stage.

Runs after traversal terminates:
1. Enumerates the per-file artifacts and sorts them by name.
2. Writes the summary artifact (run parameters + sorted file list).
3. Writes the combined artifact (summary + every artifact in sorted order).
4. Estimates the token density of the combined artifact.
"""

import logging
import os
import shutil
from datetime import datetime
from typing import Any, Dict, List

from depmap4ai.core.processing.tokenizer import count_tokens
from depmap4ai.domain.constants import DEFAULT_TARGET_MODEL, HEADER_DATE_FORMAT

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# ARTIFACT ENUMERATION
# -----------------------------------------------------------------------------

def list_materialized(processed_dir: str) -> List[str]:
    """
    List artifact filenames in the processed-files directory, sorted.
    """
    if not os.path.isdir(processed_dir):
        return []
    return sorted(
        name for name in os.listdir(processed_dir)
        if os.path.isfile(os.path.join(processed_dir, name))
    )


def render_summary(
        project_root: str,
        entry_file: str,
        max_depth: int,
        file_names: List[str],
        generated_at: datetime,
) -> str:
    """Render the summary artifact text."""
    lines = [
        "=== Dependency Analysis Summary ===",
        f"Generated    : {generated_at.strftime(HEADER_DATE_FORMAT)}",
        f"Project Root : {project_root}",
        f"Entry File   : {entry_file}",
        f"Max Depth    : {max_depth}",
        "",
        "=== Processed Files ===",
    ]
    lines.extend(file_names)
    return "\n".join(lines) + "\n"


# -----------------------------------------------------------------------------
# CORE ASSEMBLY LOGIC
# -----------------------------------------------------------------------------

def assemble_outputs(cfg: Dict[str, Any], env_context: Dict[str, Any]) -> Dict[str, Any]:
    """
    Write the summary and combined artifacts.

    Args:
        cfg: Validated configuration dictionary.
        env_context: Environment mapping produced by the setup stage.

    Returns:
        Dict[str, Any]: 'files' (sorted artifact names) and 'token_count'.

    Raises:
        OSError: If the summary or combined artifact cannot be written.
    """
    paths = env_context["paths"]
    file_names = list_materialized(paths["processed"])

    summary_text = render_summary(
        env_context["project_root"],
        env_context["entry_file"],
        int(cfg.get("max_depth", -1)),
        file_names,
        datetime.now(),
    )

    with open(paths["summary"], "w", encoding="utf-8") as f:
        f.write(summary_text)

    with open(paths["combined"], "w", encoding="utf-8") as outfile:
        outfile.write(summary_text)
        outfile.write("\n=== Detailed Analysis ===\n")
        for name in file_names:
            with open(os.path.join(paths["processed"], name), "r", encoding="utf-8", errors="replace") as infile:
                shutil.copyfileobj(infile, outfile)
            outfile.write("\n")

    token_count = 0
    try:
        target_model = cfg.get("target_model") or DEFAULT_TARGET_MODEL
        with open(paths["combined"], "r", encoding="utf-8") as f:
            token_count = count_tokens(f.read(), model=target_model)
        logger.info(f"Estimated token count ({target_model}): {token_count}")
    except Exception as e:
        logger.warning(f"Failed to count tokens: {e}")

    return {"files": file_names, "token_count": token_count}
