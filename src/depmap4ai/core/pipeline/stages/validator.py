from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper for the pipeline, ensuring that the configuration
dictionary conforms to the expected schema. Handles type coercion,
extension normalization and default value injection.
"""

import logging
from typing import Any, Dict, List, Tuple

from depmap4ai.domain.config import get_default_config
from depmap4ai.domain.constants import MEMORY_POLICIES, MEMORY_POLICY_WARN, UNBOUNDED_DEPTH

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Converts untrusted inputs (CLI, stored JSON) into strictly typed
    parameters and fills missing keys with domain defaults.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and
                                          a list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    # 1. Base Type Validation
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    # 2. Schema Definition (Declarative mapping)
    string_fields = [
        "project_root", "entry_file", "output_base_dir", "output_dir_prefix",
        "project_package", "memory_policy", "target_model",
    ]

    int_fields = ["max_depth", "max_file_size", "max_memory"]

    list_fields = [
        "external_prefixes", "exclude_patterns", "prune_dirs", "source_roots",
        "source_extensions", "markup_extensions", "build_extensions",
    ]

    # 3. Field Processing & Normalization
    for field in string_fields:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    for field in int_fields:
        merged[field] = _as_int(merged.get(field), defaults[field], field, warnings, strict)

    for field in list_fields:
        merged[field] = _as_list_str(merged.get(field), defaults[field], field, warnings, strict)

    # 4. Domain-Specific Normalization
    for field in ("source_extensions", "markup_extensions", "build_extensions"):
        merged[field] = _normalize_extensions(merged[field], defaults[field], warnings, strict)

    if merged["max_depth"] < 0:
        merged["max_depth"] = UNBOUNDED_DEPTH

    for field in ("max_file_size", "max_memory"):
        if merged[field] <= 0:
            msg = f"Invalid field '{field}': must be positive."
            if strict:
                raise ValueError(msg)
            warnings.append(f"{msg} Using fallback.")
            merged[field] = defaults[field]

    policy = merged["memory_policy"].lower()
    if policy not in MEMORY_POLICIES:
        msg = f"Invalid memory_policy '{merged['memory_policy']}': expected one of {MEMORY_POLICIES}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using '{MEMORY_POLICY_WARN}'.")
        policy = MEMORY_POLICY_WARN
    merged["memory_policy"] = policy

    merged["project_package"] = merged["project_package"].strip(".")
    merged["source_roots"] = [r.replace("\\", "/").strip("/") for r in merged["source_roots"]]

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Coerce numeric inputs (and numeric strings) into native integers."""
    if value is None:
        return fallback
    if isinstance(value, bool):
        msg = f"Invalid field '{field}': expected int, received bool."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback
    if isinstance(value, int):
        return value

    if not strict:
        if isinstance(value, float) and value.is_integer():
            warnings.append(f"Field '{field}' converted from float {value} to int.")
            return int(value)
        if isinstance(value, str):
            try:
                converted = int(value.strip())
            except ValueError:
                pass
            else:
                warnings.append(f"Field '{field}' converted from '{value}' to int.")
                return converted

    msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure input is a list of sanitized strings, supporting CSV parsing."""
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        if items:
            warnings.append(f"Field '{field}' converted from CSV string to list.")
            return items
        return list(fallback)

    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: DOMAIN NORMALIZATION
# -----------------------------------------------------------------------------

def _normalize_extensions(exts: List[str], fallback: List[str], warnings: List[str], strict: bool) -> List[str]:
    """Ensure all file extensions are prefixed with a dot."""
    out: List[str] = []
    for ext in exts:
        e = ext.strip()
        if not e:
            continue
        if not e.startswith("."):
            if strict:
                raise ValueError(f"Invalid extension '{ext}': must start with '.'.")
            warnings.append(f"Extension '{ext}' corrected to '.{e}'.")
            e = "." + e
        out.append(e)
    return out if out else list(fallback)
