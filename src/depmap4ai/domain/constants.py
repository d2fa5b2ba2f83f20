from __future__ import annotations

"""
Domain Constants.

Static vocabulary shared by the analysis components: default exclusion
globs, pruned directory names, the external namespace denylist, file-type
extension sets and the textual layout of generated artifacts.
"""

from typing import List

# -----------------------------------------------------------------------------
# RESOURCE LIMITS
# -----------------------------------------------------------------------------

DEFAULT_MAX_FILE_SIZE: int = 1024 * 1024  # 1 MiB
DEFAULT_MAX_MEMORY: int = 1024 * 1024 * 1024  # 1 GiB
UNBOUNDED_DEPTH: int = -1

MEMORY_POLICY_WARN = "warn"
MEMORY_POLICY_ABORT = "abort"
MEMORY_POLICIES = (MEMORY_POLICY_WARN, MEMORY_POLICY_ABORT)

# -----------------------------------------------------------------------------
# PATH FILTERING
# -----------------------------------------------------------------------------

DEFAULT_EXCLUDE_PATTERNS: List[str] = [
    "*/build/*",
    "*/test/*",
    "*/androidTest/*",
    "*/generated/*",
]

DEFAULT_PRUNE_DIRS: List[str] = ["build", "test", "androidTest", "generated"]

DEFAULT_SOURCE_ROOTS: List[str] = ["src/main/java", "src/main/kotlin"]

# -----------------------------------------------------------------------------
# FILE TYPES
# -----------------------------------------------------------------------------

DEFAULT_SOURCE_EXTENSIONS: List[str] = [".kt", ".java"]
DEFAULT_MARKUP_EXTENSIONS: List[str] = [".xml"]
DEFAULT_BUILD_EXTENSIONS: List[str] = [".gradle", ".kts"]

# -----------------------------------------------------------------------------
# IMPORT CLASSIFICATION
# -----------------------------------------------------------------------------

# Runtime, UI framework, JSON/DI and platform SDK namespaces never followed
DEFAULT_EXTERNAL_PREFIXES: List[str] = [
    "android",
    "androidx",
    "java",
    "javax",
    "kotlin",
    "kotlinx",
    "com.google",
    "org.json",
    "dagger",
    "javax.inject",
]

PACKAGE_INFERENCE_SEGMENTS: int = 3

# -----------------------------------------------------------------------------
# OUTPUT LAYOUT
# -----------------------------------------------------------------------------

DEFAULT_OUTPUT_DIR_PREFIX = "dependency_analysis"
PROCESSED_FILES_DIRNAME = "processed_files"
LOGS_DIRNAME = "logs"
RUN_LOG_FILENAME = "analysis.log"
SUMMARY_FILENAME = "analysis_summary.txt"
COMBINED_FILENAME = "combined_analysis.txt"

ARTIFACT_PATH_DELIMITER = "_"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
HEADER_DATE_FORMAT = "%a %b %d %H:%M:%S %Y"

DEFAULT_TARGET_MODEL = "gpt-4o"
