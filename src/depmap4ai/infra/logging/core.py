from __future__ import annotations

"""
Logging Core Orchestrator.

Maintains the idempotent lifecycle of the logging subsystem. Console and
optional diagnostic-file output go through a QueueHandler/QueueListener
pair so I/O never blocks the traversal thread. The per-run analysis log is
attached separately and synchronously, so it is complete on disk as soon as
the run returns.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional, Tuple

from depmap4ai.infra.logging.config import (
    _LEVEL_MAP,
    RUN_LOG_DATEFMT,
    RUN_LOG_FMT,
    LoggingConfig,
)
from depmap4ai.infra.logging.handlers import (
    LevelAliasFormatter,
    _create_rotating_file_handler,
    _ensure_parent_dir,
    _is_our_handler,
    _tag_handler,
)

# Internal state flags for idempotency and lifecycle tracking
_CONFIGURED_FLAG_ATTR: str = "_depmap4ai_configured"
_QUEUE_LISTENER_ATTR: str = "_depmap4ai_queue_listener"

PACKAGE_LOGGER_NAME = "depmap4ai"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Execute idempotent configuration of the root logger using non-blocking I/O.

    Checks internal flags to avoid redundant handler attachments unless
    explicit re-configuration is requested.

    Args:
        cfg: Structural configuration for the logging system.
        force: If True, bypass idempotency checks and re-initialize handlers.

    Returns:
        logging.Logger: The initialized root logger instance.
    """
    root = logging.getLogger()

    try:
        # 1. Idempotency Check
        already_configured = bool(getattr(root, _CONFIGURED_FLAG_ATTR, False))
        if already_configured and not force:
            return root

        level_int = _parse_level(cfg.level)
        root.setLevel(level_int)

        # Cleanup existing infrastructure to prevent handler leakage
        _remove_our_handlers(root)
        _stop_existing_listener(root)

        # 2. Sinks drained by the listener thread
        sinks = _build_sinks(cfg, level_int)
        if not sinks:
            return root

        # 3. Single tagged QueueHandler in front of all sinks
        log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
        queue_handler = QueueHandler(log_queue)
        _tag_handler(queue_handler)
        root.addHandler(queue_handler)

        listener = QueueListener(log_queue, *sinks, respect_handler_level=True)
        listener.start()

        setattr(root, _QUEUE_LISTENER_ATTR, listener)
        setattr(root, _CONFIGURED_FLAG_ATTR, True)

        # Flush queued records on interpreter shutdown
        atexit.register(_safe_stop_listener, listener)

        return root

    # Fallback to emergency console logging if the infrastructure fails
    except Exception:
        fallback = logging.getLogger()
        fallback.setLevel(logging.INFO)
        _remove_our_handlers(fallback)

        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter("CRITICAL FALLBACK | %(levelname)s | %(message)s"))
        _tag_handler(sh)
        fallback.addHandler(sh)

        fallback.warning("Diagnostic infrastructure failed. Switched to emergency console.")
        return fallback


def get_logger(name: str) -> logging.Logger:
    """
    Acquire a named logger instance compliant with the global configuration.

    Args:
        name: Hierarchical name for the logger (usually __name__).

    Returns:
        logging.Logger: The requested logger instance.
    """
    return logging.getLogger(name)


def attach_run_log(log_file: str) -> Tuple[logging.Handler, int]:
    """
    Attach the per-run analysis log to the package logger.

    The package logger is lowered to DEBUG so the file receives every
    per-file decision; console verbosity is governed by its own handler
    level and does not change.

    Args:
        log_file: Absolute path of the run log.

    Returns:
        Tuple[logging.Handler, int]: The handler and the previous package
        logger level, both needed by detach_run_log.

    Raises:
        OSError: If the log file cannot be opened.
    """
    _ensure_parent_dir(log_file)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(LevelAliasFormatter(RUN_LOG_FMT, datefmt=RUN_LOG_DATEFMT))
    _tag_handler(handler)

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    previous_level = package_logger.level
    package_logger.setLevel(logging.DEBUG)
    package_logger.addHandler(handler)
    return handler, previous_level


def detach_run_log(handler: logging.Handler, previous_level: int) -> None:
    """
    Detach and close a handler returned by attach_run_log.

    Args:
        handler: The run log handler.
        previous_level: Package logger level to restore.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.removeHandler(handler)
    package_logger.setLevel(previous_level)
    handler.close()


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _build_sinks(cfg: LoggingConfig, level_int: int) -> List[logging.Handler]:
    """Create the console and optional rotating-file handlers for the listener."""
    sinks: List[logging.Handler] = []

    if cfg.console:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(level_int)
        console.setFormatter(LevelAliasFormatter(cfg.console_fmt, datefmt=cfg.datefmt))
        _tag_handler(console)
        sinks.append(console)

    if cfg.log_file:
        diagnostic = _create_rotating_file_handler(
            cfg.log_file,
            level_int,
            logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count,
        )
        if diagnostic:
            sinks.append(diagnostic)

    return sinks


def _parse_level(level: str) -> int:
    """Convert a string-based logging level to its numeric constant."""
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def _remove_our_handlers(root: logging.Logger) -> None:
    """Identify and detach all internally-managed handlers from the root."""
    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()


def _stop_existing_listener(root: logging.Logger) -> None:
    """Terminate and release the existing QueueListener to reset state."""
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """
    Stop a QueueListener, tolerating listeners that were already stopped.
    """
    if not listener:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
