from __future__ import annotations

from .config import LoggingConfig
from .core import (
    _QUEUE_LISTENER_ATTR,
    attach_run_log,
    configure_logging,
    detach_run_log,
    get_logger,
)
from .handlers import _HANDLER_TAG_ATTR

__all__ = [
    "LoggingConfig",
    "configure_logging",
    "get_logger",
    "attach_run_log",
    "detach_run_log",
    "_HANDLER_TAG_ATTR",
    "_QUEUE_LISTENER_ATTR",
]
