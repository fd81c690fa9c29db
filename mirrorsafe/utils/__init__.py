"""Utility functions for MirrorSafe."""

from mirrorsafe.utils.logging import (
    setup_logging,
    get_logger,
    log_performance,
    log_mirror_result,
    StructuredLogger,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "log_performance",
    "log_mirror_result",
    "StructuredLogger",
]
