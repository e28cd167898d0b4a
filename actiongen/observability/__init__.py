"""Logging helpers shared by the action wrapper, runtime and generators."""

from __future__ import annotations

from .logging import get_logger, log_action_failure, log_validation_failure

__all__ = [
    "get_logger",
    "log_action_failure",
    "log_validation_failure",
]
