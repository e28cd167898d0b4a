"""Centralised logging helpers for actiongen runtimes."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

_LOGGER_CACHE: Dict[str, logging.Logger] = {}


def get_logger(name: str = "actiongen") -> logging.Logger:
    """Return a cached :class:`logging.Logger` instance."""

    if name not in _LOGGER_CACHE:
        _LOGGER_CACHE[name] = logging.getLogger(name)
    return _LOGGER_CACHE[name]


def log_validation_failure(
    *,
    path: str,
    issues: List[Dict[str, Any]],
    logger: Optional[logging.Logger] = None,
) -> None:
    """Emit a structured entry listing every issue of a rejected request body."""

    payload: Dict[str, Any] = {"path": path, "issue_count": len(issues), "issues": issues}
    target_logger = logger or get_logger("actiongen.actions")
    target_logger.warning(
        "Action input rejected",
        extra={"actiongen_event": "input_validation_error", "actiongen_data": payload},
    )


def log_action_failure(
    exc: BaseException,
    *,
    path: str,
    code: str,
    logger: Optional[logging.Logger] = None,
    extras: Optional[Dict[str, Any]] = None,
) -> None:
    """Log a failed handler invocation together with its traceback."""

    payload: Dict[str, Any] = {"path": path, "code": code, "exception": type(exc).__name__}
    if extras:
        payload.update(extras)
    target_logger = logger or get_logger("actiongen.actions")
    target_logger.error(
        "Action handler failed",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"actiongen_event": "action_failure", "actiongen_data": payload},
    )
