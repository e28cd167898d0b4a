"""Error reporting for the actiongen command line."""

import os
import sys
import traceback
from typing import NoReturn, Optional

from ..errors import ConfigurationError


class CLIError(Exception):
    """A failure the CLI reports without a traceback."""

    def __init__(self, message: str, *, code: str = "CLI_ERROR", hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.hint = hint

    def __str__(self) -> str:
        return self.message


def cli_verbose_enabled(flag: bool = False) -> bool:
    return flag or os.getenv("ACTIONGEN_VERBOSE", "").lower() in {"1", "true", "yes"}


def format_cli_error(exc: BaseException, *, include_traceback: bool = False) -> str:
    """Render ``exc`` as ``error: <message>`` followed by its hint, if any.

    >>> format_cli_error(CLIError("Invalid port", hint="Use 0-65535"))
    'error: Invalid port\\nhint: Use 0-65535'
    """
    if isinstance(exc, (CLIError, ConfigurationError)):
        lines = [f"error: {exc.message}"]
        if exc.hint:
            lines.append(f"hint: {exc.hint}")
    else:
        lines = [f"error: {exc.__class__.__name__}: {exc}"]
    if include_traceback:
        lines.append("")
        lines.append("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip())
    return "\n".join(lines)


def handle_cli_exception(exc: BaseException, *, verbose: bool = False, exit_code: int = 1) -> NoReturn:
    """Print ``exc`` to stderr and exit with ``exit_code``."""
    print(format_cli_error(exc, include_traceback=cli_verbose_enabled(verbose)), file=sys.stderr)
    sys.exit(exit_code)


__all__ = ["CLIError", "cli_verbose_enabled", "format_cli_error", "handle_cli_exception"]
