"""
Command line interface for actiongen.

    actiongen generate --adapter uvicorn
    actiongen adapters
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .. import __version__
from ..adapters import SUPPORTED_ADAPTERS
from ..config import load_integration_options
from ..errors import ConfigurationError
from ..integration import ACTION_PATTERNS, build_integration
from .errors import CLIError, handle_cli_exception

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _configure_logging(args: argparse.Namespace) -> None:
    """Send ``actiongen.*`` log records to stderr at the requested level."""
    log_level = (getattr(args, "log_level", None) or os.getenv("ACTIONGEN_LOG_LEVEL", "info")).lower()
    package_logger = logging.getLogger("actiongen")
    package_logger.setLevel(LOG_LEVELS.get(log_level, logging.INFO))
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        package_logger.addHandler(handler)


def cmd_generate(args: argparse.Namespace) -> int:
    root = Path(args.root).resolve()
    options = load_integration_options(root, Path(args.config).resolve() if args.config else None)
    if args.base_path is not None:
        options.base_path = args.base_path
    if args.adapter is not None:
        options.adapter = args.adapter
    if args.actions is not None:
        options.actions_path = Path(args.actions)
    if args.port is not None:
        options.port = args.port
    if args.out is not None:
        out = Path(args.out)
        options.codegen_dir = out if out.is_absolute() else (root / out).resolve()

    result = build_integration(root, options)
    if result is None:
        raise CLIError(
            "No actions module found.",
            code="NO_ACTIONS",
            hint="Create one of: " + ", ".join(ACTION_PATTERNS),
        )
    for path in result.written:
        print(path)
    print(f"route: {result.route_pattern} -> {result.handler_entrypoint}")
    return 0


def cmd_adapters(args: argparse.Namespace) -> int:
    for adapter in SUPPORTED_ADAPTERS:
        print(adapter)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="actiongen",
        description="Generate typed action routers, handlers and clients for FastAPI sites",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print full tracebacks on errors (or set ACTIONGEN_VERBOSE=1)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warn", "error"],
        default=None,
        help="Logging level (or set ACTIONGEN_LOG_LEVEL)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    generate_parser = subparsers.add_parser("generate", help="Write the generated integration package")
    generate_parser.add_argument("--root", default=".", help="Project root (default: current directory)")
    generate_parser.add_argument("--config", default=None, help="Path to actiongen.toml or pyproject.toml")
    generate_parser.add_argument("--base-path", default=None, help="Mount point of the actions (default: /api)")
    generate_parser.add_argument(
        "--adapter",
        default=None,
        help=f"Deployment adapter: {', '.join(SUPPORTED_ADAPTERS)}",
    )
    generate_parser.add_argument("--actions", default=None, help="Path to the actions module")
    generate_parser.add_argument("--port", type=int, default=None, help="Development server port")
    generate_parser.add_argument("--out", default=None, help="Directory of the generated package")
    generate_parser.set_defaults(func=cmd_generate)

    adapters_parser = subparsers.add_parser("adapters", help="List supported adapters")
    adapters_parser.set_defaults(func=cmd_adapters)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return its exit code; errors exit with status 1."""
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    _configure_logging(args)
    try:
        return args.func(args)
    except (CLIError, ConfigurationError) as exc:
        handle_cli_exception(exc, verbose=args.verbose)


__all__ = ["build_parser", "main"]
