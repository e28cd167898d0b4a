"""Discover a project's actions module and write the generated package."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .adapters import EDGE_FUNCTION_ADAPTER, validate_base_path
from .codegen import generate_artifacts
from .codegen.artifacts import HANDLER_FILENAME
from .codegen.utils import GENERATED_NOTICE, write_file
from .config import IntegrationOptions, load_integration_options
from .errors import ActionsNotFoundError, ConfigurationError
from .observability import get_logger

logger = get_logger("actiongen.integration")

ACTION_PATTERNS: Sequence[str] = (
    "src/server/actions.py",
    "src/actions/__init__.py",
    "src/actions.py",
    "actions.py",
)

PACKAGE_INIT_FILENAME = "__init__.py"


@dataclass
class IntegrationResult:
    """What one integration build produced."""

    codegen_dir: Path
    actions_file: Path
    relative_actions_path: str
    route_pattern: str
    handler_entrypoint: str
    written: List[Path] = field(default_factory=list)


def discover_actions_file(root: Path, explicit: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Return the actions file under ``root``.

    An explicit path must exist. Otherwise the first match in
    :data:`ACTION_PATTERNS` wins, and ``None`` means nothing was found.
    """
    if explicit is not None:
        candidate = Path(explicit)
        if not candidate.is_absolute():
            candidate = root / candidate
        if not candidate.is_file():
            raise ActionsNotFoundError(f"Actions file {candidate} does not exist.")
        return candidate.resolve()
    for pattern in ACTION_PATTERNS:
        candidate = root / pattern
        if candidate.is_file():
            return candidate.resolve()
    return None


def _module_parts(path: Path, root: Path) -> List[str]:
    try:
        relative = path.relative_to(root)
    except ValueError:
        raise ConfigurationError(
            f"{path} is outside the project root {root}.",
            hint="Keep the actions module and the codegen directory inside the project.",
        ) from None
    return list(relative.parts)


def _package_top(codegen_dir: Path) -> Path:
    """Outermost package directory enclosing ``codegen_dir`` (itself always a package)."""
    top = codegen_dir
    while (top.parent / PACKAGE_INIT_FILENAME).is_file() and top.parent != top:
        top = top.parent
    return top


def _check_module_parts(parts: Sequence[str], actions_file: Path) -> None:
    for part in parts:
        if not part.isidentifier():
            raise ConfigurationError(
                f"Cannot import {actions_file}: {part!r} is not a valid module name.",
            )


def relative_import_path(codegen_dir: Path, actions_file: Path, root: Path) -> str:
    """Module specifier of ``actions_file`` as seen from the codegen package.

    Inside one package tree this is relative (``_gen`` and ``actions.py`` in
    package ``app`` give ``..actions``). When a relative import would climb
    above the outermost package, the directory holding that package is
    expected on ``sys.path`` and the absolute name is used instead:
    ``_actiongen`` and ``src/server/actions.py`` give ``src.server.actions``.
    """
    root = root.resolve()
    codegen_dir = codegen_dir.resolve()
    package_parts = _module_parts(codegen_dir, root)
    module_parts = _module_parts(actions_file.resolve().with_suffix(""), root)
    if module_parts and module_parts[-1] == "__init__":
        module_parts = module_parts[:-1]

    common = 0
    for left, right in zip(package_parts, module_parts):
        if left != right:
            break
        common += 1

    top = _package_top(codegen_dir)
    depth = len(codegen_dir.relative_to(top.parent).parts)
    dots = len(package_parts) - common + 1
    if dots <= depth:
        remainder = module_parts[common:]
        _check_module_parts(remainder, actions_file)
        return "." * dots + ".".join(remainder)

    try:
        absolute = actions_file.resolve().with_suffix("").relative_to(top.parent)
    except ValueError:
        raise ConfigurationError(
            f"{actions_file} is not importable next to the generated package {top}.",
            hint="Place the actions module under the directory that holds the codegen package.",
        ) from None
    absolute_parts = list(absolute.parts)
    if absolute_parts[-1] == "__init__":
        absolute_parts = absolute_parts[:-1]
    _check_module_parts(absolute_parts, actions_file)
    return ".".join(absolute_parts)


def build_integration(
    root: Union[str, Path],
    options: Optional[IntegrationOptions] = None,
) -> Optional[IntegrationResult]:
    """Generate every artifact for the project at ``root`` and write it.

    The adapter and base path are validated before anything is generated,
    and nothing is written unless every artifact was generated. Returns
    ``None`` (after logging a warning) when the project has no actions file.
    """
    root = Path(root).resolve()
    if options is None:
        options = load_integration_options(root)

    handler_config = options.handler_config()
    base_path = validate_base_path(options.base_path)

    actions_file = discover_actions_file(root, options.actions_path)
    if actions_file is None:
        logger.warning(
            "No actions found. Create one of:\n%s",
            "\n".join(f" - {pattern}" for pattern in ACTION_PATTERNS),
        )
        return None
    logger.info("Found actions: %s", actions_file.relative_to(root).as_posix())

    codegen_dir = options.codegen_dir
    relative_actions_path = relative_import_path(codegen_dir, actions_file, root)
    artifacts = generate_artifacts(
        options.router_config(relative_actions_path),
        options.client_config(),
    )

    written: List[Path] = []
    init_path = codegen_dir / PACKAGE_INIT_FILENAME
    write_file(init_path, f'"""Action integration package ({GENERATED_NOTICE})."""\n')
    written.append(init_path)
    for artifact in artifacts:
        path = codegen_dir / artifact.filename
        write_file(path, artifact.source_text)
        written.append(path)
        logger.debug("Wrote %s", path)

    if not options.site:
        logger.warning(
            "No site URL configured; set `site` (or ACTIONGEN_SITE) to use the client outside development.",
        )

    handler_module = HANDLER_FILENAME[: -len(".py")]
    entry_name = "handler" if handler_config.adapter is EDGE_FUNCTION_ADAPTER else "ALL"
    result = IntegrationResult(
        codegen_dir=codegen_dir,
        actions_file=actions_file,
        relative_actions_path=relative_actions_path,
        route_pattern=f"{base_path}/{{slug:path}}",
        handler_entrypoint=f"{handler_module}:{entry_name}",
        written=written,
    )
    logger.info("Mount %s at %s", result.handler_entrypoint, result.route_pattern)
    return result


__all__ = [
    "ACTION_PATTERNS",
    "IntegrationResult",
    "build_integration",
    "discover_actions_file",
    "relative_import_path",
]
