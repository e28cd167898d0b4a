"""Generation and project configuration for actiongen."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .adapters import DEFAULT_BASE_PATH, Adapter, resolve_adapter, validate_base_path
from .errors import ConfigurationError

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    tomllib = None  # type: ignore

DEFAULT_PORT = 4321
DEFAULT_CODEGEN_DIR = Path("_actiongen")
CONFIG_FILENAMES = ("actiongen.toml", "pyproject.toml")

ENV_BASE_PATH = "ACTIONGEN_BASE_PATH"
ENV_ADAPTER = "ACTIONGEN_ADAPTER"
ENV_PORT = "ACTIONGEN_PORT"
ENV_SITE = "ACTIONGEN_SITE"
# Read by generated clients at call time.
ENV_MODE = "ACTIONGEN_ENV"
DEVELOPMENT_MODE = "development"


def _validate_port(port: Any) -> int:
    if isinstance(port, bool) or not isinstance(port, int):
        raise ConfigurationError(f"Port must be an integer, got {port!r}.")
    if port < 0:
        raise ConfigurationError(f"Port must be non-negative, got {port}.")
    return port


@dataclass(frozen=True)
class RouterConfig:
    """Inputs of the router generator."""

    base_path: str
    relative_actions_path: str
    adapter: Adapter

    def __post_init__(self) -> None:
        object.__setattr__(self, "adapter", resolve_adapter(self.adapter))
        object.__setattr__(self, "base_path", validate_base_path(self.base_path))
        if not self.relative_actions_path or not str(self.relative_actions_path).strip():
            raise ConfigurationError("Relative actions path cannot be empty.")


@dataclass(frozen=True)
class HandlerConfig:
    adapter: Adapter

    def __post_init__(self) -> None:
        object.__setattr__(self, "adapter", resolve_adapter(self.adapter))


@dataclass(frozen=True)
class ClientConfig:
    """Inputs of the client generator; ``port=0`` is kept literally."""

    port: int = DEFAULT_PORT

    def __post_init__(self) -> None:
        _validate_port(self.port)


@dataclass
class IntegrationOptions:
    """Project-level options resolved from ``actiongen.toml`` or ``pyproject.toml``."""

    base_path: str = DEFAULT_BASE_PATH
    actions_path: Optional[Path] = None
    adapter: Optional[str] = None
    port: int = DEFAULT_PORT
    site: Optional[str] = None
    codegen_dir: Path = DEFAULT_CODEGEN_DIR
    raw: Dict[str, Any] = field(default_factory=dict)

    def router_config(self, relative_actions_path: str) -> RouterConfig:
        if self.adapter is None:
            raise ConfigurationError(
                "No adapter configured.",
                hint="Set `adapter` in actiongen.toml or pass --adapter.",
            )
        return RouterConfig(
            base_path=self.base_path,
            relative_actions_path=relative_actions_path,
            adapter=self.adapter,
        )

    def handler_config(self) -> HandlerConfig:
        if self.adapter is None:
            raise ConfigurationError(
                "No adapter configured.",
                hint="Set `adapter` in actiongen.toml or pass --adapter.",
            )
        return HandlerConfig(adapter=self.adapter)

    def client_config(self) -> ClientConfig:
        return ClientConfig(port=self.port)


def _read_toml_config(path: Path) -> Dict[str, Any]:
    if tomllib is None:
        raise RuntimeError("TOML parsing requires Python 3.11 or later.")
    with path.open("rb") as handle:
        return tomllib.load(handle)


def locate_config_file(root: Path, explicit: Optional[Path] = None) -> Optional[Path]:
    if explicit is not None:
        return explicit if explicit.exists() else None
    for candidate in CONFIG_FILENAMES:
        path = root / candidate
        if path.exists():
            return path
    return None


def _section(path: Path, data: Dict[str, Any]) -> Dict[str, Any]:
    if path.name == "pyproject.toml":
        return dict((data.get("tool") or {}).get("actiongen") or {})
    return dict(data.get("actiongen") or data)


def _parse_options(section: Mapping[str, Any], root: Path) -> IntegrationOptions:
    actions_raw = section.get("actions_path")
    actions_path: Optional[Path] = None
    if actions_raw:
        actions_path = Path(str(actions_raw))
        if not actions_path.is_absolute():
            actions_path = (root / actions_path).resolve()
    codegen_raw = Path(str(section.get("codegen_dir") or DEFAULT_CODEGEN_DIR))
    codegen_dir = codegen_raw if codegen_raw.is_absolute() else (root / codegen_raw).resolve()
    port_raw = section.get("port")
    port = DEFAULT_PORT
    if port_raw is not None:
        try:
            port = _validate_port(port_raw if isinstance(port_raw, int) else int(str(port_raw)))
        except ValueError:
            raise ConfigurationError(f"Port must be an integer, got {port_raw!r}.") from None
    site = section.get("site")
    adapter = section.get("adapter")
    return IntegrationOptions(
        base_path=str(section.get("base_path") or DEFAULT_BASE_PATH),
        actions_path=actions_path,
        adapter=str(adapter) if adapter else None,
        port=port,
        site=str(site) if site else None,
        codegen_dir=codegen_dir,
        raw=dict(section),
    )


def apply_env_overrides(options: IntegrationOptions, environ: Optional[Mapping[str, str]] = None) -> IntegrationOptions:
    env = os.environ if environ is None else environ
    if env.get(ENV_BASE_PATH):
        options.base_path = env[ENV_BASE_PATH]
    if env.get(ENV_ADAPTER):
        options.adapter = env[ENV_ADAPTER]
    if env.get(ENV_PORT):
        try:
            options.port = _validate_port(int(env[ENV_PORT]))
        except ValueError:
            raise ConfigurationError(f"{ENV_PORT} must be an integer, got {env[ENV_PORT]!r}.") from None
    if env.get(ENV_SITE):
        options.site = env[ENV_SITE]
    return options


def load_integration_options(
    root: Path,
    explicit: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> IntegrationOptions:
    """Resolve options for the project rooted at ``root``.

    Values come from ``explicit`` (or the first of ``actiongen.toml`` /
    ``pyproject.toml`` under ``root``) and are then overridden by the
    ``ACTIONGEN_*`` environment variables.
    """
    root = root.resolve()
    config_path = locate_config_file(root, explicit)
    if config_path is None:
        options = _parse_options({}, root)
    else:
        options = _parse_options(_section(config_path, _read_toml_config(config_path)), root)
    return apply_env_overrides(options, environ)


def coerce_router_config(
    config: Optional[Union[RouterConfig, Mapping[str, Any]]] = None,
    **kwargs: Any,
) -> RouterConfig:
    if isinstance(config, RouterConfig):
        return config
    values: Dict[str, Any] = dict(config or {})
    values.update(kwargs)
    return RouterConfig(
        base_path=values.get("base_path", DEFAULT_BASE_PATH),
        relative_actions_path=values.get("relative_actions_path", ""),
        adapter=values.get("adapter"),
    )


__all__ = [
    "DEFAULT_PORT",
    "DEFAULT_CODEGEN_DIR",
    "ENV_BASE_PATH",
    "ENV_ADAPTER",
    "ENV_PORT",
    "ENV_SITE",
    "ENV_MODE",
    "DEVELOPMENT_MODE",
    "RouterConfig",
    "HandlerConfig",
    "ClientConfig",
    "IntegrationOptions",
    "locate_config_file",
    "load_integration_options",
    "apply_env_overrides",
    "coerce_router_config",
]
