"""Supported deployment adapters and the routes the host site reserves."""

from __future__ import annotations

from enum import Enum
from typing import Tuple, Union

from .errors import ReservedBasePathError, UnsupportedAdapterError


class Adapter(str, Enum):
    """Closed set of deployment targets every generator must handle."""

    CLOUDFLARE = "cloudflare"
    UVICORN = "uvicorn"
    VERCEL = "vercel"
    LAMBDA = "lambda"


SUPPORTED_ADAPTERS: Tuple[str, ...] = tuple(member.value for member in Adapter)

# Exposes per-request native bindings (``env``/``ctx``) to the handler.
NATIVE_BINDING_ADAPTER = Adapter.CLOUDFLARE
# Exports a pre-wrapped handoff function instead of the raw router.
EDGE_FUNCTION_ADAPTER = Adapter.LAMBDA

# First path segments served by the host FastAPI site itself.
RESERVED_ROUTES: Tuple[str, ...] = ("docs", "redoc", "openapi.json", "static")

DEFAULT_BASE_PATH = "/api"


def is_supported_adapter(value: object) -> bool:
    if isinstance(value, Adapter):
        return True
    return isinstance(value, str) and value in SUPPORTED_ADAPTERS


def resolve_adapter(value: Union[str, Adapter]) -> Adapter:
    """Return the :class:`Adapter` for ``value`` or raise ``Unsupported adapter``."""
    if isinstance(value, Adapter):
        return value
    if not is_supported_adapter(value):
        raise UnsupportedAdapterError(
            value,
            hint=f"Use one of: {', '.join(SUPPORTED_ADAPTERS)}",
        )
    return Adapter(value)


def normalize_base_path(base_path: str) -> str:
    value = (base_path or "").strip()
    if not value.startswith("/"):
        value = "/" + value
    return value.rstrip("/")


def validate_base_path(base_path: str) -> str:
    """Normalise ``base_path`` and reject roots owned by the host site."""
    normalized = normalize_base_path(base_path)
    if not normalized:
        raise ReservedBasePathError(
            "Base path cannot be the site root.",
            hint=f"Mount actions under a prefix such as {DEFAULT_BASE_PATH}.",
        )
    first_segment = normalized.lstrip("/").split("/", 1)[0]
    if first_segment in RESERVED_ROUTES:
        raise ReservedBasePathError(
            f"Base path {normalized} is reserved by the host site; pick another (e.g. /api2).",
            hint=f"Reserved routes: {', '.join(RESERVED_ROUTES)}",
        )
    return normalized


__all__ = [
    "Adapter",
    "SUPPORTED_ADAPTERS",
    "NATIVE_BINDING_ADAPTER",
    "EDGE_FUNCTION_ADAPTER",
    "RESERVED_ROUTES",
    "DEFAULT_BASE_PATH",
    "is_supported_adapter",
    "resolve_adapter",
    "normalize_base_path",
    "validate_base_path",
]
