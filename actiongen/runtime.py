"""Runtime helpers imported by the generated router and handler modules."""

from __future__ import annotations

import importlib
import json
import re
import time
from collections.abc import Mapping as MappingABC
from typing import Any, List, Mapping, Optional, Tuple

import anyio
from fastapi import APIRouter
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import BaseRoute
from starlette.types import ASGIApp, Message

from .actions import ActionEnv
from .bindings import ExecutionContext, WorkerEnv
from .errors import ActionsNotFoundError, InvalidActionNameError
from .observability import get_logger

logger = get_logger("actiongen.runtime")

ACTIONS_ATTRIBUTE = "actions"
ACTION_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.~-]+$")

# Keys describing how the host routed the request; the router sets its own
# (as it does for the ``fastapi_*`` exit stacks).
_HOST_SCOPE_KEYS = frozenset({"app", "router", "endpoint", "route", "path_params"})


def validate_action_name(name: object) -> str:
    """Return ``name`` if it is usable verbatim as one URL path segment."""
    if not isinstance(name, str) or not ACTION_NAME_PATTERN.match(name) or name in {".", ".."}:
        raise InvalidActionNameError(
            f"Action name {name!r} cannot be used as a URL path segment.",
            hint="Use letters, digits, '_', '-', '.' or '~'.",
        )
    return name


def load_action_map(
    specifier: str,
    package: Optional[str] = None,
    *,
    reload: bool = False,
) -> Mapping[str, APIRouter]:
    """Import the actions module at ``specifier`` and return its action map.

    ``specifier`` may be relative to ``package`` (``"..actions"``). With
    ``reload`` the module is re-executed so edits to the actions are picked
    up. Every action name is checked to be a safe path segment.
    """
    try:
        module = importlib.import_module(specifier, package)
    except ImportError as exc:
        raise ActionsNotFoundError(
            f"Cannot import actions module {specifier!r} (package {package!r}): {exc}",
            hint="Run `actiongen generate` again and import the generated package with the project root on sys.path.",
        ) from exc
    if reload:
        module = importlib.reload(module)

    actions = getattr(module, ACTIONS_ATTRIBUTE, None)
    if actions is None:
        raise ActionsNotFoundError(
            f"Module {module.__name__} does not define `{ACTIONS_ATTRIBUTE}`.",
            hint="Export a mapping: actions = ActionMap({'sayHello': define_action(...)})",
        )
    if not isinstance(actions, MappingABC):
        raise ActionsNotFoundError(
            f"`{module.__name__}.{ACTIONS_ATTRIBUTE}` must be a mapping, got {type(actions).__name__}.",
        )
    for name, action in actions.items():
        validate_action_name(name)
        if not isinstance(action, APIRouter):
            raise ActionsNotFoundError(
                f"Action {name!r} must be an APIRouter (use define_action), got {type(action).__name__}.",
            )
    return actions


def action_env_of(actions: Mapping[str, APIRouter]) -> Optional[ActionEnv]:
    env = getattr(actions, "env", None)
    return env if isinstance(env, ActionEnv) else None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and latency."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        method = request.method
        path = request.url.path
        logger.info("<-- %s %s", method, path)
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "--> %s %s %s %.1fms",
            method,
            path,
            response.status_code,
            elapsed_ms,
            extra={
                "actiongen_event": "request",
                "actiongen_data": {
                    "method": method,
                    "path": path,
                    "status": response.status_code,
                    "elapsed_ms": round(elapsed_ms, 3),
                },
            },
        )
        return response


class PrettyJSONMiddleware(BaseHTTPMiddleware):
    """Indent JSON responses when the query string contains ``pretty``."""

    def __init__(self, app: ASGIApp, *, query: str = "pretty", indent: int = 2) -> None:
        super().__init__(app)
        self.query = query
        self.indent = indent

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        if self.query not in request.query_params:
            return response
        if not response.headers.get("content-type", "").startswith("application/json"):
            return response
        body = b"".join([chunk async for chunk in response.body_iterator])
        content = json.dumps(json.loads(body), indent=self.indent, ensure_ascii=False).encode("utf-8")
        pretty = Response(content=content, status_code=response.status_code)
        pretty.raw_headers = [
            (key, value) for key, value in response.raw_headers if key.lower() != b"content-length"
        ] + [(b"content-length", str(len(content)).encode("latin-1"))]
        return pretty


def list_action_routes(actions: Mapping[str, APIRouter], base_path: str) -> List[Tuple[str, str]]:
    """``(methods, path)`` for every route the actions mount under ``base_path``."""
    mounted: List[Tuple[str, str]] = []
    for name, action in actions.items():
        for route in action.routes:
            methods = getattr(route, "methods", None)
            if methods:
                mounted.append((",".join(sorted(methods)), f"{base_path}/{name}{getattr(route, 'path', '')}"))
    return mounted


def _walk_routes(routes: List[BaseRoute], prefix: str = "") -> List[Tuple[str, str]]:
    found: List[Tuple[str, str]] = []
    for route in routes:
        path = getattr(route, "path", None) or ""
        methods = getattr(route, "methods", None)
        if methods:
            found.append((",".join(sorted(methods)), prefix + path))
        elif getattr(route, "routes", None):
            found.extend(_walk_routes(list(route.routes), prefix + path))
    return found


def show_routes(app: Any) -> List[str]:
    """Log the mounted routes, one ``METHOD path`` line each, and return them.

    A router built from an action map records its routes in
    ``app.state.action_routes``; other apps have their route tree walked.
    """
    mounted = getattr(getattr(app, "state", None), "action_routes", None)
    if mounted is None:
        mounted = _walk_routes(list(getattr(app, "routes", [])))
    lines = [f"{methods:<10} {path}" for methods, path in mounted]
    for line in lines:
        logger.info(line)
    return lines


async def dispatch(
    app: ASGIApp,
    request: Request,
    *,
    env: Optional[WorkerEnv] = None,
    ctx: Optional[ExecutionContext] = None,
) -> Response:
    """Replay a host request into ``app`` and return the buffered response.

    ``env`` and ``ctx`` are the adapter's native per-request bindings; they
    travel in the ASGI scope and surface as ``context.env`` and
    ``context.execution_context`` inside the actions.
    """
    scope = {
        key: value
        for key, value in request.scope.items()
        if key not in _HOST_SCOPE_KEYS and not key.startswith("fastapi_")
    }
    if env is not None:
        scope["env"] = env
    if ctx is not None:
        scope["ctx"] = ctx

    body = await request.body()
    body_sent = False
    response_complete = anyio.Event()
    status_code = 500
    raw_headers: List[Tuple[bytes, bytes]] = []
    chunks: List[bytes] = []

    async def receive() -> Message:
        nonlocal body_sent
        if not body_sent:
            body_sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        await response_complete.wait()
        return {"type": "http.disconnect"}

    async def send(message: Message) -> None:
        nonlocal status_code, raw_headers
        if message["type"] == "http.response.start":
            status_code = message["status"]
            raw_headers = [(bytes(key), bytes(value)) for key, value in message.get("headers", [])]
        elif message["type"] == "http.response.body":
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                response_complete.set()

    await app(scope, receive, send)
    response_complete.set()

    response = Response(content=b"".join(chunks), status_code=status_code)
    response.raw_headers = raw_headers
    return response


__all__ = [
    "ACTIONS_ATTRIBUTE",
    "ACTION_NAME_PATTERN",
    "PrettyJSONMiddleware",
    "RequestLoggingMiddleware",
    "action_env_of",
    "dispatch",
    "list_action_routes",
    "load_action_map",
    "show_routes",
    "validate_action_name",
]
