"""The ``define_action`` wrapper.

``define_action`` turns a handler (and an optional input schema) into a
FastAPI :class:`~fastapi.APIRouter` exposing a single ``POST`` operation at
its root. Every response, successful or not, uses the envelope::

    {"data": <result> | null, "error": {"message", "code", "issue"?} | null}

with status 200 on success, 400 when the body fails validation and 500
when the handler raises.
"""

from __future__ import annotations

import inspect
from collections import ChainMap
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Mapping, MutableMapping, Optional

from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter, ValidationError
from starlette.concurrency import run_in_threadpool

from .errors import (
    ActionError,
    ErrorCode,
    ValidationIssue,
    failure_envelope,
    internal_error,
    success_envelope,
    validation_error,
)
from .observability import get_logger, log_action_failure, log_validation_failure

logger = get_logger("actiongen.actions")

Action = APIRouter
Handler = Callable[..., Any]

# Path of the single operation inside an action; the router mounts the
# action with prefix ``/<name>`` so the operation is served at ``/<name>``.
ACTION_ROOT = ""


class BindingMap(MappingABC):
    """Read-only bindings with attribute access (``context.env.API_KEY``)."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None) -> None:
        self._values: Dict[str, Any] = dict(values or {})

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getattr__(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(name) from None

    def __repr__(self) -> str:
        return f"BindingMap({self._values!r})"


@dataclass(frozen=True)
class ActionEnv:
    """Bindings and default per-request variables supplied with an action map.

    ``bindings`` back ``context.env`` when the adapter provides no native
    bindings; ``variables`` seed ``context.var`` underneath whatever the
    host middleware stored on ``request.state``.
    """

    bindings: Mapping[str, Any] = field(default_factory=dict)
    variables: Mapping[str, Any] = field(default_factory=dict)


class ActionMap(MappingABC):
    """Ordered, read-only mapping of action names to actions.

    Names double as URL path segments: ``ActionMap({"sayHello": ...})`` is
    served at ``<base_path>/sayHello``.
    """

    def __init__(
        self,
        actions: Optional[Mapping[str, APIRouter]] = None,
        *,
        env: Optional[ActionEnv] = None,
        **named: APIRouter,
    ) -> None:
        self._actions: Dict[str, APIRouter] = dict(actions or {})
        self._actions.update(named)
        self.env = env

    def __getitem__(self, name: str) -> APIRouter:
        return self._actions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def paths(self, base_path: str = "") -> Dict[str, str]:
        """Full mounted path of every action, keyed by path."""
        prefix = base_path.rstrip("/")
        return {f"{prefix}/{name}": name for name in self._actions}

    def __repr__(self) -> str:
        return f"ActionMap({list(self._actions)!r})"


class ActionContext:
    """Second argument passed to every handler."""

    def __init__(self, request: Request) -> None:
        self.request = request
        app = request.scope.get("app")
        configured = getattr(getattr(app, "state", None), "action_env", None)
        self._configured: ActionEnv = configured if isinstance(configured, ActionEnv) else ActionEnv()
        self._state: MutableMapping[str, Any] = request.scope.setdefault("state", {})

    @property
    def env(self) -> Any:
        """Native per-request bindings if the handler bridged them, else configured ones."""
        native = self.request.scope.get("env")
        if native is not None:
            return native
        return BindingMap(self._configured.bindings)

    @property
    def execution_context(self) -> Any:
        return self.request.scope.get("ctx")

    @property
    def var(self) -> ChainMap:
        return ChainMap(self._state, dict(self._configured.variables))

    def get(self, key: str, default: Any = None) -> Any:
        return self.var.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._state[key] = value


def _accepts_context(handler: Handler) -> bool:
    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        return True
    positional = 0
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if parameter.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional >= 2


async def _invoke(handler: Handler, payload: Any, context: ActionContext, pass_context: bool) -> Any:
    args = (payload, context) if pass_context else (payload,)
    if inspect.iscoroutinefunction(handler):
        return await handler(*args)
    result = await run_in_threadpool(handler, *args)
    if inspect.isawaitable(result):
        result = await result
    return result


def define_action(
    handler: Optional[Handler] = None,
    *,
    schema: Any = None,
    name: Optional[str] = None,
) -> APIRouter:
    """Wrap ``handler`` into an action validating its JSON body against ``schema``.

    ``schema`` is anything :class:`pydantic.TypeAdapter` accepts; without one
    the body is passed through unchecked. The handler receives the validated
    input and an :class:`ActionContext` (handlers declaring a single
    parameter receive the input only). Raise :class:`ActionError` to return a
    specific message and code; any other exception is reported as
    ``INTERNAL_SERVER_ERROR`` with a generic message and logged.
    """

    if handler is None:
        raise TypeError("define_action() requires a handler")
    if not callable(handler):
        raise TypeError(f"Action handler must be callable, got {type(handler).__name__}")

    validator: TypeAdapter[Any] = TypeAdapter(schema if schema is not None else Any)
    pass_context = _accepts_context(handler)
    operation_name = name or getattr(handler, "__name__", "action")

    async def endpoint(request: Request) -> JSONResponse:
        route_path = request.url.path
        body = await request.body()
        try:
            if body.strip():
                payload = validator.validate_json(body)
            else:
                payload = validator.validate_python(None)
        except ValidationError as exc:
            issues = [ValidationIssue.from_pydantic(error) for error in exc.errors()]
            log_validation_failure(path=route_path, issues=[issue.to_dict() for issue in issues], logger=logger)
            # Only the first issue is reported to the caller.
            error = validation_error(issues[0] if issues else None)
            return JSONResponse(failure_envelope(error), status_code=400)

        context = ActionContext(request)
        try:
            result = await _invoke(handler, payload, context, pass_context)
            # Rendering can still fail, e.g. on non-finite floats.
            return JSONResponse(success_envelope(jsonable_encoder(result)), status_code=200)
        except ActionError as exc:
            log_action_failure(exc, path=route_path, code=exc.code, logger=logger)
            # Handler failures carry message and code only.
            return JSONResponse(failure_envelope(ActionError(exc.message, code=exc.code)), status_code=500)
        except Exception as exc:
            log_action_failure(exc, path=route_path, code=ErrorCode.INTERNAL_SERVER_ERROR.value, logger=logger)
            return JSONResponse(failure_envelope(internal_error()), status_code=500)

    endpoint.__name__ = operation_name
    router = APIRouter()
    router.add_api_route(
        ACTION_ROOT,
        endpoint,
        methods=["POST"],
        name=operation_name,
        response_model=None,
    )
    return router


__all__ = [
    "Action",
    "ACTION_ROOT",
    "ActionContext",
    "ActionEnv",
    "ActionMap",
    "BindingMap",
    "define_action",
]
