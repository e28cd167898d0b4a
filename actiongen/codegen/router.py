"""Generator for the action router module (``router.py``)."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from ..adapters import Adapter, resolve_adapter
from ..config import RouterConfig, coerce_router_config
from ..errors import UnsupportedAdapterError
from .utils import GENERATED_NOTICE, join_blocks, py_str, render

__all__ = ["generate_router"]


_HEADER = '''
"""Action router (__NOTICE__)."""

from __future__ import annotations

from functools import lru_cache
from typing import __TYPING__

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
__EXTRA_IMPORTS__
from actiongen.runtime import (
    PrettyJSONMiddleware,
    RequestLoggingMiddleware,
    action_env_of,
    list_action_routes,
    load_action_map,
__SHOW_ROUTES_IMPORT__)

BASE_PATH = __BASE_PATH__

ActionRouter = FastAPI
'''

_BUILD = '''
def build_router() -> ActionRouter:
    """Import the action map and mount every action under ``BASE_PATH``."""
    actions = load_action_map(__ACTIONS_MODULE__, __package__)

    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    app.add_middleware(PrettyJSONMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.action_env = action_env_of(actions)

    scope = APIRouter(prefix=__BASE_PATH__)
    action_paths: Dict[str, str] = {}
    for name, action in actions.items():
        scope.include_router(action, prefix=f"/{name}")
        action_paths[f"{BASE_PATH}/{name}"] = name
    app.include_router(scope)
    app.state.action_paths = action_paths
    app.state.action_routes = list_action_routes(actions, BASE_PATH)
__SHOW_ROUTES__    return app
'''

_CACHE = '''
@lru_cache(maxsize=1)
def get_router() -> ActionRouter:
    """Build the router on first use and reuse it afterwards."""
    return build_router()


def reload_router() -> ActionRouter:
    """Re-import the actions module and rebuild the router."""
    get_router.cache_clear()
    load_action_map(__ACTIONS_MODULE__, __package__, reload=True)
    return get_router()
'''

_LAMBDA_HANDOFF = '''
@lru_cache(maxsize=1)
def _handoff() -> Mangum:
    return Mangum(get_router(), lifespan="off")


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Lambda entrypoint: hand the event to the router through Mangum."""
    return _handoff()(event, context)
'''

_EXPORTS_RAW = '''
__all__ = ["ActionRouter", "BASE_PATH", "build_router", "get_router", "reload_router"]
'''

_EXPORTS_HANDOFF = '''
__all__ = ["ActionRouter", "BASE_PATH", "handler", "reload_router"]
'''


def _substitute(template: str, config: RouterConfig, *, handoff: bool) -> str:
    replacements = {
        "__NOTICE__": GENERATED_NOTICE,
        "__BASE_PATH__": py_str(config.base_path),
        "__ACTIONS_MODULE__": py_str(config.relative_actions_path),
        "__TYPING__": "Any, Dict" if handoff else "Dict",
        "__EXTRA_IMPORTS__": "from mangum import Mangum\n" if handoff else "",
        "__SHOW_ROUTES_IMPORT__": "" if handoff else "    show_routes,\n",
        "__SHOW_ROUTES__": "" if handoff else "    show_routes(app)\n",
    }
    content = render(template)
    for placeholder, value in replacements.items():
        content = content.replace(placeholder, value)
    return content


def _render_router(config: RouterConfig, *, handoff: bool) -> str:
    blocks = [
        _substitute(_HEADER, config, handoff=handoff),
        _substitute(_BUILD, config, handoff=handoff),
        _substitute(_CACHE, config, handoff=handoff),
    ]
    if handoff:
        blocks.append(_substitute(_LAMBDA_HANDOFF, config, handoff=handoff))
        blocks.append(render(_EXPORTS_HANDOFF))
    else:
        blocks.append(render(_EXPORTS_RAW))
    return join_blocks(*blocks)


def generate_router(
    config: Optional[Union[RouterConfig, Mapping[str, Any]]] = None,
    *,
    base_path: Optional[str] = None,
    relative_actions_path: Optional[str] = None,
    adapter: Optional[Union[str, Adapter]] = None,
) -> str:
    """Return the source of ``router.py`` for the given configuration.

    The router imports the action map from ``relative_actions_path`` when it
    is first built, scopes it under ``base_path`` and mounts each action at
    ``/<name>``. The ``lambda`` adapter additionally wraps the router in a
    Mangum handoff and skips the route listing.
    """
    overrides = {
        key: value
        for key, value in (
            ("base_path", base_path),
            ("relative_actions_path", relative_actions_path),
            ("adapter", adapter),
        )
        if value is not None
    }
    resolved = coerce_router_config(config, **overrides)

    adapter_value = resolve_adapter(resolved.adapter)
    if adapter_value in (Adapter.CLOUDFLARE, Adapter.UVICORN, Adapter.VERCEL):
        return _render_router(resolved, handoff=False)
    if adapter_value is Adapter.LAMBDA:
        return _render_router(resolved, handoff=True)
    raise UnsupportedAdapterError(resolved.adapter)
