"""Generator for the site handler module (``api.py``).

The host site routes ``<base_path>/{slug:path}`` to this module. Three
shapes exist: forwarding the request together with the worker's native
bindings, forwarding the request alone, and delegating to the router's
pre-wrapped Lambda handoff.
"""

from __future__ import annotations

from typing import Union

from ..adapters import Adapter
from ..config import HandlerConfig
from ..errors import UnsupportedAdapterError
from .utils import GENERATED_NOTICE, render

__all__ = ["generate_handler"]


_NATIVE_BINDINGS = f'''
"""Site handler for Cloudflare Python Workers ({GENERATED_NOTICE})."""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import Response

from actiongen.runtime import dispatch

from .router import get_router


async def ALL(request: Request) -> Response:
    """Forward the request and the worker's ``env``/``ctx`` bindings to the router."""
    env = request.scope.get("env")
    ctx = request.scope.get("ctx")
    return await dispatch(get_router(), request, env=env, ctx=ctx)
'''

_REQUEST_ONLY = '''
"""Site handler for __TARGET__ (__NOTICE__)."""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import Response

from actiongen.runtime import dispatch

from .router import get_router


async def ALL(request: Request) -> Response:
    """Forward the request to the action router."""
    return await dispatch(get_router(), request)
'''

_HANDOFF = f'''
"""Site handler for AWS Lambda ({GENERATED_NOTICE})."""

from __future__ import annotations

from typing import Any, Dict

from .router import handler as router_handler


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Delegate the Lambda event to the router's pre-wrapped handoff."""
    return router_handler(event, context)
'''


def _request_only(target: str) -> str:
    return render(_REQUEST_ONLY).replace("__TARGET__", target).replace("__NOTICE__", GENERATED_NOTICE)


def generate_handler(adapter: Union[str, Adapter, HandlerConfig]) -> str:
    """Return the source of ``api.py`` for ``adapter``."""
    config = adapter if isinstance(adapter, HandlerConfig) else HandlerConfig(adapter=adapter)

    if config.adapter is Adapter.CLOUDFLARE:
        return render(_NATIVE_BINDINGS)
    if config.adapter is Adapter.UVICORN:
        return _request_only("a standalone ASGI server")
    if config.adapter is Adapter.VERCEL:
        return _request_only("the Vercel Python runtime")
    if config.adapter is Adapter.LAMBDA:
        return render(_HANDOFF)
    raise UnsupportedAdapterError(config.adapter)
