"""Generator for the type stubs connecting bindings, handlers and the client.

Two stubs are produced for fixed module names inside the codegen package:

* ``actions_env`` – ``Bindings``/``Variables``/``ActionEnv`` and an
  ``ActionContext`` whose ``env`` is typed as those bindings;
* ``client`` – the public surface of the generated ``client.py``.

Only the native-binding adapter extends ``Bindings`` with the worker's
environment type and declares the per-request ``Runtime``/``Locals``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..adapters import Adapter
from ..config import HandlerConfig
from ..errors import UnsupportedAdapterError
from .utils import GENERATED_NOTICE, join_blocks, render

__all__ = [
    "ACTION_TYPES_MODULE",
    "CLIENT_TYPES_MODULE",
    "IntegrationTypes",
    "generate_integration_types",
]

ACTION_TYPES_MODULE = "actions_env"
CLIENT_TYPES_MODULE = "client"


@dataclass(frozen=True)
class IntegrationTypes:
    action_types: str
    client_types: str


_ACTION_HEADER = f'''
"""Stub for ``{ACTION_TYPES_MODULE}`` ({GENERATED_NOTICE})."""

from typing import Any, Dict, Mapping, Protocol

from actiongen.actions import ActionContext as _ActionContext
'''

_ACTION_HEADER_NATIVE = f'''
"""Stub for ``{ACTION_TYPES_MODULE}`` ({GENERATED_NOTICE})."""

from typing import Any, Dict, Mapping, Protocol

from starlette.datastructures import State

from actiongen.actions import ActionContext as _ActionContext
from actiongen.bindings import ExecutionContext, WorkerEnv
'''

_BINDINGS_OPEN = '''
class Bindings(Protocol):
    def __getattr__(self, name: str) -> Any: ...
'''

_BINDINGS_NATIVE = '''
class Bindings(WorkerEnv, Protocol):
    LOCALS: State

    def __getattr__(self, name: str) -> Any: ...
'''

_SHARED = '''
Variables = Dict[str, Any]


class ActionEnv(Protocol):
    bindings: Mapping[str, Any]
    variables: Mapping[str, Any]
'''

_CONTEXT = '''
class ActionContext(_ActionContext):
    @property
    def env(self) -> Bindings: ...
'''

_CONTEXT_NATIVE = '''
class ActionContext(_ActionContext):
    @property
    def env(self) -> Bindings: ...
    @property
    def execution_context(self) -> ExecutionContext: ...
'''

_CLIENT_HEADER = f'''
"""Stub for ``{CLIENT_TYPES_MODULE}`` ({GENERATED_NOTICE})."""

from typing import Any, Optional

import httpx

from actiongen.client import ActionClient

from .router import ActionRouter
'''

_CLIENT_HEADER_NATIVE = f'''
"""Stub for ``{CLIENT_TYPES_MODULE}`` ({GENERATED_NOTICE})."""

from typing import Any, Optional, Protocol

import httpx

from actiongen.bindings import WorkerRuntime
from actiongen.client import ActionClient

from .actions_env import Bindings
from .router import ActionRouter
'''

_CLIENT_SURFACE = '''
client: ActionClient[ActionRouter]

def get_base_url() -> str: ...
def create_client(
    *,
    transport: Optional[httpx.AsyncBaseTransport] = ...,
    **kwargs: Any,
) -> ActionClient[ActionRouter]: ...
'''

_CLIENT_RUNTIME = '''
Runtime = WorkerRuntime[Bindings]


class Locals(Protocol):
    runtime: Runtime
'''


def _action_types(native: bool) -> str:
    if native:
        return join_blocks(
            render(_ACTION_HEADER_NATIVE),
            render(_BINDINGS_NATIVE),
            render(_SHARED),
            render(_CONTEXT_NATIVE),
        )
    return join_blocks(
        render(_ACTION_HEADER),
        render(_BINDINGS_OPEN),
        render(_SHARED),
        render(_CONTEXT),
    )


def _client_types(native: bool) -> str:
    if native:
        return join_blocks(
            render(_CLIENT_HEADER_NATIVE),
            render(_CLIENT_SURFACE),
            render(_CLIENT_RUNTIME),
        )
    return join_blocks(render(_CLIENT_HEADER), render(_CLIENT_SURFACE))


def generate_integration_types(adapter: Union[str, Adapter, HandlerConfig]) -> IntegrationTypes:
    """Return the ``actions_env`` and ``client`` stubs for ``adapter``."""
    config = adapter if isinstance(adapter, HandlerConfig) else HandlerConfig(adapter=adapter)

    if config.adapter is Adapter.CLOUDFLARE:
        return IntegrationTypes(action_types=_action_types(True), client_types=_client_types(True))
    if config.adapter in (Adapter.UVICORN, Adapter.VERCEL, Adapter.LAMBDA):
        return IntegrationTypes(action_types=_action_types(False), client_types=_client_types(False))
    raise UnsupportedAdapterError(config.adapter)
