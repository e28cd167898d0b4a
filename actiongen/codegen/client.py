"""Generator for the action client module (``client.py``)."""

from __future__ import annotations

from typing import Union

from ..config import DEVELOPMENT_MODE, ENV_MODE, ENV_SITE, ClientConfig
from .utils import GENERATED_NOTICE, py_str, render

__all__ = ["generate_client"]


_CLIENT = '''
"""Action client (__NOTICE__)."""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, Any, Optional

import httpx

from actiongen.client import ActionClient

if TYPE_CHECKING:
    from .router import ActionRouter


def _in_browser() -> bool:
    if sys.platform != "emscripten":
        return False
    try:
        import js  # type: ignore[import-not-found]
    except ImportError:
        return False
    return hasattr(js, "document")


def get_base_url() -> str:
    """Resolve the origin serving the actions; evaluated on every call."""
    if _in_browser():
        return "/"
    if os.environ.get(__ENV_MODE__) == __DEVELOPMENT__:
        return __DEV_URL__
    return os.environ.get(__ENV_SITE__) or ""


def create_client(
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    **kwargs: Any,
) -> "ActionClient[ActionRouter]":
    return ActionClient(get_base_url, transport=transport, **kwargs)


client: "ActionClient[ActionRouter]" = create_client()

__all__ = ["client", "create_client", "get_base_url"]
'''


def generate_client(port: Union[int, ClientConfig]) -> str:
    """Return the source of ``client.py``.

    ``port`` only feeds the development URL; ``0`` is emitted literally as
    ``http://localhost:0``.
    """
    config = port if isinstance(port, ClientConfig) else ClientConfig(port=port)
    replacements = {
        "__NOTICE__": GENERATED_NOTICE,
        "__ENV_MODE__": py_str(ENV_MODE),
        "__DEVELOPMENT__": py_str(DEVELOPMENT_MODE),
        "__ENV_SITE__": py_str(ENV_SITE),
        "__DEV_URL__": py_str(f"http://localhost:{config.port}"),
    }
    content = render(_CLIENT)
    for placeholder, value in replacements.items():
        content = content.replace(placeholder, value)
    return content
