"""
Typed server actions for FastAPI/Starlette sites.

An application declares its actions once, in a single Python module::

    from pydantic import BaseModel
    from actiongen import ActionMap, define_action

    class Greeting(BaseModel):
        name: str

    async def say_hello(payload: Greeting, context):
        return f"Hello {payload.name}"

    actions = ActionMap({"sayHello": define_action(say_hello, schema=Greeting)})

``actiongen`` then emits, for one of four deployment adapters, the
source of:

* ``router.py`` – a FastAPI application that lazily imports the actions
  module and mounts every action at ``<base_path>/<name>``;
* ``api.py`` – the handler the host site routes ``<base_path>/{slug:path}``
  to, bridging its request into the router;
* ``client.py`` – an ``httpx`` client addressing the mounted actions;
* ``actions_env.pyi`` / ``client.pyi`` – stubs tying the environment
  bindings to the handler context and the generated client.

The subpackages are:

* ``actions`` – the ``define_action`` wrapper and its response envelope;
* ``adapters`` – the supported deployment targets and reserved routes;
* ``codegen`` – the four pure source generators;
* ``runtime`` / ``client`` – helpers imported by the generated modules;
* ``integration`` / ``cli`` – discovery of the actions module and writing
  of the generated files.
"""

import re
from pathlib import Path
from importlib import metadata as _metadata

from .actions import ActionContext, ActionEnv, ActionMap, define_action
from .adapters import SUPPORTED_ADAPTERS, Adapter
from .errors import ActionError, ConfigurationError, ErrorCode


def _local_version() -> str | None:
    root = Path(__file__).resolve().parents[1]
    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return None
    try:
        text = pyproject.read_text(encoding="utf-8")
    except OSError:  # pragma: no cover - IO errors should not break imports
        return None
    match = re.search(r"^version\s*=\s*\"([^\"]+)\"", text, flags=re.MULTILINE)
    if match:
        return match.group(1)
    return None


try:  # pragma: no cover - metadata fallback for editable installs
    __version__ = _metadata.version("actiongen")
except _metadata.PackageNotFoundError:  # pragma: no cover - source tree
    __version__ = _local_version() or "0.1.0"

__all__ = [
    "__version__",
    "ActionContext",
    "ActionEnv",
    "ActionError",
    "ActionMap",
    "Adapter",
    "ConfigurationError",
    "ErrorCode",
    "SUPPORTED_ADAPTERS",
    "define_action",
]
