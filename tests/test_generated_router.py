"""Import the generated modules from a temporary package and serve real requests."""

import importlib
import logging
import sys

import pytest
from fastapi.testclient import TestClient
from starlette.applications import Starlette
from starlette.routing import Route

from actiongen.codegen import generate_handler, generate_router
from actiongen.runtime import show_routes

ACTIONS = '''
from pydantic import BaseModel

from actiongen import ActionEnv, ActionMap, define_action


class Greeting(BaseModel):
    name: str


async def say_hello(payload: Greeting, context):
    return "Hello " + payload.name


async def read_binding(payload, context):
    return {"kv": context.env["KV"], "ctx": context.execution_context}


actions = ActionMap(
    {
        "sayHello": define_action(say_hello, schema=Greeting),
        "readBinding": define_action(read_binding),
    },
    env=ActionEnv(bindings={"KV": "configured"}),
)
'''

pytestmark = pytest.mark.integration


def _generate(write_tree, adapter: str, *, base_path: str = "/api"):
    write_tree(
        {
            "shop/__init__.py": "",
            "shop/actions.py": ACTIONS,
            "shop/_actiongen/__init__.py": "",
            "shop/_actiongen/router.py": generate_router(
                base_path=base_path,
                relative_actions_path="..actions",
                adapter=adapter,
            ),
            "shop/_actiongen/api.py": generate_handler(adapter),
        }
    )
    return importlib.import_module("shop._actiongen.router"), importlib.import_module("shop._actiongen.api")


def test_router_serves_actions_under_base_path(write_tree) -> None:
    router_module, _ = _generate(write_tree, "uvicorn")
    app = router_module.get_router()
    client = TestClient(app)

    response = client.post("/api/sayHello", json={"name": "John"})
    assert response.status_code == 200
    assert response.json() == {"data": "Hello John", "error": None}

    missing = client.post("/api/sayHello", json={})
    assert missing.status_code == 400
    assert missing.json()["data"] is None
    assert missing.json()["error"]["code"] == "INPUT_VALIDATION_ERROR"

    assert client.post("/sayHello", json={"name": "John"}).status_code == 404
    assert app.state.action_paths == {"/api/sayHello": "sayHello", "/api/readBinding": "readBinding"}


def test_router_lists_its_routes_when_built(write_tree, caplog) -> None:
    router_module, _ = _generate(write_tree, "uvicorn")
    with caplog.at_level(logging.INFO, logger="actiongen.runtime"):
        app = router_module.get_router()
    expected = [f"{'POST':<10} /api/sayHello", f"{'POST':<10} /api/readBinding"]
    assert app.state.action_routes == [("POST", "/api/sayHello"), ("POST", "/api/readBinding")]
    assert show_routes(app) == expected
    assert expected[0] in caplog.text


def test_router_applies_configured_env_and_middleware(write_tree) -> None:
    router_module, _ = _generate(write_tree, "vercel", base_path="/rpc")
    client = TestClient(router_module.get_router())

    data = client.post("/rpc/readBinding", json={}).json()["data"]
    assert data == {"kv": "configured", "ctx": None}

    pretty = client.post("/rpc/sayHello?pretty", json={"name": "Ada"})
    assert pretty.text == '{\n  "data": "Hello Ada",\n  "error": null\n}'

    preflight = client.options(
        "/rpc/sayHello",
        headers={"origin": "https://elsewhere.test", "access-control-request-method": "POST"},
    )
    assert preflight.status_code == 200
    assert preflight.headers["access-control-allow-origin"] == "*"


def test_router_is_built_once_and_reloadable(write_tree) -> None:
    router_module, _ = _generate(write_tree, "uvicorn")
    first = router_module.get_router()
    assert router_module.get_router() is first
    rebuilt = router_module.reload_router()
    assert rebuilt is not first
    assert router_module.get_router() is rebuilt


def test_actions_module_is_imported_lazily(write_tree) -> None:
    router_module, _ = _generate(write_tree, "uvicorn")
    assert "shop.actions" not in sys.modules
    router_module.get_router()
    assert "shop.actions" in sys.modules


@pytest.mark.parametrize("adapter", ["uvicorn", "vercel"])
def test_host_site_routes_slug_to_handler(write_tree, adapter) -> None:
    _, api_module = _generate(write_tree, adapter)
    host = Starlette(routes=[Route("/api/{slug:path}", api_module.ALL, methods=["GET", "POST", "OPTIONS"])])
    client = TestClient(host)

    response = client.post("/api/sayHello", json={"name": "John"})
    assert response.status_code == 200
    assert response.json() == {"data": "Hello John", "error": None}
    assert client.post("/api/nope", json={}).status_code == 404


def test_native_bindings_reach_the_action_context(write_tree) -> None:
    _, api_module = _generate(write_tree, "cloudflare")
    host = Starlette(routes=[Route("/api/{slug:path}", api_module.ALL, methods=["POST"])])

    async def worker(scope, receive, send):
        if scope["type"] == "http":
            scope = dict(scope, env={"KV": "native"}, ctx="worker-ctx")
        await host(scope, receive, send)

    data = TestClient(worker).post("/api/readBinding", json={}).json()["data"]
    assert data == {"kv": "native", "ctx": "worker-ctx"}


def test_lambda_router_wraps_app_in_mangum(write_tree) -> None:
    mangum = pytest.importorskip("mangum")
    router_module, api_module = _generate(write_tree, "lambda")
    handoff = router_module._handoff()
    assert isinstance(handoff, mangum.Mangum)
    assert handoff is router_module._handoff()
    assert not hasattr(router_module, "show_routes")
    assert callable(api_module.handler)
