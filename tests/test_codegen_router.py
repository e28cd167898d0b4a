import pytest

from actiongen.codegen import generate_router
from actiongen.config import RouterConfig
from actiongen.errors import ReservedBasePathError, UnsupportedAdapterError


def _router(adapter: str = "uvicorn", **overrides) -> str:
    options = {"base_path": "/api", "relative_actions_path": "..src.server.actions", "adapter": adapter}
    options.update(overrides)
    return generate_router(**options)


def test_router_embeds_base_path_and_actions_path_literally() -> None:
    source = _router(base_path="/rpc")
    assert 'BASE_PATH = "/rpc"' in source
    assert 'APIRouter(prefix="/rpc")' in source
    assert 'load_action_map("..src.server.actions", __package__)' in source
    assert 'load_action_map("..src.server.actions", __package__, reload=True)' in source


def test_router_mounts_each_action_by_name() -> None:
    source = _router()
    assert 'scope.include_router(action, prefix=f"/{name}")' in source
    assert 'action_paths[f"{BASE_PATH}/{name}"] = name' in source
    assert "app.state.action_routes = list_action_routes(actions, BASE_PATH)" in source
    assert "ActionRouter = FastAPI" in source


def test_router_installs_middleware_once() -> None:
    source = _router()
    assert source.count("app.add_middleware(PrettyJSONMiddleware)") == 1
    assert source.count("app.add_middleware(RequestLoggingMiddleware)") == 1
    assert source.count("CORSMiddleware,") == 1


@pytest.mark.parametrize("adapter", ["cloudflare", "uvicorn", "vercel"])
def test_raw_router_adapters_list_routes(adapter) -> None:
    source = _router(adapter)
    assert "show_routes(app)" in source
    assert "Mangum" not in source
    assert '"build_router", "get_router", "reload_router"' in source


def test_lambda_router_exports_handoff_without_route_listing() -> None:
    source = _router("lambda")
    assert "show_routes" not in source
    assert "from mangum import Mangum" in source
    assert 'Mangum(get_router(), lifespan="off")' in source
    assert "def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:" in source
    assert '__all__ = ["ActionRouter", "BASE_PATH", "handler", "reload_router"]' in source


@pytest.mark.parametrize("adapter", ["cloudflare", "uvicorn", "vercel", "lambda"])
def test_router_source_compiles_and_is_deterministic(adapter) -> None:
    source = _router(adapter)
    compile(source, "router.py", "exec")
    assert source == _router(adapter)
    assert source.endswith("\n") and not source.endswith("\n\n")


def test_router_accepts_config_object() -> None:
    config = RouterConfig(base_path="/api", relative_actions_path="..actions", adapter="vercel")
    assert generate_router(config) == generate_router(
        base_path="/api", relative_actions_path="..actions", adapter="vercel"
    )


def test_router_escapes_string_literals() -> None:
    source = _router(base_path='/a"b')
    assert 'BASE_PATH = "/a\\"b"' in source
    compile(source, "router.py", "exec")


def test_router_rejects_unsupported_adapter() -> None:
    with pytest.raises(UnsupportedAdapterError, match="Unsupported adapter: netlify"):
        _router("netlify")


def test_router_rejects_reserved_base_path() -> None:
    with pytest.raises(ReservedBasePathError):
        _router(base_path="/static")
