import httpx
import pytest
from fastapi import FastAPI

from actiongen import ActionError, define_action
from actiongen.client import UNEXPECTED_RESPONSE, ActionClient


def _router() -> FastAPI:
    async def say_hello(payload, context):
        if not payload or "name" not in payload:
            raise ActionError("name is required", code="BAD_INPUT")
        return f"Hello {payload['name']}"

    app = FastAPI()
    app.include_router(define_action(say_hello), prefix="/api/sayHello")
    app.state.action_paths = {"/api/sayHello": "sayHello"}
    return app


def test_paths_are_built_by_attribute_and_item_access() -> None:
    client = ActionClient("https://example.com")
    assert client.api.sayHello.path == "/api/sayHello"
    assert client["api/say-hello"].path == "/api/say-hello"
    assert client.api["v1.2"].path == "/api/v1.2"
    assert client.url_for("/api/sayHello") == "https://example.com/api/sayHello"


def test_private_attributes_are_not_paths() -> None:
    client = ActionClient()
    with pytest.raises(AttributeError):
        client._missing
    with pytest.raises(AttributeError):
        client.api.__wrapped__


def test_base_url_callable_is_evaluated_per_access() -> None:
    origins = iter(["http://one.test", "http://two.test/"])
    client = ActionClient(lambda: next(origins))
    assert client.url_for("/api/x") == "http://one.test/api/x"
    assert client.url_for("api/x") == "http://two.test/api/x"


async def test_for_app_calls_actions_in_process() -> None:
    client = ActionClient.for_app(_router())
    result = await client.api.sayHello.post({"name": "John"})
    assert result.ok
    assert result.status == 200
    assert result.data == "Hello John"


async def test_error_envelopes_become_results() -> None:
    client = ActionClient.for_app(_router())
    result = await client.call("/api/sayHello", {})
    assert not result.ok
    assert result.status == 500
    assert result.error.code == "BAD_INPUT"
    with pytest.raises(ActionError, match="name is required"):
        result.unwrap()


async def test_unknown_paths_are_refused_before_sending() -> None:
    client = ActionClient.for_app(_router())
    with pytest.raises(LookupError, match="/api/sayGoodbye"):
        await client.api.sayGoodbye.post({})


async def test_non_envelope_responses_are_reported() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway"))
    client = ActionClient("http://upstream.test", transport=transport)
    result = await client.api.sayHello.post({"name": "John"})
    assert result.status == 502
    assert result.error.code == UNEXPECTED_RESPONSE
