"""HTTP client for calling mounted actions.

Paths are built by attribute or item access and end in ``post``::

    result = await client.api.sayHello.post({"name": "John"})
    result.unwrap()  # "Hello John"

Every call returns an :class:`~actiongen.errors.ActionResult` parsed from
the response envelope; failures are never retried.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Generic, Iterable, Optional, Tuple, TypeVar, Union

import httpx

from .errors import ActionError, ActionResult

RouterT = TypeVar("RouterT")

BaseURL = Union[str, Callable[[], str]]

UNEXPECTED_RESPONSE = "UNEXPECTED_RESPONSE"
TEST_BASE_URL = "http://testserver"


class ActionPath:
    """A partially built action path, e.g. ``client.api.sayHello``."""

    def __init__(self, client: "ActionClient[Any]", segments: Tuple[str, ...]) -> None:
        self._client = client
        self._segments = segments

    @property
    def path(self) -> str:
        return "/" + "/".join(self._segments)

    def __getattr__(self, segment: str) -> "ActionPath":
        if segment.startswith("_"):
            raise AttributeError(segment)
        return ActionPath(self._client, self._segments + (segment,))

    def __getitem__(self, segment: str) -> "ActionPath":
        return ActionPath(self._client, self._segments + tuple(part for part in segment.split("/") if part))

    async def post(self, payload: Any = None) -> ActionResult:
        return await self._client.call(self.path, payload)

    def __str__(self) -> str:
        return self.path

    def __repr__(self) -> str:
        return f"ActionPath({self.path!r})"


class ActionClient(Generic[RouterT]):
    """Calls actions over HTTP.

    ``base_url`` is either a string or a zero-argument callable evaluated on
    every call, so environment-dependent origins are resolved late. With
    ``known_paths`` set, calls to any other path are refused before a
    request is made.
    """

    def __init__(
        self,
        base_url: BaseURL = "",
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        known_paths: Optional[Iterable[str]] = None,
        **client_kwargs: Any,
    ) -> None:
        self._base_url = base_url
        self._transport = transport
        self._known_paths = frozenset(known_paths) if known_paths is not None else None
        self._client_kwargs: Dict[str, Any] = client_kwargs

    @classmethod
    def for_app(cls, app: Any, *, base_url: str = TEST_BASE_URL, **client_kwargs: Any) -> "ActionClient[Any]":
        """Client bound in-process to a built router, without any network."""
        known = getattr(getattr(app, "state", None), "action_paths", None)
        return cls(
            base_url,
            transport=httpx.ASGITransport(app=app),
            known_paths=list(known) if known else None,
            **client_kwargs,
        )

    @property
    def base_url(self) -> str:
        value = self._base_url() if callable(self._base_url) else self._base_url
        return value or ""

    def url_for(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return self.base_url.rstrip("/") + path

    def __getattr__(self, segment: str) -> ActionPath:
        if segment.startswith("_"):
            raise AttributeError(segment)
        return ActionPath(self, (segment,))

    def __getitem__(self, segment: str) -> ActionPath:
        return ActionPath(self, ()).__getitem__(segment)

    async def call(self, path: str, payload: Any = None) -> ActionResult:
        """POST ``payload`` as JSON to ``path`` and parse the envelope."""
        if not path.startswith("/"):
            path = "/" + path
        if self._known_paths is not None and path not in self._known_paths:
            raise LookupError(f"Unknown action path {path!r}; known paths: {', '.join(sorted(self._known_paths))}")

        async with httpx.AsyncClient(transport=self._transport, **self._client_kwargs) as http:
            response = await http.post(self.url_for(path), json=payload)
        return _parse_response(response)


def _parse_response(response: httpx.Response) -> ActionResult:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and "data" in payload and "error" in payload:
        return ActionResult.from_envelope(payload, status=response.status_code)
    error = ActionError(
        f"Unexpected response from {response.request.url} (status {response.status_code})",
        code=UNEXPECTED_RESPONSE,
    )
    return ActionResult(data=None, error=error, status=response.status_code)


__all__ = ["ActionClient", "ActionPath", "UNEXPECTED_RESPONSE"]
