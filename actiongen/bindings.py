"""Structural types for the per-request bindings some adapters provide.

Cloudflare Python Workers hand every request an ``env`` object (the
worker's bindings such as KV namespaces and secrets) and an execution
context. The generated handler copies both into the ASGI scope, where
:class:`~actiongen.actions.ActionContext` exposes them as ``context.env``
and ``context.execution_context``.
"""

from __future__ import annotations

from typing import Any, Awaitable, Protocol, TypeVar

EnvT = TypeVar("EnvT", covariant=True)


class WorkerEnv(Protocol):
    """Open-ended bag of worker bindings, read by attribute."""

    def __getattr__(self, name: str) -> Any: ...


class ExecutionContext(Protocol):
    def wait_until(self, task: Awaitable[Any]) -> None: ...

    def pass_through_on_exception(self) -> None: ...


class WorkerRuntime(Protocol[EnvT]):
    """Native runtime attached to each request by the worker host."""

    @property
    def env(self) -> EnvT: ...

    @property
    def ctx(self) -> ExecutionContext: ...


__all__ = ["WorkerEnv", "ExecutionContext", "WorkerRuntime"]
