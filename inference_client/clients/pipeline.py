"""
Internal request pipeline primitives.

The client models requests/responses independently of the underlying HTTP transport
so cross-cutting behavior (authentication, retries) can be implemented as middleware.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol, TypeAlias, TypedDict, runtime_checkable

import httpx


class CallOptions(TypedDict, total=False):
    operation: str
    timeout: float


@dataclass(frozen=True, slots=True)
class Request:
    method: str
    path: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes | None = None

    def with_header(self, name: str, value: str) -> Request:
        """Return a copy of the request with `name` set to `value`."""
        headers = httpx.Headers(self.headers)
        headers[name] = value
        return dataclasses.replace(self, headers=headers)


@dataclass(frozen=True, slots=True)
class Response:
    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes = b""

    @property
    def content_type(self) -> str | None:
        return self.headers.get("Content-Type")


Handler: TypeAlias = Callable[[Request, CallOptions], Awaitable[Response]]


@runtime_checkable
class Middleware(Protocol):
    """
    A request/response interceptor.

    `wrap()` receives the next handler in the chain and returns a new handler. The
    returned handler may modify the request before delegating, inspect the response
    afterwards, short-circuit, or call `next` again to retry.
    """

    def wrap(self, next: Handler) -> Handler: ...


def is_middleware(obj: object) -> bool:
    if isinstance(obj, type):
        return False
    return isinstance(obj, Middleware) and callable(getattr(obj, "wrap", None))


def compose(middlewares: Sequence[Middleware], terminal: Handler) -> Handler:
    """
    Fold `middlewares` around `terminal`.

    Middlewares are applied in the order given, so the last one is outermost: it sees
    the request first and the response last.
    """
    handler = terminal
    for middleware in middlewares:
        handler = middleware.wrap(handler)
    return handler
