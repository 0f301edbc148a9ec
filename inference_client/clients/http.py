"""
HTTP transport ownership.

`HTTPClient` owns the `httpx.AsyncClient`, the middleware chain built around it, and
the event loop every call runs on.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

from .._version import __version__
from ..exceptions import ClientRuntimeError, ConfigurationError, TransportError
from .pipeline import CallOptions, Handler, Middleware, Request, Response, compose, is_middleware
from .promise import EventLoopThread, Promise

logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_AGENT = f"Inference Client/{__version__} (python-httpx)"

DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/json",
}

MAX_TCP_PORT = 65535


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """
    Connection settings, validated when constructed.

    Attributes:
        host: Server host name or address.
        port: Server TCP port (0-65535).
        secure: Use https instead of http.
        timeout: Request timeout in seconds; 0 disables the timeout.
        verify_certificate: Verify the server's TLS certificate.
        log_requests: Log every request/response line at DEBUG level.
        transport: Optional httpx transport override (e.g. `httpx.MockTransport`).
    """

    host: str = "127.0.0.1"
    port: int = 8000
    secure: bool = False
    timeout: float = 0.0
    verify_certificate: bool = True
    log_requests: bool = False
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if not self.host:
            raise ConfigurationError("Host address cannot be empty.")
        if self.port < 0 or self.port > MAX_TCP_PORT:
            raise ConfigurationError(
                f"Port number must be between 0 and {MAX_TCP_PORT}, {self.port} given."
            )
        if self.timeout < 0.0:
            raise ConfigurationError(f"Timeout must be greater than 0, {self.timeout} given.")

    @property
    def base_url(self) -> str:
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.host}:{self.port}"

    @property
    def httpx_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.timeout or None)


def _error_code(exc: BaseException) -> int:
    cause = exc.__cause__ or exc.__context__
    while cause is not None:
        if isinstance(cause, OSError) and cause.errno:
            return cause.errno
        cause = cause.__cause__ or cause.__context__
    return 0


class HTTPClient:
    """Sends requests through the middleware chain on a background event loop."""

    def __init__(self, config: ClientConfig, middlewares: Sequence[Middleware] = ()):
        for middleware in middlewares:
            if not is_middleware(middleware):
                raise ConfigurationError(
                    "Middleware must implement the Middleware protocol, "
                    f"{type(middleware).__name__} given."
                )

        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers=DEFAULT_HEADERS,
            timeout=config.httpx_timeout,
            verify=config.verify_certificate,
            transport=config.transport,
        )
        self._handler: Handler = compose(middlewares, self._send)
        self._loop = EventLoopThread()
        self._closed = False

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    async def _send(self, request: Request, options: CallOptions) -> Response:
        http_request = self._client.build_request(
            request.method,
            request.path,
            headers=request.headers,
            content=request.content,
            timeout=options.get("timeout", httpx.USE_CLIENT_DEFAULT),
        )
        if self._config.log_requests:
            logger.debug("-> %s %s", http_request.method, http_request.url)

        response = await self._client.send(http_request)

        if self._config.log_requests:
            logger.debug(
                "<- %d %s (%d bytes)",
                response.status_code,
                http_request.url,
                len(response.content),
            )
        return Response(
            status_code=response.status_code,
            headers=response.headers,
            content=response.content,
        )

    async def request(self, request: Request, options: CallOptions | None = None) -> Response:
        """
        Run `request` through the middleware chain.

        Raises:
            TransportError: If the transport fails (network error, timeout).
        """
        try:
            return await self._handler(request, options or {})
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__, code=_error_code(e)) from e

    async def _run(self, coro: Coroutine[Any, Any, T]) -> T:
        try:
            return await coro
        except asyncio.CancelledError:
            if self._closed:
                raise ClientRuntimeError("Client is closed.") from None
            raise

    def submit(self, coro: Coroutine[Any, Any, T]) -> Promise[T]:
        if self._closed:
            coro.close()
            raise ClientRuntimeError("Client is closed.")
        return self._loop.submit(self._run(coro))

    async def _shutdown(self) -> None:
        current = asyncio.current_task()
        pending = [task for task in asyncio.all_tasks() if task is not current]
        if pending:
            logger.debug("Cancelling %d in-flight call(s) on close", len(pending))
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        await self._client.aclose()

    def close(self) -> None:
        """
        Close the transport and stop the event loop.

        Calls still in flight fail with `ClientRuntimeError`.
        """
        if self._closed:
            return
        self._closed = True
        try:
            self._loop.submit(self._shutdown()).wait()
        finally:
            self._loop.stop()
