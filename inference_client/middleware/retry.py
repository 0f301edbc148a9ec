"""
Backoff and retry middleware.

Handles Too Many Requests (429) and Service Unavailable (503) responses by retrying
the request after waiting, so an overloaded server is not hit even harder. The wait
doubles after every retry.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..clients.pipeline import CallOptions, Handler, Middleware, Request, Response
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass(slots=True)
class RetryState:
    """Retry bookkeeping for one in-flight call."""

    tries_left: int
    delay: float


class BackoffAndRetry(Middleware):
    RETRY_CODES = frozenset({429, 503})

    BACKOFF_FACTOR = 2.0

    def __init__(
        self,
        max_retries: int = 3,
        initial_delay: float = 0.5,
        *,
        sleep: Sleep | None = None,
    ):
        """
        Args:
            max_retries: Maximum number of times to retry a request before giving up.
            initial_delay: Seconds to wait before the first retry.
            sleep: Coroutine function used to wait (defaults to `asyncio.sleep`).
        """
        if max_retries < 0:
            raise ConfigurationError(
                f"Max retries must be greater than or equal to 0, {max_retries} given."
            )
        if initial_delay < 0.0:
            raise ConfigurationError(
                f"Initial delay must be greater than or equal to 0, {initial_delay} given."
            )
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self._sleep: Sleep = sleep or asyncio.sleep

    async def try_request(
        self,
        request: Request,
        next: Handler,
        options: CallOptions,
        state: RetryState,
    ) -> Response:
        while True:
            response = await next(request, options)
            state.tries_left -= 1

            if response.status_code not in self.RETRY_CODES or state.tries_left <= 0:
                return response

            logger.warning(
                "Server responded %d to %s %s, retrying in %.2fs (%d retries left)",
                response.status_code,
                request.method,
                request.path,
                state.delay,
                state.tries_left - 1,
            )
            await self._sleep(state.delay)
            state.delay *= self.BACKOFF_FACTOR

    def wrap(self, next: Handler) -> Handler:
        async def _handler(request: Request, options: CallOptions) -> Response:
            state = RetryState(tries_left=1 + self.max_retries, delay=self.initial_delay)
            return await self.try_request(request, next, options, state)

        return _handler

    def __repr__(self) -> str:
        return f"BackoffAndRetry(max_retries={self.max_retries}, initial_delay={self.initial_delay})"
