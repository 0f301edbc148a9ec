"""
Deferred results and the event loop that produces them.

Each client owns one asyncio event loop running in a daemon thread. Calls are
scheduled onto that loop and handed back to the caller as a `Promise`, which can be
waited on from synchronous code or awaited from asyncio code.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Coroutine, Generator
from concurrent.futures import Future
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class Promise(Generic[T]):
    """
    Handle to a value that is not available yet.

    A promise resolves exactly once, either to a value or to an exception. `wait()`
    blocks the calling thread until then; `await promise` suspends the current
    coroutine instead.
    """

    __slots__ = ("_future",)

    def __init__(self, future: Future[T]):
        self._future = future

    @classmethod
    def resolved(cls, value: T) -> Promise[T]:
        future: Future[T] = Future()
        future.set_result(value)
        return cls(future)

    @classmethod
    def rejected(cls, error: BaseException) -> Promise[T]:
        future: Future[T] = Future()
        future.set_exception(error)
        return cls(future)

    def wait(self, timeout: float | None = None) -> T:
        """Block until resolved and return the value, or raise the failure."""
        return self._future.result(timeout)

    def done(self) -> bool:
        return self._future.done()

    def then(self, on_fulfilled: Callable[[T], U]) -> Promise[U]:
        """Return a promise for `on_fulfilled(value)`; failures pass through unchanged."""
        chained: Future[U] = Future()

        def _settle(source: Future[T]) -> None:
            if source.cancelled():
                chained.cancel()
                return
            error = source.exception()
            if error is not None:
                chained.set_exception(error)
                return
            try:
                chained.set_result(on_fulfilled(source.result()))
            except Exception as e:
                chained.set_exception(e)

        self._future.add_done_callback(_settle)
        return Promise(chained)

    def __await__(self) -> Generator[Any, None, T]:
        return asyncio.wrap_future(self._future).__await__()


class EventLoopThread:
    """An asyncio event loop running in a background daemon thread."""

    def __init__(self, *, name: str = "inference-client"):
        self._name = name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _ensure_started(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                started = threading.Event()

                def _run() -> None:
                    asyncio.set_event_loop(loop)
                    loop.call_soon(started.set)
                    loop.run_forever()

                self._thread = threading.Thread(target=_run, name=self._name, daemon=True)
                self._thread.start()
                started.wait()
                self._loop = loop
                logger.debug("Event loop thread %s started", self._name)
            return self._loop

    def submit(self, coro: Coroutine[Any, Any, T]) -> Promise[T]:
        """Schedule `coro` on the loop and return a promise for its result."""
        loop = self._ensure_started()
        return Promise(asyncio.run_coroutine_threadsafe(coro, loop))

    def stop(self) -> None:
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None
        if loop is None or thread is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        thread.join()
        loop.close()
        logger.debug("Event loop thread %s stopped", self._name)
