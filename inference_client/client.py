"""
Main inference client.

Talks to an inference server through the JSON REST API it exposes.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol, runtime_checkable

import httpx

from .clients.http import ClientConfig, HTTPClient
from .clients.pipeline import CallOptions, Middleware, Request
from .clients.promise import Promise
from .datasets import Dataset
from .requests import SCORE_PATH, predict_request, proba_request, score_request
from .responses import PREDICTIONS, PROBABILITIES, SCORES, ResultField, unwrap


@runtime_checkable
class Client(Protocol):
    def predict(self, dataset: Dataset) -> list[Any]: ...

    def proba(self, dataset: Dataset) -> list[Any]: ...

    def score(self, dataset: Dataset) -> list[float]: ...


@runtime_checkable
class AsyncClient(Protocol):
    def predict_async(self, dataset: Dataset) -> Promise[list[Any]]: ...

    def proba_async(self, dataset: Dataset) -> Promise[list[Any]]: ...

    def score_async(self, dataset: Dataset) -> Promise[list[float]]: ...


class InferenceClient:
    """
    Client for a model inference server.

    Every operation comes in two forms. The `*_async` form returns a `Promise`
    immediately while the request runs on the client's event loop; the plain form
    waits on that same promise and returns its value.

    Example:
        ```python
        from inference_client import BackoffAndRetry, InferenceClient, SampleSet
        from inference_client import SharedTokenAuthenticator

        with InferenceClient(
            "127.0.0.1",
            8000,
            middlewares=[SharedTokenAuthenticator("secret"), BackoffAndRetry()],
        ) as client:
            dataset = SampleSet.from_iterable([[1.0, 2.5], [0.3, 4.1]])

            predictions = client.predict(dataset)

            # Issue several calls, then wait for them
            pending = [client.score_async(dataset) for _ in range(4)]
            scores = [p.wait() for p in pending]
        ```
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 8000,
        secure: bool = False,
        middlewares: Sequence[Middleware] = (),
        timeout: float = 0.0,
        verify_certificate: bool = True,
        *,
        score_path: str = SCORE_PATH,
        log_requests: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            host: Address of the inference server.
            port: TCP port of the inference server (0-65535).
            secure: Use https instead of http.
            middlewares: Middleware applied to every request. The last one given is
                outermost, so a retry middleware listed after an authenticator retries
                the authenticated request.
            timeout: Request timeout in seconds; 0 means no timeout.
            verify_certificate: Verify the server's TLS certificate.
            score_path: Route used by `score()`.
            log_requests: Log all HTTP requests (for debugging).
            transport: Override the httpx transport (mainly for tests).

        Raises:
            ConfigurationError: If any setting is invalid.
        """
        config = ClientConfig(
            host=host,
            port=port,
            secure=secure,
            timeout=timeout,
            verify_certificate=verify_certificate,
            log_requests=log_requests,
            transport=transport,
        )
        self._http = HTTPClient(config, middlewares)
        self._score_path = score_path

    def __enter__(self) -> InferenceClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._http.close()

    @property
    def base_url(self) -> str:
        return self._http.base_url

    async def _call(self, build: Callable[[], Request], field: ResultField[Any]) -> Any:
        request = build()
        options: CallOptions = {"operation": field.key}
        response = await self._http.request(request, options)
        return unwrap(response, field)

    # =========================================================================
    # Operations
    # =========================================================================

    def predict(self, dataset: Dataset) -> list[Any]:
        """Make a set of predictions on a dataset."""
        return self.predict_async(dataset).wait()

    def predict_async(self, dataset: Dataset) -> Promise[list[Any]]:
        """Make a set of predictions on a dataset and return a promise."""
        return self._http.submit(self._call(lambda: predict_request(dataset), PREDICTIONS))

    def proba(self, dataset: Dataset) -> list[Any]:
        """Return the joint probabilities of each sample in a dataset."""
        return self.proba_async(dataset).wait()

    def proba_async(self, dataset: Dataset) -> Promise[list[Any]]:
        """Compute the joint probabilities of the samples in a dataset and return a promise."""
        return self._http.submit(self._call(lambda: proba_request(dataset), PROBABILITIES))

    def score(self, dataset: Dataset) -> list[float]:
        """Return the anomaly scores of each sample in a dataset."""
        return self.score_async(dataset).wait()

    def score_async(self, dataset: Dataset) -> Promise[list[float]]:
        """Compute the anomaly scores of the samples in a dataset and return a promise."""
        return self._http.submit(
            self._call(lambda: score_request(dataset, path=self._score_path), SCORES)
        )
