from __future__ import annotations

import json
import threading
from collections.abc import Callable

import httpx
import pytest

from inference_client import (
    AsyncClient,
    BackoffAndRetry,
    BasicAuthenticator,
    Client,
    ClientRuntimeError,
    ConfigurationError,
    DataPayloadMissingError,
    InferenceClient,
    Promise,
    ProtocolError,
    SampleSet,
    SharedTokenAuthenticator,
    TransportError,
    UnacceptableContentTypeError,
)

DATASET = SampleSet.from_iterable([[1.0, 2.0], [3.5, "red"], [0, 1]])

RESULTS = {
    "/model/predictions": {"predictions": ["a", "b", "a"]},
    "/model/probabilities": {
        "probabilities": [{"a": 0.9, "b": 0.1}, {"a": 0.2, "b": 0.8}, {"a": 0.6, "b": 0.4}]
    },
    "/model/scores": {"scores": [0.1, 4.2, 0.3]},
}


def _server(calls: list[httpx.Request] | None = None) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        if request.method == "POST" and request.url.path in RESULTS:
            return httpx.Response(200, json={"data": RESULTS[request.url.path]}, request=request)
        return httpx.Response(404, json={"message": "not found"}, request=request)

    return handler


def _client(
    handler: Callable[[httpx.Request], httpx.Response], **kwargs: object
) -> InferenceClient:
    return InferenceClient(
        "inference.example",
        8888,
        transport=httpx.MockTransport(handler),
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.mark.parametrize(
    "kwargs, match",
    [
        ({"host": ""}, "Host address"),
        ({"port": -1}, "Port number"),
        ({"port": 65536}, "Port number"),
        ({"timeout": -0.5}, "Timeout"),
        ({"middlewares": [object()]}, "Middleware"),
        ({"middlewares": [SharedTokenAuthenticator("t"), "retry"]}, "Middleware"),
        ({"middlewares": [BackoffAndRetry]}, "Middleware"),
    ],
)
def test_construction_validates_configuration_before_any_request(
    kwargs: dict[str, object], match: str
) -> None:
    calls: list[httpx.Request] = []
    with pytest.raises(ConfigurationError, match=match):
        InferenceClient(transport=httpx.MockTransport(_server(calls)), **kwargs)  # type: ignore[arg-type]
    assert calls == []


@pytest.mark.parametrize("port", [0, 8000, 65535])
def test_port_range_is_inclusive(port: int) -> None:
    client = InferenceClient("localhost", port)
    try:
        assert client.base_url == f"http://localhost:{port}"
    finally:
        client.close()


def test_base_url_uses_secure_flag() -> None:
    with InferenceClient("example.com", 443, secure=True) as client:
        assert client.base_url == "https://example.com:443"


def test_client_satisfies_sync_and_async_protocols() -> None:
    with InferenceClient() as client:
        assert isinstance(client, Client)
        assert isinstance(client, AsyncClient)


def test_predict_sends_json_samples_with_default_headers() -> None:
    calls: list[httpx.Request] = []
    client = _client(_server(calls))
    try:
        assert client.predict(DATASET) == ["a", "b", "a"]
    finally:
        client.close()

    (request,) = calls
    assert request.method == "POST"
    assert str(request.url) == "http://inference.example:8888/model/predictions"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Accept"] == "application/json"
    assert request.headers["User-Agent"].startswith("Inference Client/")
    assert json.loads(request.content) == {"samples": [[1.0, 2.0], [3.5, "red"], [0, 1]]}


def test_proba_and_score() -> None:
    client = _client(_server())
    try:
        assert client.proba(DATASET) == RESULTS["/model/probabilities"]["probabilities"]
        assert client.score(DATASET) == [0.1, 4.2, 0.3]
    finally:
        client.close()


def test_score_path_is_configurable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/model/anomaly-scores"
        return httpx.Response(200, json={"data": {"scores": [1.5]}}, request=request)

    client = _client(handler, score_path="/model/anomaly-scores")
    try:
        assert client.score(SampleSet.from_iterable([[1]])) == [1.5]
    finally:
        client.close()


def test_async_form_returns_promise_with_same_value_as_sync_form() -> None:
    client = _client(_server())
    try:
        promise = client.predict_async(DATASET)
        assert isinstance(promise, Promise)
        assert promise.wait() == client.predict(DATASET)
        assert client.proba_async(DATASET).wait() == client.proba(DATASET)
        assert client.score_async(DATASET).wait() == client.score(DATASET)
    finally:
        client.close()


@pytest.mark.asyncio
async def test_promises_are_awaitable() -> None:
    client = _client(_server())
    try:
        assert await client.predict_async(DATASET) == ["a", "b", "a"]
        assert await client.score_async(DATASET) == [0.1, 4.2, 0.3]
    finally:
        client.close()


def test_unacceptable_content_type_fails_the_call() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="predictions: 1, 2, 3", request=request)

    client = _client(handler)
    try:
        with pytest.raises(UnacceptableContentTypeError, match="Unacceptable content type"):
            client.predict(DATASET)
    finally:
        client.close()


def test_missing_content_type_fails_the_call() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b'{"data":{"predictions":[1]}}', request=request)

    client = _client(handler)
    try:
        with pytest.raises(ProtocolError, match="Unacceptable content type"):
            client.predict(DATASET)
    finally:
        client.close()


def test_predict_unwraps_data_payload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"predictions": [1, 2, 3]}}, request=request)

    client = _client(handler)
    try:
        assert client.predict(DATASET) == [1, 2, 3]
    finally:
        client.close()


def test_missing_data_payload_fails_the_call() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"predictions": [1]}, request=request)

    client = _client(handler)
    try:
        promise = client.predict_async(DATASET)
        with pytest.raises(DataPayloadMissingError, match="Data payload missing"):
            promise.wait()
    finally:
        client.close()


def test_transport_errors_are_rewrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    client = _client(handler)
    try:
        with pytest.raises(TransportError, match="Connection refused") as exc_info:
            client.predict(DATASET)
    finally:
        client.close()
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_timeouts_are_rewrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = _client(handler, timeout=1.5)
    try:
        with pytest.raises(TransportError):
            client.score(DATASET)
    finally:
        client.close()


def test_retries_overload_then_succeeds_with_authenticated_request() -> None:
    delays: list[float] = []
    calls: list[httpx.Request] = []

    async def sleep(delay: float) -> None:
        delays.append(delay)

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) <= 2:
            return httpx.Response(503, json={"message": "busy"}, request=request)
        return httpx.Response(200, json={"data": {"predictions": [7]}}, request=request)

    client = _client(
        handler,
        middlewares=[
            BasicAuthenticator("user", "pass"),
            BackoffAndRetry(max_retries=3, initial_delay=0.1, sleep=sleep),
        ],
    )
    try:
        assert client.predict(SampleSet.from_iterable([[1]])) == [7]
    finally:
        client.close()

    assert delays == [0.1, 0.2]
    assert len(calls) == 3
    assert {c.headers["Authorization"] for c in calls} == {"Basic dXNlcjpwYXNz"}


def test_exhausted_retries_surface_as_protocol_error() -> None:
    async def sleep(delay: float) -> None:
        return None

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"message": "Too Many Requests"}, request=request)

    client = _client(handler, middlewares=[BackoffAndRetry(max_retries=2, sleep=sleep)])
    try:
        with pytest.raises(ProtocolError) as exc_info:
            client.predict(DATASET)
    finally:
        client.close()
    assert exc_info.value.status_code == 429


def test_retry_sleep_does_not_block_other_calls() -> None:
    release = threading.Event()

    def handler(request: httpx.Request) -> httpx.Response:
        samples = json.loads(request.content)["samples"]
        if samples == [[1]] and not release.is_set():
            return httpx.Response(503, json={}, request=request)
        return httpx.Response(200, json={"data": {"scores": [0.5]}}, request=request)

    client = _client(handler, middlewares=[BackoffAndRetry(max_retries=1, initial_delay=2.0)])
    try:
        slow = client.score_async(SampleSet.from_iterable([[1]]))
        fast = client.score_async(SampleSet.from_iterable([[2]]))

        assert fast.wait(timeout=1.5) == [0.5]
        assert not slow.done()

        release.set()
        assert slow.wait(timeout=5.0) == [0.5]
    finally:
        client.close()


def test_calls_after_close_are_rejected() -> None:
    client = _client(_server())
    client.close()
    client.close()
    with pytest.raises(RuntimeError, match="closed"):
        client.predict(DATASET)


def test_close_fails_calls_still_in_flight() -> None:
    first_attempt = threading.Event()

    def handler(request: httpx.Request) -> httpx.Response:
        first_attempt.set()
        return httpx.Response(503, json={}, request=request)

    client = _client(handler, middlewares=[BackoffAndRetry(max_retries=1, initial_delay=30.0)])
    pending = client.score_async(DATASET)
    chained = pending.then(len)
    assert first_attempt.wait(timeout=5.0)

    client.close()

    with pytest.raises(ClientRuntimeError, match="closed"):
        pending.wait(timeout=5.0)
    with pytest.raises(ClientRuntimeError, match="closed"):
        chained.wait(timeout=5.0)


class _BoolDataset:
    def samples(self) -> list[list[object]]:
        return [[True, False]]


def test_invalid_dataset_rejects_the_promise() -> None:
    calls: list[httpx.Request] = []
    with _client(_server(calls)) as client:
        pending = client.predict_async(_BoolDataset())  # type: ignore[arg-type]
        assert isinstance(pending, Promise)
        with pytest.raises(ConfigurationError):
            pending.wait(timeout=5.0)

        with pytest.raises(ConfigurationError):
            client.score(_BoolDataset())  # type: ignore[arg-type]
    assert calls == []
