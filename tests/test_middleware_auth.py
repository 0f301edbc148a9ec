from __future__ import annotations

import base64

import pytest

from inference_client.clients.pipeline import CallOptions, Request, Response, compose
from inference_client.exceptions import ConfigurationError
from inference_client.middleware import (
    BackoffAndRetry,
    BasicAuthenticator,
    SharedTokenAuthenticator,
)


class _Recorder:
    def __init__(self, statuses: list[int] | None = None):
        self._statuses = list(statuses or [])
        self.requests: list[Request] = []

    async def __call__(self, request: Request, options: CallOptions) -> Response:
        self.requests.append(request)
        return Response(status_code=self._statuses.pop(0) if self._statuses else 200)


@pytest.mark.asyncio
async def test_shared_token_sets_bearer_header() -> None:
    terminal = _Recorder()
    handler = SharedTokenAuthenticator("secret").wrap(terminal)

    original = Request(method="POST", path="/model/predictions")
    await handler(original, {})

    assert terminal.requests[0].headers["Authorization"] == "Bearer secret"
    assert "Authorization" not in original.headers


@pytest.mark.asyncio
async def test_basic_sets_encoded_credentials() -> None:
    terminal = _Recorder()
    handler = BasicAuthenticator("user", "pass").wrap(terminal)

    await handler(Request(method="POST", path="/"), {})

    expected = base64.b64encode(b"user:pass").decode("ascii")
    assert terminal.requests[0].headers["Authorization"] == f"Basic {expected}"
    assert expected == "dXNlcjpwYXNz"


@pytest.mark.asyncio
async def test_authenticator_overrides_existing_header() -> None:
    terminal = _Recorder()
    handler = SharedTokenAuthenticator("new").wrap(terminal)

    await handler(Request(method="POST", path="/").with_header("authorization", "Bearer old"), {})

    assert terminal.requests[0].headers.get_list("Authorization") == ["Bearer new"]


@pytest.mark.asyncio
async def test_authenticator_does_not_touch_response() -> None:
    terminal = _Recorder([503])
    handler = SharedTokenAuthenticator("secret").wrap(terminal)

    response = await handler(Request(method="POST", path="/"), {})

    assert response.status_code == 503
    assert len(terminal.requests) == 1


@pytest.mark.asyncio
async def test_retry_outside_auth_resends_authenticated_request() -> None:
    terminal = _Recorder([429, 200])

    async def no_sleep(_: float) -> None:
        return None

    handler = compose(
        [SharedTokenAuthenticator("secret"), BackoffAndRetry(1, 0.0, sleep=no_sleep)],
        terminal,
    )
    await handler(Request(method="POST", path="/"), {})

    assert len(terminal.requests) == 2
    assert all(r.headers["Authorization"] == "Bearer secret" for r in terminal.requests)


def test_empty_credentials_are_rejected() -> None:
    with pytest.raises(ConfigurationError):
        SharedTokenAuthenticator("")
    with pytest.raises(ConfigurationError):
        BasicAuthenticator("", "pass")


def test_repr_redacts_credentials() -> None:
    assert "secret" not in repr(SharedTokenAuthenticator("secret"))
