"""Authentication middleware: attach a fixed `Authorization` header to every request."""

from __future__ import annotations

import base64

from ..clients.pipeline import CallOptions, Handler, Middleware, Request, Response
from ..exceptions import ConfigurationError


class Authenticator(Middleware):
    """Sets the `Authorization` header to a value computed once at construction."""

    credentials: str

    def wrap(self, next: Handler) -> Handler:
        credentials = self.credentials

        async def _handler(request: Request, options: CallOptions) -> Response:
            return await next(request.with_header("Authorization", credentials), options)

        return _handler

    def __repr__(self) -> str:
        return f"{type(self).__name__}(credentials=<redacted>)"


class BasicAuthenticator(Authenticator):
    """HTTP Basic authentication with a username and password."""

    def __init__(self, username: str, password: str):
        if not username:
            raise ConfigurationError("Username cannot be empty.")
        token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        self.credentials = f"Basic {token}"


class SharedTokenAuthenticator(Authenticator):
    """Bearer authentication with a token shared between client and server."""

    def __init__(self, token: str):
        if not token:
            raise ConfigurationError("Token cannot be empty.")
        self.credentials = f"Bearer {token}"
