"""Built-in middleware."""

from __future__ import annotations

from ..clients.pipeline import Middleware
from .auth import Authenticator, BasicAuthenticator, SharedTokenAuthenticator
from .retry import BackoffAndRetry

__all__ = [
    "Authenticator",
    "BackoffAndRetry",
    "BasicAuthenticator",
    "Middleware",
    "SharedTokenAuthenticator",
]
