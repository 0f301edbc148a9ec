"""
Exceptions raised by the inference client.

Configuration problems are raised eagerly while a client or middleware is being
constructed. Everything that goes wrong while a call is in flight is raised as a
`ClientRuntimeError` subclass, delivered through the call's promise.
"""

from __future__ import annotations


class InferenceClientError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(InferenceClientError, ValueError):
    """Invalid construction-time configuration. Never retried."""


class ClientRuntimeError(InferenceClientError, RuntimeError):
    """A call failed after it was issued."""

    def __init__(self, message: str, *, code: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message


class ProtocolError(ClientRuntimeError):
    """The server response does not follow the JSON REST contract."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message, code=status_code or 0)
        self.status_code = status_code


class UnacceptableContentTypeError(ProtocolError):
    def __init__(self, content_type: str | None, *, status_code: int | None = None) -> None:
        super().__init__(
            f"Unacceptable content type {content_type or '(none)'} in the response body.",
            status_code=status_code,
        )
        self.content_type = content_type


class DataPayloadMissingError(ProtocolError):
    def __init__(self, *, status_code: int | None = None) -> None:
        super().__init__("Data payload missing from the response body.", status_code=status_code)


class MissingFieldError(ProtocolError):
    """The data payload lacks the field an operation extracts its result from."""

    def __init__(self, key: str, *, status_code: int | None = None) -> None:
        super().__init__(
            f"Field '{key}' missing or malformed in the data payload.",
            status_code=status_code,
        )
        self.key = key


class TransportError(ClientRuntimeError):
    """The HTTP transport failed to deliver the request or receive a response."""


class DecodeError(ClientRuntimeError):
    """A response body could not be decoded as JSON."""
