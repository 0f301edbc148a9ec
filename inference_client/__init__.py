"""
Inference client SDK.

A client for model inference servers that expose predictions, probabilities and
anomaly scores over a JSON REST API.
"""

from __future__ import annotations

from ._version import __version__
from .client import AsyncClient, Client, InferenceClient
from .clients.pipeline import CallOptions, Handler, Middleware, Request, Response
from .clients.promise import Promise
from .datasets import Dataset, SampleSet
from .exceptions import (
    ClientRuntimeError,
    ConfigurationError,
    DataPayloadMissingError,
    DecodeError,
    InferenceClientError,
    MissingFieldError,
    ProtocolError,
    TransportError,
    UnacceptableContentTypeError,
)
from .middleware import (
    Authenticator,
    BackoffAndRetry,
    BasicAuthenticator,
    SharedTokenAuthenticator,
)

__all__ = [
    "__version__",
    # Client
    "AsyncClient",
    "Client",
    "InferenceClient",
    "Promise",
    # Pipeline
    "CallOptions",
    "Handler",
    "Middleware",
    "Request",
    "Response",
    # Middleware
    "Authenticator",
    "BackoffAndRetry",
    "BasicAuthenticator",
    "SharedTokenAuthenticator",
    # Datasets
    "Dataset",
    "SampleSet",
    # Exceptions
    "ClientRuntimeError",
    "ConfigurationError",
    "DataPayloadMissingError",
    "DecodeError",
    "InferenceClientError",
    "MissingFieldError",
    "ProtocolError",
    "TransportError",
    "UnacceptableContentTypeError",
]
