from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Literal

from inference_client import InferenceClient
from inference_client.clients.pipeline import Middleware
from inference_client.exceptions import (
    ClientRuntimeError,
    ConfigurationError,
    DecodeError,
    ProtocolError,
    TransportError,
)
from inference_client.middleware import (
    BackoffAndRetry,
    BasicAuthenticator,
    SharedTokenAuthenticator,
)

from .errors import CLIError
from .results import CommandMeta, CommandResult, ErrorInfo

OutputFormat = Literal["table", "json"]


@dataclass
class CLIContext:
    output: OutputFormat
    quiet: bool
    verbosity: int
    host: str
    port: int
    secure: bool
    timeout: float
    verify_certificate: bool
    token: str | None
    username: str | None
    password: str | None
    max_retries: int
    initial_delay: float

    _client: InferenceClient | None = None

    def middlewares(self) -> list[Middleware]:
        if self.token and self.username:
            raise CLIError(
                "Use either --token or --username/--password, not both.",
                exit_code=2,
                error_type="usage_error",
                hint="--token selects bearer auth; --username selects basic auth.",
            )

        middlewares: list[Middleware] = []
        if self.token:
            middlewares.append(SharedTokenAuthenticator(self.token))
        elif self.username:
            middlewares.append(BasicAuthenticator(self.username, self.password or ""))
        elif self.password:
            raise CLIError("--password requires --username.", exit_code=2, error_type="usage_error")

        # Outermost, so retries resend the authenticated request.
        if self.max_retries > 0:
            middlewares.append(BackoffAndRetry(self.max_retries, self.initial_delay))
        return middlewares

    def get_client(self) -> InferenceClient:
        if self._client is not None:
            return self._client

        if self.max_retries < 0:
            raise CLIError("--max-retries must be >= 0.", exit_code=2, error_type="usage_error")

        self._client = InferenceClient(
            self.host,
            self.port,
            self.secure,
            self.middlewares(),
            self.timeout,
            self.verify_certificate,
            log_requests=self.verbosity >= 2,
        )
        return self._client

    @property
    def base_url(self) -> str | None:
        return self._client.base_url if self._client is not None else None

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def exit_code_for_exception(exc: Exception) -> int:
    if isinstance(exc, CLIError):
        return exc.exit_code
    if isinstance(exc, ConfigurationError):
        return 2
    if isinstance(exc, (ProtocolError, DecodeError)):
        return 5
    if isinstance(exc, TransportError):
        return 6
    return 1


def error_info_for_exception(exc: Exception) -> ErrorInfo:
    if isinstance(exc, CLIError):
        return ErrorInfo(
            type=exc.error_type, message=exc.message, hint=exc.hint, details=exc.details
        )
    if isinstance(exc, ConfigurationError):
        return ErrorInfo(type="config_error", message=str(exc))
    if isinstance(exc, ProtocolError):
        details = {"statusCode": exc.status_code} if exc.status_code is not None else None
        hint = None
        if exc.status_code in BackoffAndRetry.RETRY_CODES:
            hint = "The server is overloaded; try again later or raise --max-retries."
        return ErrorInfo(type="protocol_error", message=str(exc), hint=hint, details=details)
    if isinstance(exc, DecodeError):
        return ErrorInfo(type="protocol_error", message=str(exc))
    if isinstance(exc, TransportError):
        details = {"code": exc.code} if exc.code else None
        return ErrorInfo(type="network_error", message=str(exc), details=details)
    if isinstance(exc, ClientRuntimeError):
        return ErrorInfo(type="runtime_error", message=str(exc))
    return ErrorInfo(type=exc.__class__.__name__, message=str(exc))


def build_result(
    *,
    ok: bool,
    command: str,
    started_at: float,
    data: Any | None,
    warnings: list[str],
    base_url: str | None = None,
    samples: int | None = None,
    error: ErrorInfo | None = None,
) -> CommandResult:
    duration_ms = int(max(0.0, (time.time() - started_at) * 1000))
    meta = CommandMeta(duration_ms=duration_ms, base_url=base_url, samples=samples)
    return CommandResult(
        ok=ok,
        command=command,
        data=data,
        warnings=warnings,
        meta=meta,
        error=error,
    )
