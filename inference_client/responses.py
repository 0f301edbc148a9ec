"""
Response unwrapping.

Responses pass through three checks before an operation sees its result: the content
type must be acceptable, the body must decode as JSON, and the decoded object must
carry a `data` payload. The operation-specific field is then extracted from the
payload with pydantic.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, JsonValue, ValidationError

from .clients.pipeline import Response
from .exceptions import DataPayloadMissingError, MissingFieldError, UnacceptableContentTypeError
from .serialization import decode

ACCEPTED_CONTENT_TYPES = ("application/json",)


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class PredictionsPayload(_Payload):
    predictions: list[str | int | float]


class ProbabilitiesPayload(_Payload):
    probabilities: list[dict[str, float] | list[float]]


class ScoresPayload(_Payload):
    scores: list[float]


P = TypeVar("P", bound=_Payload)


class ResultField(Generic[P]):
    """Names the key an operation reads from the data payload, and the model validating it."""

    def __init__(self, key: str, model: type[P]):
        self.key = key
        self.model = model

    def __repr__(self) -> str:
        return f"ResultField({self.key!r})"


PREDICTIONS = ResultField("predictions", PredictionsPayload)
PROBABILITIES = ResultField("probabilities", ProbabilitiesPayload)
SCORES = ResultField("scores", ScoresPayload)


def check_content_type(response: Response) -> None:
    content_type = response.content_type
    if content_type not in ACCEPTED_CONTENT_TYPES:
        raise UnacceptableContentTypeError(content_type, status_code=response.status_code)


def parse_response_body(response: Response) -> JsonValue:
    """
    Validate the content type and decode the response body.

    Raises:
        UnacceptableContentTypeError: If `Content-Type` is missing or not JSON.
        DecodeError: If the body is not valid JSON.
    """
    check_content_type(response)
    return decode(response.content)


def unpack_payload(body: JsonValue, *, status_code: int | None = None) -> Mapping[str, Any]:
    """Return the `data` payload of a decoded response body."""
    if not isinstance(body, Mapping) or body.get("data") is None:
        raise DataPayloadMissingError(status_code=status_code)
    data = body["data"]
    if not isinstance(data, Mapping):
        raise DataPayloadMissingError(status_code=status_code)
    return data


def extract_field(
    data: Mapping[str, Any], field: ResultField[Any], *, status_code: int | None = None
) -> Any:
    try:
        payload = field.model.model_validate(data)
    except ValidationError as e:
        raise MissingFieldError(field.key, status_code=status_code) from e
    return getattr(payload, field.key)


def unwrap(response: Response, field: ResultField[Any]) -> Any:
    """Run a response through the whole pipeline and return the operation's result."""
    body = parse_response_body(response)
    data = unpack_payload(body, status_code=response.status_code)
    return extract_field(data, field, status_code=response.status_code)
