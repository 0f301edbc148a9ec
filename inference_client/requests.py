"""Request builders for the JSON REST contract exposed by the inference server."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from .clients.pipeline import Request
from .datasets import Dataset, SampleSet, Scalar
from .exceptions import ConfigurationError
from .serialization import encode

PREDICT_PATH = "/model/predictions"
PROBA_PATH = "/model/probabilities"
SCORE_PATH = "/model/scores"

JSON_HEADERS = {
    "Content-Type": "application/json",
}


class SamplesBody(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    samples: list[list[Scalar]]


def json_request(method: str, path: str, json: Any | None = None) -> Request:
    return Request(
        method=method,
        path=path,
        headers=httpx.Headers(JSON_HEADERS),
        content=encode(json),
    )


def samples_body(dataset: Dataset) -> dict[str, Any]:
    # bool is not a sample value; True must not go out as 1.
    rows = SampleSet.from_iterable(dataset.samples()).rows
    try:
        body = SamplesBody(samples=[list(row) for row in rows])
    except ValidationError as e:
        raise ConfigurationError("Dataset samples must be sequences of scalar values.") from e
    return body.model_dump()


def predict_request(dataset: Dataset) -> Request:
    return json_request("POST", PREDICT_PATH, samples_body(dataset))


def proba_request(dataset: Dataset) -> Request:
    return json_request("POST", PROBA_PATH, samples_body(dataset))


def score_request(dataset: Dataset, *, path: str = SCORE_PATH) -> Request:
    return json_request("POST", path, samples_body(dataset))
