"""
Datasets sent to the inference server.

The client only needs an object exposing `samples()`; `SampleSet` is a small
concrete implementation for callers (and the CLI) that hold plain sequences.
"""

from __future__ import annotations

import csv
import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, TypeAlias, runtime_checkable

from .exceptions import ConfigurationError

Scalar: TypeAlias = str | int | float
Sample: TypeAlias = Sequence[Scalar]


@runtime_checkable
class Dataset(Protocol):
    def samples(self) -> Sequence[Sample]: ...


def _coerce_cell(text: str) -> Scalar:
    value = text.strip()
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


@dataclass(frozen=True, slots=True)
class SampleSet:
    """An immutable, unlabeled set of samples."""

    rows: tuple[tuple[Scalar, ...], ...]

    @classmethod
    def from_iterable(cls, samples: Iterable[Iterable[Any]]) -> SampleSet:
        if not isinstance(samples, Iterable):
            raise ConfigurationError("Samples must be an iterable of sequences.")
        rows: list[tuple[Scalar, ...]] = []
        for i, sample in enumerate(samples):
            if isinstance(sample, (str, bytes)) or not isinstance(sample, Iterable):
                raise ConfigurationError(f"Sample at offset {i} must be a sequence of values.")
            row = tuple(sample)
            for value in row:
                if isinstance(value, bool) or not isinstance(value, (str, int, float)):
                    raise ConfigurationError(
                        f"Sample at offset {i} contains a non-scalar value: {value!r}"
                    )
            rows.append(row)
        return cls(rows=tuple(rows))

    @classmethod
    def from_json_file(cls, path: Path) -> SampleSet:
        """Load samples from a JSON array of arrays, or an object with a `samples` key."""
        data = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            if "samples" not in data:
                raise ConfigurationError(f"{path}: JSON object must contain a 'samples' key.")
            data = data["samples"]
        if not isinstance(data, list):
            raise ConfigurationError(f"{path}: expected a JSON array of samples.")
        return cls.from_iterable(data)

    @classmethod
    def from_csv_file(cls, path: Path, *, header: bool = False) -> SampleSet:
        """Load one sample per CSV row; numeric cells become ints or floats."""
        with path.open(newline="", encoding="utf-8") as f:
            reader = csv.reader(f)
            if header:
                next(reader, None)
            return cls.from_iterable(
                [_coerce_cell(cell) for cell in row] for row in reader if row
            )

    def samples(self) -> Sequence[Sample]:
        return self.rows

    def __len__(self) -> int:
        return len(self.rows)
