from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
import rich_click

from inference_client import InferenceClient, SampleSet

from ..context import CLIContext
from ..errors import CLIError
from ..options import output_options, samples_options
from ..runner import CommandOutput, run_command


def load_samples(path: Path, *, fmt: str, header: bool) -> SampleSet:
    if fmt == "auto":
        fmt = "csv" if path.suffix.lower() in (".csv", ".tsv") else "json"
    try:
        if fmt == "csv":
            return SampleSet.from_csv_file(path, header=header)
        return SampleSet.from_json_file(path)
    except json.JSONDecodeError as e:
        raise CLIError(
            f"{path}: not valid JSON ({e.msg}, line {e.lineno}).",
            exit_code=2,
            error_type="usage_error",
        ) from e
    except UnicodeDecodeError as e:
        raise CLIError(
            f"{path}: not valid UTF-8 text (byte offset {e.start}).",
            exit_code=2,
            error_type="io_error",
        ) from e
    except OSError as e:
        raise CLIError(f"{path}: {e.strerror or e}", exit_code=2, error_type="io_error") from e


def _inference_command(
    name: str,
    *,
    key: str,
    call: Callable[[InferenceClient, SampleSet], list[Any]],
    help: str,
) -> click.Command:
    @click.command(name=name, cls=rich_click.RichCommand, help=help)
    @samples_options
    @output_options
    @click.pass_obj
    def command(ctx: CLIContext, *, samples_file: str, fmt: str, header: bool) -> None:
        def fn(ctx: CLIContext, warnings: list[str]) -> CommandOutput:
            dataset = load_samples(Path(samples_file), fmt=fmt, header=header)
            if not len(dataset):
                warnings.append(f"{samples_file} contains no samples.")
            client = ctx.get_client()
            values = call(client, dataset)
            return CommandOutput(data={key: values}, samples=len(dataset), api_called=True)

        run_command(ctx, command=name, fn=fn)

    return command


predict_cmd = _inference_command(
    "predict",
    key="predictions",
    call=lambda client, dataset: client.predict(dataset),
    help="Make predictions on the samples in SAMPLES_FILE.",
)

proba_cmd = _inference_command(
    "proba",
    key="probabilities",
    call=lambda client, dataset: client.proba(dataset),
    help="Estimate class probabilities for the samples in SAMPLES_FILE.",
)

score_cmd = _inference_command(
    "score",
    key="scores",
    call=lambda client, dataset: client.score(dataset),
    help="Compute anomaly scores for the samples in SAMPLES_FILE.",
)
