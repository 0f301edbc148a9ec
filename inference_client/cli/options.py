from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

import click

from .context import CLIContext

F = TypeVar("F", bound=Callable[..., object])


def _set_output(ctx: click.Context, _param: click.Parameter, value: str | None) -> str | None:
    if value is not None and isinstance(ctx.obj, CLIContext):
        ctx.obj.output = value  # type: ignore[assignment]
    return value


def _set_json(ctx: click.Context, _param: click.Parameter, value: bool) -> bool:
    if value and isinstance(ctx.obj, CLIContext):
        ctx.obj.output = "json"
    return value


def output_options(fn: F) -> F:
    """Allow `--output`/`--json` after the subcommand name as well as before it."""
    fn = click.option(
        "--output",
        type=click.Choice(["table", "json"]),
        default=None,
        help="Override output format for this command.",
        callback=_set_output,
        expose_value=False,
    )(fn)
    fn = click.option(
        "--json",
        is_flag=True,
        help="Alias for --output json.",
        callback=_set_json,
        expose_value=False,
    )(fn)
    return fn


def samples_options(fn: F) -> F:
    fn = click.option(
        "--format",
        "fmt",
        type=click.Choice(["auto", "json", "csv"]),
        default="auto",
        show_default=True,
        help="Samples file format (auto: by file extension).",
    )(fn)
    fn = click.option(
        "--header",
        is_flag=True,
        help="CSV input has a header row to skip.",
    )(fn)
    fn = click.argument(
        "samples_file",
        type=click.Path(exists=True, dir_okay=False, allow_dash=False),
    )(fn)
    return fn
