from __future__ import annotations

from typing import Literal

import click
import rich_click

import inference_client

from .context import CLIContext
from .logging import configure_logging, restore_logging


@click.group(
    name="inference-client",
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    cls=rich_click.RichGroup,
)
@click.option(
    "--output",
    type=click.Choice(["table", "json"]),
    default="table",
)
@click.option("--json", "json_flag", is_flag=True, help="Alias for --output json.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-essential stderr output.")
@click.option("-v", "verbose", count=True, help="Increase verbosity (-v, -vv).")
@click.option(
    "--host",
    type=str,
    default="127.0.0.1",
    show_default=True,
    envvar="INFERENCE_HOST",
    help="Inference server host.",
)
@click.option(
    "--port",
    type=int,
    default=8000,
    show_default=True,
    envvar="INFERENCE_PORT",
    help="Inference server port.",
)
@click.option("--secure", is_flag=True, help="Connect over https.")
@click.option(
    "--timeout",
    type=float,
    default=0.0,
    show_default=True,
    help="Per-request timeout in seconds (0 = no timeout).",
)
@click.option("--no-verify", is_flag=True, help="Skip TLS certificate verification.")
@click.option(
    "--token",
    type=str,
    default=None,
    envvar="INFERENCE_TOKEN",
    help="Shared bearer token.",
)
@click.option("--username", type=str, default=None, envvar="INFERENCE_USERNAME")
@click.option("--password", type=str, default=None, envvar="INFERENCE_PASSWORD")
@click.option(
    "--max-retries",
    type=int,
    default=3,
    show_default=True,
    help="Maximum retries when the server is overloaded (429/503).",
)
@click.option(
    "--initial-delay",
    type=click.FloatRange(min=0.0),
    default=0.5,
    show_default=True,
    help="Seconds to wait before the first retry; doubles on each retry.",
)
@click.version_option(version=inference_client.__version__, prog_name="inference-client")
@click.pass_context
def cli(
    click_ctx: click.Context,
    *,
    output: str,
    json_flag: bool,
    quiet: bool,
    verbose: int,
    host: str,
    port: int,
    secure: bool,
    timeout: float,
    no_verify: bool,
    token: str | None,
    username: str | None,
    password: str | None,
    max_retries: int,
    initial_delay: float,
) -> None:
    if click_ctx.invoked_subcommand is None:
        # No args: show help; no network calls.
        click.echo(click_ctx.get_help())
        raise click.exceptions.Exit(0)

    out: Literal["table", "json"] = "json" if json_flag else output  # type: ignore[assignment]

    click_ctx.obj = CLIContext(
        output=out,
        quiet=quiet,
        verbosity=verbose,
        host=host,
        port=port,
        secure=secure,
        timeout=timeout,
        verify_certificate=not no_verify,
        token=token,
        username=username,
        password=password,
        max_retries=max_retries,
        initial_delay=initial_delay,
    )
    click_ctx.call_on_close(click_ctx.obj.close)

    previous_logging = configure_logging(verbosity=verbose, quiet=quiet)
    click_ctx.call_on_close(lambda: restore_logging(previous_logging))


# Register commands
from .commands.inference_cmds import predict_cmd as _predict_cmd  # noqa: E402
from .commands.inference_cmds import proba_cmd as _proba_cmd  # noqa: E402
from .commands.inference_cmds import score_cmd as _score_cmd  # noqa: E402
from .commands.version_cmd import version_cmd as _version_cmd  # noqa: E402

cli.add_command(_version_cmd)
cli.add_command(_predict_cmd)
cli.add_command(_proba_cmd)
cli.add_command(_score_cmd)
