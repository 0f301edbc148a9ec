from __future__ import annotations

import platform

import click
import httpx
import rich_click

import inference_client
from inference_client.clients.http import USER_AGENT, ClientConfig
from inference_client.requests import PREDICT_PATH, PROBA_PATH, SCORE_PATH

from ..context import CLIContext
from ..options import output_options
from ..runner import CommandOutput, run_command


@click.command(name="version", cls=rich_click.RichCommand)
@output_options
@click.pass_obj
def version_cmd(ctx: CLIContext) -> None:
    """Show the client version, its defaults and the server routes it calls."""

    def fn(_: CLIContext, _warnings: list[str]) -> CommandOutput:
        data = {
            "version": inference_client.__version__,
            "userAgent": USER_AGENT,
            "defaultBaseUrl": ClientConfig().base_url,
            "routes": {"predict": PREDICT_PATH, "proba": PROBA_PATH, "score": SCORE_PATH},
            "httpxVersion": httpx.__version__,
            "pythonVersion": platform.python_version(),
        }
        return CommandOutput(data=data, api_called=False)

    run_command(ctx, command="version", fn=fn)
