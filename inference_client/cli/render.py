from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .results import CommandResult


@dataclass(frozen=True, slots=True)
class RenderSettings:
    output: str  # "table" | "json"
    quiet: bool
    verbosity: int


def _error_title(error_type: str) -> str:
    mapping = {
        "usage_error": "Usage error",
        "config_error": "Configuration error",
        "protocol_error": "Protocol error",
        "network_error": "Network error",
        "runtime_error": "Error",
        "io_error": "I/O error",
    }
    return mapping.get((error_type or "").strip(), "Error")


def _format_number(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.6f}".rstrip("0").rstrip(".") if not value.is_integer() else str(value)
    return str(value)


def _results_table(key: str, values: list[Any]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")

    if not values:
        table.add_column(key)
        table.add_row("", "No results")
        return table

    first = values[0]
    if isinstance(first, dict):
        columns = list(first.keys())
        for col in columns:
            table.add_column(str(col), justify="right")
        for i, row in enumerate(values):
            table.add_row(str(i), *[_format_number(row.get(col, "")) for col in columns])
    elif isinstance(first, list):
        width = max(len(row) for row in values)
        for col in range(width):
            table.add_column(str(col), justify="right")
        for i, row in enumerate(values):
            table.add_row(str(i), *[_format_number(v) for v in row])
    else:
        table.add_column(key.rstrip("s"), justify="right")
        for i, value in enumerate(values):
            table.add_row(str(i), _format_number(value))
    return table


def _render_data(data: Any) -> Any:
    if isinstance(data, dict) and len(data) == 1:
        key, values = next(iter(data.items()))
        if isinstance(values, list):
            return _results_table(key, values)
    if isinstance(data, dict):
        table = Table(show_header=False, box=None)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        for k, v in data.items():
            table.add_row(str(k), str(v))
        return table
    return Panel.fit(Text(str(data) if data is not None else "OK"))


def render_result(result: CommandResult, *, settings: RenderSettings) -> int:
    stdout = Console(file=sys.stdout, force_terminal=False)
    stderr = Console(file=sys.stderr, force_terminal=False)

    if settings.output == "json":
        payload = result.model_dump(by_alias=True, mode="json")
        sys.stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")
        return 0

    if not result.ok:
        if result.error is not None:
            stderr.print(f"{_error_title(result.error.type)}: {result.error.message}")
            if not settings.quiet:
                if result.error.hint:
                    stderr.print(f"Hint: {result.error.hint}")
                if result.error.details and settings.verbosity >= 1:
                    stderr.print(
                        Panel.fit(Text(json.dumps(result.error.details, ensure_ascii=False)))
                    )
        else:
            stderr.print("Error")
        return 0

    if result.command == "version" and isinstance(result.data, dict):
        stdout.print(Text(result.data.get("version", ""), style="bold"))
        return 0

    stdout.print(_render_data(result.data))
    if settings.verbosity >= 1 and result.meta.base_url:
        stderr.print(f"{result.meta.base_url} ({result.meta.duration_ms} ms)")
    return 0
