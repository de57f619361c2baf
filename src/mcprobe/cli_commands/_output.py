"""Shared CLI output formatters and option helpers."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from mcprobe.errors import SettingsError
from mcprobe.settings import ProbeSettings, load_settings

if TYPE_CHECKING:
    from mcprobe.protocols.mcp.models import ToolDescriptor

console = Console()
err_console = Console(stderr=True)

_F = TypeVar("_F", bound=Callable[..., Any])


def transport_options(func: _F) -> _F:
    """Attach the options shared by every command that talks to a server."""
    options = [
        click.option(
            "--start-cmd",
            "start_command",
            default=None,
            help="Command that starts the MCP server (e.g. 'node dist/index.js -e .env').",
        ),
        click.option(
            "--transport",
            type=click.Choice(["auto", "stdio", "fifo"]),
            default=None,
            help="stdio pipes to a spawned server, or named pipes mcp.stdin/mcp.stdout.",
        ),
        click.option(
            "--pipe-dir",
            type=click.Path(file_okay=False, path_type=Path),
            default=None,
            help="Directory for the mcp.stdin / mcp.stdout named pipes.",
        ),
        click.option(
            "--timeout",
            "response_timeout",
            type=click.FloatRange(min=0, min_open=True),
            default=None,
            help="Seconds to wait for each response (default: wait forever).",
        ),
        click.option(
            "--connect-timeout",
            type=click.FloatRange(min=0, min_open=True),
            default=None,
            help="Seconds to wait for a peer to attach to the named pipes.",
        ),
        click.option(
            "--config",
            "config_path",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            default=None,
            help="YAML settings file; command-line options take precedence.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def settings_or_exit(config_path: Path | None, **overrides: Any) -> ProbeSettings:
    """Load settings, printing the problem and exiting on failure."""
    try:
        return load_settings(config_path, **overrides)
    except SettingsError as exc:
        console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        sys.exit(1)


def configure_logging(*, verbose: bool = False) -> None:
    """Route log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def print_tools_table(tools: list[ToolDescriptor]) -> None:
    """Pretty-print discovered tools as a table."""
    table = Table(title="Discovered Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Arguments")

    for tool in tools:
        properties = tool.input_schema.get("properties")
        arguments = ", ".join(properties) if isinstance(properties, dict) else ""
        table.add_row(
            escape(tool.name),
            escape(_truncate(tool.description)),
            escape(arguments) or "-",
        )

    console.print(table)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
