"""``mcprobe repl``: interactive session against an MCP server."""

from __future__ import annotations

import sys
from contextlib import suppress
from pathlib import Path

import click
from rich.markup import escape

from mcprobe.cli_commands._output import (
    configure_logging,
    console,
    settings_or_exit,
    transport_options,
)


def _enable_line_editing() -> None:
    """Give the prompt line editing and in-session history where readline exists."""
    with suppress(ImportError):
        import readline  # noqa: F401


@click.command()
@transport_options
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--telemetry", is_flag=True, help="Export tracing spans (requires mcprobe[otel]).")
def repl(
    start_command: str | None,
    transport: str | None,
    pipe_dir: Path | None,
    response_timeout: float | None,
    connect_timeout: float | None,
    config_path: Path | None,
    verbose: bool,
    telemetry: bool,
) -> None:
    """Start an interactive session with an MCP server.

    Type 'help' at the prompt for the command list.  Without --start-cmd the
    probe creates mcp.stdin / mcp.stdout named pipes and waits for a server
    to attach to them.
    """
    from mcprobe.core.registry import ToolRegistry
    from mcprobe.errors import TransportOpenError
    from mcprobe.protocols.mcp.transport import FifoTransport, create_transport
    from mcprobe.repl.interpreter import CommandInterpreter
    from mcprobe.repl.session import Session

    settings = settings_or_exit(
        config_path,
        start_command=start_command,
        transport=transport,
        pipe_dir=pipe_dir,
        response_timeout=response_timeout,
        connect_timeout=connect_timeout,
        verbose=verbose or None,
        telemetry=telemetry or None,
    )
    configure_logging(verbose=settings.verbose)
    _enable_line_editing()

    if settings.telemetry:
        from mcprobe.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(otlp_endpoint=settings.otlp_endpoint)
        except ImportError as exc:
            console.print(f"[red]Telemetry error:[/red] {escape(str(exc))}")
            sys.exit(1)

    channel = create_transport(settings)
    if settings.start_command:
        console.print(f"Starting MCP server with: {escape(settings.start_command)}")
    elif isinstance(channel, FifoTransport):
        console.print(
            f"Waiting for a server to read {escape(str(channel.stdin_path))} "
            f"and write {escape(str(channel.stdout_path))}..."
        )

    registry = ToolRegistry()
    session = Session(
        transport=channel,
        registry=registry,
        interpreter=CommandInterpreter(registry, prompt=console.input),
        console=console,
        response_timeout=settings.response_timeout,
    )

    try:
        session.run()
    except TransportOpenError as exc:
        console.print(f"[red]Transport error:[/red] {escape(str(exc))}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\nTerminating session...")
