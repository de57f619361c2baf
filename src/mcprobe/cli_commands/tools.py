"""``mcprobe tools``: one-shot tool discovery."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click
from rich.markup import escape

from mcprobe.cli_commands._output import (
    configure_logging,
    console,
    print_tools_table,
    settings_or_exit,
    transport_options,
)


@click.group()
def tools() -> None:
    """Discover and inspect tools."""


@tools.command("discover")
@transport_options
def discover(
    start_command: str | None,
    transport: str | None,
    pipe_dir: Path | None,
    response_timeout: float | None,
    connect_timeout: float | None,
    config_path: Path | None,
) -> None:
    """Send a single tools/list request and print the advertised tools."""
    from mcprobe.core.registry import tools_from_result
    from mcprobe.errors import ProbeError
    from mcprobe.protocols.mcp.codec import decode, encode
    from mcprobe.protocols.mcp.models import JsonRpcRequest, JsonRpcResponse
    from mcprobe.protocols.mcp.transport import create_transport
    from mcprobe.repl.interpreter import DISCOVERY_ID

    settings = settings_or_exit(
        config_path,
        start_command=start_command,
        transport=transport,
        pipe_dir=pipe_dir,
        response_timeout=response_timeout,
        connect_timeout=connect_timeout,
    )
    configure_logging(verbose=settings.verbose)
    channel = create_transport(settings)

    async def _discover() -> JsonRpcResponse:
        try:
            await channel.connect()
            await channel.write(encode(JsonRpcRequest(method="tools/list", id=DISCOVERY_ID)))
            reply = await asyncio.wait_for(channel.read_frame(), settings.response_timeout)
            return decode(reply)
        finally:
            await channel.close()

    try:
        response = asyncio.run(_discover())
    except (ProbeError, TimeoutError) as exc:
        console.print(f"[red]Discovery error:[/red] {escape(str(exc)) or type(exc).__name__}")
        return

    if response.error is not None:
        console.print(f"[red]Server error {response.error.code}:[/red] {escape(response.error.message)}")
        return

    discovered = tools_from_result(response.result) or []
    if not discovered:
        console.print("[yellow]No tools discovered.[/yellow]")
        return

    print_tools_table(discovered)
