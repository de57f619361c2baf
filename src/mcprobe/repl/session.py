"""Session: the interactive request/response loop.

One line in, at most one request out, exactly one response frame back.
Operator input stays on the main thread; transport coroutines are driven
by a single :class:`asyncio.Runner` owned by the session, so an interrupt
during a round trip cancels it cleanly and the channel is still closed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any, TypeVar

from rich.markup import escape

from mcprobe.core.registry import tools_from_result
from mcprobe.errors import (
    CodecError,
    CommandError,
    ProbeError,
    ResponseTimeoutError,
    TransportError,
)
from mcprobe.protocols.mcp.codec import decode, encode, encode_raw
from mcprobe.utils.telemetry import (
    ATTR_FRAME_BYTES,
    ATTR_RPC_ID,
    ATTR_RPC_METHOD,
    ATTR_TOOL_COUNT,
    ATTR_TOOL_NAME,
    get_tracer,
)

if TYPE_CHECKING:
    from rich.console import Console

    from mcprobe.core.registry import ToolRegistry
    from mcprobe.protocols.mcp.models import JsonRpcResponse
    from mcprobe.protocols.mcp.transport import MCPTransport
    from mcprobe.repl.interpreter import Command, CommandInterpreter

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

_T = TypeVar("_T")

PROMPT = "> "


class Session:
    """Drives the probe loop over an :class:`MCPTransport`.

    Usage::

        registry = ToolRegistry()
        session = Session(
            transport=create_transport(settings),
            registry=registry,
            interpreter=CommandInterpreter(registry, prompt=console.input),
            console=console,
        )
        session.run()  # returns on EOF; raises TransportOpenError if the
                       # channel cannot be established
    """

    def __init__(
        self,
        transport: MCPTransport,
        registry: ToolRegistry,
        interpreter: CommandInterpreter,
        console: Console,
        read_line: Callable[[str], str] | None = None,
        response_timeout: float | None = None,
    ) -> None:
        self._transport = transport
        self._registry = registry
        self._interpreter = interpreter
        self._console = console
        self._read_line = read_line or console.input
        self._response_timeout = response_timeout
        self._runner: asyncio.Runner | None = None

    def run(self) -> None:
        """Open the channel, serve operator lines until EOF, then close."""
        with asyncio.Runner() as runner:
            self._runner = runner
            try:
                runner.run(self._transport.connect())
                self._console.print(
                    "MCP probe started. Type 'help' for commands, Ctrl+D or Ctrl+C to exit."
                )
                self._loop()
            finally:
                runner.run(self._transport.close())
                self._runner = None

    def _loop(self) -> None:
        while True:
            try:
                line = self._read_line(PROMPT)
            except EOFError:
                self._console.print()
                return
            line = line.strip()
            if line:
                self.handle_line(line)

    def handle_line(self, line: str) -> JsonRpcResponse | None:
        """Interpret *line*, perform its round trip, and render the outcome.

        Returns the decoded response when one was received.  Every failure
        is reported on the console and swallowed so the loop can continue.
        """
        try:
            command = self._interpreter.interpret(line)
        except CommandError as exc:
            self._report(exc)
            return None

        for text in command.lines:
            self._console.print(text, markup=False, highlight=False)
        if not command.outbound:
            return None

        try:
            frame = self._encode(command)
        except CodecError as exc:
            self._report(exc)
            return None

        outbound: dict[str, Any] = json.loads(frame)
        self._console.print(f"sending: {frame.decode().rstrip()}", style="dim", markup=False, highlight=False)

        # Notifications get no reply; waiting for one would hang the loop.
        if "id" not in outbound:
            try:
                self._run(self._transport.write(frame))
            except TransportError as exc:
                self._report(exc)
            else:
                self._console.print("Notification sent; no response expected.", style="dim")
            return None

        try:
            reply = self._run(self._round_trip(frame, outbound))
        except TransportError as exc:
            self._report(exc)
            return None

        try:
            response = decode(reply)
        except CodecError as exc:
            self._report(exc)
            self._console.print(reply.decode(errors="replace").rstrip(), markup=False, highlight=False)
            return None

        if response.id != outbound["id"]:
            logger.warning(
                "Response id %r does not match request id %r (late reply to an earlier command?)",
                response.id,
                outbound["id"],
            )

        self._render(response)
        self._cache_tools(response)
        return response

    @staticmethod
    def _encode(command: Command) -> bytes:
        if command.request is not None:
            return encode(command.request)
        return encode_raw(command.raw or "")

    def _run(self, coro: Coroutine[Any, Any, _T]) -> _T:
        if self._runner is None:
            coro.close()
            msg = "Session is not running"
            raise RuntimeError(msg)
        return self._runner.run(coro)

    async def _round_trip(self, frame: bytes, outbound: dict[str, Any]) -> bytes:
        with _tracer.start_as_current_span("mcprobe.round_trip") as span:
            span.set_attribute(ATTR_FRAME_BYTES, len(frame))
            span.set_attribute(ATTR_RPC_ID, str(outbound["id"]))
            if isinstance(outbound.get("method"), str):
                span.set_attribute(ATTR_RPC_METHOD, outbound["method"])
            params = outbound.get("params")
            if isinstance(params, dict) and isinstance(params.get("name"), str):
                span.set_attribute(ATTR_TOOL_NAME, params["name"])

            await self._transport.write(frame)
            if self._response_timeout is None:
                return await self._transport.read_frame()
            try:
                return await asyncio.wait_for(self._transport.read_frame(), self._response_timeout)
            except TimeoutError as exc:
                raise ResponseTimeoutError(self._response_timeout) from exc

    def _render(self, response: JsonRpcResponse) -> None:
        self._console.print("Response:")
        self._console.print_json(data=response.model_dump(mode="json", exclude_unset=True))
        if response.error is not None:
            self._console.print(
                f"[red]Server error {response.error.code}:[/red] {escape(response.error.message)}",
                highlight=False,
            )

    def _cache_tools(self, response: JsonRpcResponse) -> None:
        tools = tools_from_result(response.result)
        if tools is None:
            return
        with _tracer.start_as_current_span("mcprobe.registry.replace") as span:
            span.set_attribute(ATTR_TOOL_COUNT, len(tools))
            self._registry.replace_all(tools)
        self._console.print(f"[green]Cached {len(self._registry)} tool schemas[/green]")

    def _report(self, exc: ProbeError) -> None:
        logger.debug("Command failed (%s): %s", exc.kind.value, exc)
        self._console.print(f"[red]Error:[/red] {escape(str(exc))}", highlight=False)
