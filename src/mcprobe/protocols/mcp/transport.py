"""MCP transports: duplex byte channels to a tool server.

Each transport satisfies the :class:`MCPTransport` protocol, providing
``connect``, ``write``, ``read_frame``, and ``close`` methods.  Frames are
newline-terminated (see :mod:`mcprobe.protocols.mcp.codec`).
"""

from __future__ import annotations

import asyncio
import errno
import logging
import os
import shlex
import signal
from contextlib import suppress
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from mcprobe.errors import TransportIOError, TransportOpenError

if TYPE_CHECKING:
    from mcprobe.settings import ProbeSettings

logger = logging.getLogger(__name__)

STDIN_PIPE_NAME = "mcp.stdin"
STDOUT_PIPE_NAME = "mcp.stdout"

_STREAM_LIMIT = 16 * 1024 * 1024
_OPEN_POLL_INTERVAL = 0.05
_TERMINATE_GRACE = 5.0


@runtime_checkable
class MCPTransport(Protocol):
    """Abstract duplex channel for newline-delimited JSON-RPC frames."""

    async def connect(self) -> None: ...
    async def write(self, frame: bytes) -> None: ...
    async def read_frame(self) -> bytes: ...
    async def close(self) -> None: ...


async def _read_line(reader: asyncio.StreamReader) -> bytes:
    try:
        line = await reader.readline()
    except (ValueError, OSError) as exc:
        raise TransportIOError(f"Error reading from server: {exc}") from exc
    if not line:
        msg = "Transport closed"
        raise TransportIOError(msg)
    return line


async def _write_frame(writer: asyncio.StreamWriter, frame: bytes) -> None:
    try:
        writer.write(frame)
        await writer.drain()
    except OSError as exc:
        raise TransportIOError(f"Error writing to server: {exc}") from exc


class StdioTransport:
    """Communicates with a spawned server via its stdin/stdout.

    Both directions are wired as anonymous pipes when the process is
    created, so there is no open-order dependency between them.  The
    server's stderr is inherited so its diagnostics reach the terminal.
    """

    def __init__(self, command: str, env: dict[str, str] | None = None) -> None:
        self._command = command
        self._env = env
        self._process: asyncio.subprocess.Process | None = None

    async def connect(self) -> None:
        """Launch the subprocess."""
        parts = shlex.split(self._command)
        if not parts:
            msg = "empty start command"
            raise TransportOpenError(msg)
        try:
            self._process = await asyncio.create_subprocess_exec(
                *parts,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                env=self._env,
                limit=_STREAM_LIMIT,
            )
        except OSError as exc:
            raise TransportOpenError(f"cannot start {parts[0]!r}: {exc}") from exc
        logger.info("Started MCP server (pid %s): %s", self._process.pid, self._command)

    async def write(self, frame: bytes) -> None:
        """Write one frame to the server's stdin."""
        if self._process is None or self._process.stdin is None:
            msg = "Transport not connected"
            raise TransportIOError(msg)
        await _write_frame(self._process.stdin, frame)

    async def read_frame(self) -> bytes:
        """Read one frame from the server's stdout."""
        if self._process is None or self._process.stdout is None:
            msg = "Transport not connected"
            raise TransportIOError(msg)
        return await _read_line(self._process.stdout)

    async def close(self) -> None:
        """Terminate the subprocess."""
        if self._process is None:
            return
        process, self._process = self._process, None
        if process.stdin:
            process.stdin.close()
        if process.returncode is None:
            with suppress(ProcessLookupError):
                process.terminate()
        try:
            await asyncio.wait_for(process.wait(), _TERMINATE_GRACE)
        except TimeoutError:
            logger.warning("MCP server (pid %s) ignored SIGTERM; killing", process.pid)
            with suppress(ProcessLookupError):
                process.kill()
            await process.wait()


class FifoTransport:
    """Communicates with a server through a pair of named pipes.

    ``mcp.stdin`` carries requests to the server and ``mcp.stdout`` carries
    responses back.  Both FIFOs are removed and recreated on every
    :meth:`connect` so a stale peer from a previous run is never reattached.

    Opening a FIFO end blocks until the opposite end is opened, so the
    order is fixed:

    1. open the read end of ``mcp.stdout`` non-blocking (never waits);
    2. spawn the server, if a command was given, with its stdin redirected
       from ``mcp.stdin`` and its stdout to ``mcp.stdout``;
    3. open the write end of ``mcp.stdin`` non-blocking, retrying while no
       reader is attached (``ENXIO``), bounded by *connect_timeout*.

    An external peer may therefore open its two ends in either order, but
    it must eventually open ``mcp.stdin`` for reading.
    """

    def __init__(
        self,
        directory: Path,
        command: str | None = None,
        env: dict[str, str] | None = None,
        connect_timeout: float | None = None,
    ) -> None:
        self._directory = directory
        self._command = command
        self._env = env
        self._connect_timeout = connect_timeout
        self.stdin_path = directory / STDIN_PIPE_NAME
        self.stdout_path = directory / STDOUT_PIPE_NAME
        self._process: asyncio.subprocess.Process | None = None
        self._read_file: Any = None
        self._read_transport: asyncio.ReadTransport | None = None
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None

    async def connect(self) -> None:
        """Create fresh FIFOs and attach to the server on both of them."""
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            for path in (self.stdin_path, self.stdout_path):
                path.unlink(missing_ok=True)
                os.mkfifo(path, 0o600)
            read_fd = os.open(self.stdout_path, os.O_RDONLY | os.O_NONBLOCK)
            self._read_file = os.fdopen(read_fd, "rb", buffering=0)
        except OSError as exc:
            await self.close()
            raise TransportOpenError(str(exc)) from exc

        try:
            if self._command:
                await self._spawn(self._command)
            write_fd = await self._open_write_end()
            await self._attach(write_fd)
        except OSError as exc:
            await self.close()
            raise TransportOpenError(str(exc)) from exc
        except BaseException:
            await self.close()
            raise
        logger.info("Attached to %s and %s", self.stdin_path, self.stdout_path)

    async def _spawn(self, command: str) -> None:
        stdin = shlex.quote(str(self.stdin_path))
        stdout = shlex.quote(str(self.stdout_path))
        self._process = await asyncio.create_subprocess_shell(
            f"{{ {command}\n}} < {stdin} > {stdout}",
            env=self._env,
            start_new_session=True,
        )
        logger.info("Started MCP server (pid %s): %s", self._process.pid, command)

    async def _open_write_end(self) -> int:
        loop = asyncio.get_running_loop()
        deadline = None if self._connect_timeout is None else loop.time() + self._connect_timeout
        waiting_logged = False
        while True:
            try:
                return os.open(self.stdin_path, os.O_WRONLY | os.O_NONBLOCK)
            except OSError as exc:
                if exc.errno != errno.ENXIO:
                    raise
            if self._process is not None and self._process.returncode is not None:
                msg = f"server exited with code {self._process.returncode} before opening {self.stdin_path}"
                raise TransportOpenError(msg)
            if deadline is not None and loop.time() >= deadline:
                msg = f"no reader attached to {self.stdin_path} within {self._connect_timeout}s"
                raise TransportOpenError(msg)
            if not waiting_logged:
                logger.info("Waiting for a reader on %s", self.stdin_path)
                waiting_logged = True
            await asyncio.sleep(_OPEN_POLL_INTERVAL)

    async def _attach(self, write_fd: int) -> None:
        loop = asyncio.get_running_loop()
        write_file = os.fdopen(write_fd, "wb", buffering=0)
        try:
            write_transport, write_protocol = await loop.connect_write_pipe(
                asyncio.streams.FlowControlMixin, write_file
            )
        except BaseException:
            write_file.close()
            raise
        self._writer = asyncio.StreamWriter(write_transport, write_protocol, None, loop)

        reader = asyncio.StreamReader(limit=_STREAM_LIMIT)
        self._read_transport, _ = await loop.connect_read_pipe(
            lambda: asyncio.StreamReaderProtocol(reader), self._read_file
        )
        self._read_file = None
        self._reader = reader

    async def write(self, frame: bytes) -> None:
        """Write one frame to ``mcp.stdin``."""
        if self._writer is None:
            msg = "Transport not connected"
            raise TransportIOError(msg)
        await _write_frame(self._writer, frame)

    async def read_frame(self) -> bytes:
        """Read one frame from ``mcp.stdout``."""
        if self._reader is None:
            msg = "Transport not connected"
            raise TransportIOError(msg)
        return await _read_line(self._reader)

    async def close(self) -> None:
        """Release both pipe ends, stop a spawned server, remove the FIFOs."""
        if self._writer is not None:
            self._writer.close()
            self._writer = None
        if self._read_transport is not None:
            self._read_transport.close()
            self._read_transport = None
        if self._read_file is not None:
            self._read_file.close()
            self._read_file = None
        self._reader = None

        if self._process is not None:
            process, self._process = self._process, None
            await _stop_process_group(process)

        for path in (self.stdin_path, self.stdout_path):
            path.unlink(missing_ok=True)


async def _stop_process_group(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        with suppress(ProcessLookupError):
            os.killpg(process.pid, signal.SIGTERM)
    try:
        await asyncio.wait_for(process.wait(), _TERMINATE_GRACE)
    except TimeoutError:
        logger.warning("MCP server (pid %s) ignored SIGTERM; killing", process.pid)
        with suppress(ProcessLookupError):
            os.killpg(process.pid, signal.SIGKILL)
        await process.wait()


def create_transport(settings: ProbeSettings) -> MCPTransport:
    """Build the transport selected by *settings*."""
    env = {**os.environ, **settings.env} if settings.env else None
    if settings.resolved_transport == "stdio":
        if not settings.start_command:
            msg = "stdio transport must specify a start command"
            raise ValueError(msg)
        return StdioTransport(command=settings.start_command, env=env)
    return FifoTransport(
        settings.pipe_dir,
        command=settings.start_command,
        env=env,
        connect_timeout=settings.connect_timeout,
    )
