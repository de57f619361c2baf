"""CommandInterpreter: turns one line of operator input into a command.

Command surface::

    list                      discover tools (tools/list)
    list --name-only          print cached tool names, no request
    call <name> <json>        invoke a tool with inline JSON arguments
    call-<name>               invoke a tool, prompting for each argument
    describe <name>           show a cached tool's schema and examples
    help                      show this summary
    <anything else>           sent verbatim as a JSON-RPC message
"""

from __future__ import annotations

import json
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from mcprobe.core.schema.walker import build_example, build_type_sketch, describe
from mcprobe.errors import EmptyCacheError, InvalidArgumentsError, UsageError
from mcprobe.protocols.mcp.models import JsonRpcRequest

if TYPE_CHECKING:
    from mcprobe.core.registry import ToolRegistry

DISCOVERY_ID = "1"
CALL_ID = "2"
GUIDED_CALL_ID = "3"

HELP_LINES = [
    "Commands:",
    "  list                  discover tools from the server",
    "  list --name-only      print cached tool names",
    "  call <name> <json>    call a tool with inline JSON arguments",
    "  call-<name>           call a tool, prompting for each argument",
    "  describe <name>       show a cached tool's input schema and examples",
    "  <json>                send a raw JSON-RPC message",
]


class CommandKind(str, Enum):
    LIST_NAMES = "list-names"
    DISCOVER = "discover"
    CALL = "call"
    GUIDED_CALL = "guided-call"
    DESCRIBE = "describe"
    HELP = "help"
    RAW = "raw"


class Command(BaseModel):
    """An interpreted line: local output, an outbound message, or both."""

    kind: CommandKind
    request: JsonRpcRequest | None = None
    raw: str | None = None
    lines: list[str] = []

    @property
    def outbound(self) -> bool:
        return self.request is not None or self.raw is not None


def tool_call_request(name: str, arguments: dict[str, Any], request_id: int | str = CALL_ID) -> JsonRpcRequest:
    return JsonRpcRequest(
        method="tools/call",
        id=request_id,
        params={"name": name, "arguments": arguments},
    )


class CommandInterpreter:
    """Parses operator lines against a :class:`ToolRegistry`.

    *prompt* is called once per argument during guided invocation and must
    return the operator's answer.
    """

    def __init__(self, registry: ToolRegistry, prompt: Callable[[str], str] = input) -> None:
        self._registry = registry
        self._prompt = prompt

    def interpret(self, line: str) -> Command:
        line = line.strip()
        fields = line.split()
        if not fields:
            raise UsageError("<command> (type 'help')")

        head = fields[0]
        if head == "list":
            if len(fields) > 1 and fields[1] == "--name-only":
                return self._list_names()
            return Command(
                kind=CommandKind.DISCOVER,
                request=JsonRpcRequest(method="tools/list", id=DISCOVERY_ID),
            )
        if head == "call":
            return self._call(line)
        if head == "describe":
            if len(fields) < 2:
                raise UsageError("describe <toolName>")
            return self._describe(line[len("describe") :].strip())
        if head == "help":
            return Command(kind=CommandKind.HELP, lines=list(HELP_LINES))
        if line.startswith("call-"):
            name = line[len("call-") :].strip()
            if not name:
                raise UsageError("call-<toolName>")
            return self._guided_call(name)
        return Command(kind=CommandKind.RAW, raw=line)

    def _list_names(self) -> Command:
        if not self._registry.populated:
            raise EmptyCacheError
        lines = ["Available tools:"]
        lines.extend(f"- {name}" for name in sorted(self._registry.names()))
        return Command(kind=CommandKind.LIST_NAMES, lines=lines)

    def _call(self, line: str) -> Command:
        parts = line.split(maxsplit=2)
        if len(parts) < 3:
            raise UsageError("call <toolName> <json input>")
        _, name, text = parts
        try:
            arguments = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InvalidArgumentsError(str(exc)) from exc
        if not isinstance(arguments, dict):
            raise InvalidArgumentsError("arguments must be a JSON object")
        return Command(kind=CommandKind.CALL, request=tool_call_request(name, arguments))

    def _guided_call(self, name: str) -> Command:
        tool = self._registry.lookup(name)
        properties = tool.input_schema.get("properties")
        if not isinstance(properties, dict):
            properties = {}

        arguments: dict[str, Any] = {}
        for key in properties:
            try:
                answer = self._prompt(f"Enter value for {key}: ")
            except EOFError:
                raise UsageError(f"call-{name} (aborted at argument {key!r})") from None
            try:
                arguments[key] = json.loads(answer)
            except json.JSONDecodeError:
                arguments[key] = answer
        return Command(
            kind=CommandKind.GUIDED_CALL,
            request=tool_call_request(name, arguments, GUIDED_CALL_ID),
        )

    def _describe(self, name: str) -> Command:
        tool = self._registry.lookup(name)
        schema = tool.input_schema
        lines = [
            f"Tool: {tool.name}",
            f"Description: {tool.description}",
            "",
            "Input Schema:",
            *describe(schema),
            "",
            "Input Example:",
            json.dumps(build_type_sketch(schema), ensure_ascii=False),
            "",
            "Input Example JSON:",
            json.dumps(build_example(schema), indent=2, ensure_ascii=False),
        ]
        return Command(kind=CommandKind.DESCRIBE, lines=lines)
