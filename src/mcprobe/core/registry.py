"""ToolRegistry: the process-lifetime cache of discovered tools."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from mcprobe.errors import ToolNotCachedError
from mcprobe.protocols.mcp.models import ToolDescriptor

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Name-to-descriptor map, replaced wholesale on every discovery.

    Replacement builds a new mapping and swaps it in with one assignment, so
    a reader sees either the old set of tools or the new one, never a mix.

    Usage::

        registry = ToolRegistry()
        tools = tools_from_result(response.result)
        if tools is not None:
            registry.replace_all(tools)
        registry.lookup("echo").input_schema
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] | None = None

    @property
    def populated(self) -> bool:
        """Whether at least one discovery response has been installed."""
        return self._tools is not None

    def replace_all(self, tools: Iterable[ToolDescriptor]) -> None:
        """Discard the current mapping and install *tools* (last name wins)."""
        self._tools = {tool.name: tool for tool in tools}

    def lookup(self, name: str) -> ToolDescriptor:
        tools = self._tools or {}
        if name not in tools:
            raise ToolNotCachedError(name)
        return tools[name]

    def names(self) -> set[str]:
        return set(self._tools or {})

    def __len__(self) -> int:
        return len(self._tools or {})


def tools_from_result(result: dict[str, Any] | None) -> list[ToolDescriptor] | None:
    """Extract tool descriptors from a ``tools/list`` result.

    Returns ``None`` when *result* is not a discovery result.  Entries that
    are not valid tool objects are skipped with a warning.
    """
    if not result or not isinstance(result.get("tools"), list):
        return None

    tools: list[ToolDescriptor] = []
    for index, raw in enumerate(result["tools"]):
        try:
            tools.append(ToolDescriptor.model_validate(raw))
        except ValidationError as exc:
            logger.warning("Skipping invalid tool entry #%d: %s", index, exc)
    return tools
