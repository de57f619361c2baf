"""mcprobe: interactive probe for MCP-style JSON-RPC tool servers."""

from __future__ import annotations

__version__ = "0.1.0"
