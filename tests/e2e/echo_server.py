"""Minimal line-delimited JSON-RPC tool server used by the E2E tests.

Reads one request per line from stdin and writes one response per line to
stdout.  Advertises a single ``echo`` tool.
"""

from __future__ import annotations

import json
import sys
from typing import Any

TOOLS = [
    {
        "name": "echo",
        "description": "Echo text back",
        "inputSchema": {
            "type": "object",
            "properties": {"text": {"type": "string", "description": "Text to echo"}},
            "required": ["text"],
        },
    }
]


def handle(request: dict[str, Any]) -> dict[str, Any]:
    method = request.get("method")
    if method == "tools/list":
        return {"result": {"tools": TOOLS}}
    if method == "tools/call":
        params = request.get("params") or {}
        if params.get("name") != "echo":
            return {"error": {"code": -32602, "message": f"Unknown tool: {params.get('name')}"}}
        text = (params.get("arguments") or {}).get("text", "")
        return {"result": {"content": [{"type": "text", "text": text}]}}
    return {"error": {"code": -32601, "message": f"Method not found: {method}"}}


def main() -> None:
    for line in sys.stdin:
        if not line.strip():
            continue
        try:
            request = json.loads(line)
        except json.JSONDecodeError:
            response: dict[str, Any] = {"id": None, "error": {"code": -32700, "message": "Parse error"}}
        else:
            if "id" not in request:
                continue
            response = {"id": request["id"], **handle(request)}
        sys.stdout.write(json.dumps({"jsonrpc": "2.0", **response}) + "\n")
        sys.stdout.flush()


if __name__ == "__main__":
    main()
