"""MCP protocol: JSON-RPC framing, message models, and transports."""

from mcprobe.protocols.mcp.codec import decode, encode, encode_raw
from mcprobe.protocols.mcp.models import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ToolDescriptor,
)
from mcprobe.protocols.mcp.transport import (
    FifoTransport,
    MCPTransport,
    StdioTransport,
    create_transport,
)

__all__ = [
    "FifoTransport",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MCPTransport",
    "StdioTransport",
    "ToolDescriptor",
    "create_transport",
    "decode",
    "encode",
    "encode_raw",
]
