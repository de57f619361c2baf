"""Newline-delimited JSON framing for JSON-RPC messages.

One frame is one compact JSON object followed by ``\\n``.  Compact
serialization escapes control characters inside strings, so a frame never
contains a raw newline before its terminator.
"""

from __future__ import annotations

import json
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from mcprobe.errors import DecodeError, EncodeError
from mcprobe.protocols.mcp.models import JsonRpcResponse

_M = TypeVar("_M", bound=BaseModel)

_SEPARATORS = (",", ":")


def _frame(data: Any) -> bytes:
    try:
        text = json.dumps(data, separators=_SEPARATORS, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise EncodeError(str(exc)) from exc
    return (text + "\n").encode()


def encode(message: BaseModel) -> bytes:
    """Serialize *message* to a single newline-terminated frame."""
    data = {key: value for key, value in message.model_dump().items() if value is not None}
    return _frame(data)


def encode_raw(text: str) -> bytes:
    """Frame hand-typed JSON-RPC text.

    The text must be a JSON object; it is re-serialized compactly so that
    exactly one frame goes on the wire.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise EncodeError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise EncodeError("a JSON-RPC message must be a JSON object")
    return _frame(data)


def decode(frame: bytes | str, model: type[_M] = JsonRpcResponse) -> _M:  # type: ignore[assignment]
    """Parse one frame into *model* (a response unless told otherwise)."""
    try:
        data = json.loads(frame)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError("malformed-json", str(exc)) from exc
    if not isinstance(data, dict):
        raise DecodeError("invalid-message", f"expected an object, got {type(data).__name__}")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise DecodeError("invalid-message", str(exc)) from exc
