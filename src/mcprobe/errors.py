"""Error taxonomy for mcprobe.

Every error carries a :class:`ErrorKind` so callers can branch on the kind
of failure instead of parsing messages.  Only :class:`TransportOpenError`
is fatal to an interactive session; everything else is reported and the
operator gets the prompt back.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    """Closed set of failure kinds surfaced to the operator."""

    TRANSPORT_OPEN_FAILURE = "transport-open-failure"
    TRANSPORT_IO_FAILURE = "transport-io-failure"
    TIMEOUT = "timeout"
    ENCODE_FAILURE = "encode-failure"
    MALFORMED_RESPONSE = "malformed-response"
    USAGE_ERROR = "usage-error"
    INVALID_ARGUMENTS = "invalid-arguments"
    EMPTY_CACHE = "empty-cache"
    TOOL_NOT_CACHED = "tool-not-cached"
    UNSUPPORTED_REFERENCE_FORMAT = "unsupported-reference-format"
    REFERENCE_PATH_NOT_FOUND = "reference-path-not-found"
    TYPE_MISMATCH = "type-mismatch"
    INVALID_SETTINGS = "invalid-settings"


class ProbeError(Exception):
    """Base error for all mcprobe failures."""

    kind: ClassVar[ErrorKind]


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class TransportError(ProbeError):
    """Base error for the duplex channel."""


class TransportOpenError(TransportError):
    """The channel to the server could not be established."""

    kind = ErrorKind.TRANSPORT_OPEN_FAILURE

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Failed to open transport" + (f": {detail}" if detail else ""))


class TransportIOError(TransportError):
    """A write or read on an established channel failed."""

    kind = ErrorKind.TRANSPORT_IO_FAILURE

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail or "Transport I/O failure")


class ResponseTimeoutError(TransportError):
    """No response frame arrived within the configured wait."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"No response within {timeout}s")


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


class CodecError(ProbeError):
    """Base error for message framing."""


class EncodeError(CodecError):
    """A message could not be serialized to a frame."""

    kind = ErrorKind.ENCODE_FAILURE

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Cannot encode message" + (f": {detail}" if detail else ""))


class DecodeError(CodecError):
    """A received frame is not a usable JSON-RPC message."""

    kind = ErrorKind.MALFORMED_RESPONSE

    def __init__(self, reason: str, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"Malformed response ({reason})" + (f": {detail}" if detail else ""))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class CommandError(ProbeError):
    """Base error for operator input that produced no request."""


class UsageError(CommandError):
    """A command was typed with the wrong shape."""

    kind = ErrorKind.USAGE_ERROR

    def __init__(self, usage: str) -> None:
        self.usage = usage
        super().__init__(f"usage: {usage}")


class InvalidArgumentsError(CommandError):
    """Inline tool arguments are not a JSON object."""

    kind = ErrorKind.INVALID_ARGUMENTS

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("invalid JSON input" + (f": {detail}" if detail else ""))


class EmptyCacheError(CommandError):
    """The tool registry has not been populated by a discovery yet."""

    kind = ErrorKind.EMPTY_CACHE

    def __init__(self) -> None:
        super().__init__("tool cache is empty; run plain 'list' first")


class ToolNotCachedError(CommandError):
    """The named tool is not in the registry."""

    kind = ErrorKind.TOOL_NOT_CACHED

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"tool {name!r} not found in cache; run 'list' first")


# ---------------------------------------------------------------------------
# Schema references
# ---------------------------------------------------------------------------


class SchemaReferenceError(ProbeError):
    """Base error for ``$ref`` resolution.  Callers degrade to ``{}``."""

    def __init__(self, pointer: str, message: str) -> None:
        self.pointer = pointer
        super().__init__(message)


class UnsupportedReferenceFormat(SchemaReferenceError):
    """Only fragment pointers of the form ``#/a/b`` are understood."""

    kind = ErrorKind.UNSUPPORTED_REFERENCE_FORMAT

    def __init__(self, pointer: str) -> None:
        super().__init__(pointer, f"unsupported ref format: {pointer}")


class ReferencePathNotFound(SchemaReferenceError):
    """A pointer segment names a key the document does not have."""

    kind = ErrorKind.REFERENCE_PATH_NOT_FOUND

    def __init__(self, pointer: str, segment: str) -> None:
        self.segment = segment
        super().__init__(pointer, f"ref path not found: {pointer} (at {segment!r})")


class SchemaTypeMismatch(SchemaReferenceError):
    """A pointer resolved to something that is not a schema object."""

    kind = ErrorKind.TYPE_MISMATCH

    def __init__(self, pointer: str, found: str) -> None:
        self.found = found
        super().__init__(pointer, f"ref target is not an object: {pointer} (got {found})")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class SettingsError(ProbeError):
    """A settings file could not be read or validated."""

    kind = ErrorKind.INVALID_SETTINGS
