"""Internal ``$ref`` resolution for tool input schemas.

Only fragment-only JSON Pointers (``#/a/b/c``) are supported.  Resolution
never raises past :func:`resolve`: unsupported or dangling pointers are
logged and resolve to an empty schema.
"""

from __future__ import annotations

import logging
from typing import Any

from mcprobe.errors import (
    ReferencePathNotFound,
    SchemaReferenceError,
    SchemaTypeMismatch,
    UnsupportedReferenceFormat,
)

logger = logging.getLogger(__name__)

_FRAGMENT_PREFIX = "#/"


def unescape_segment(segment: str) -> str:
    """Undo JSON Pointer escaping; ``~1`` must be replaced before ``~0``."""
    return segment.replace("~1", "/").replace("~0", "~")


def resolve_strict(pointer: str, root: dict[str, Any]) -> dict[str, Any]:
    """Return the schema node *pointer* addresses inside *root*.

    Raises:
        UnsupportedReferenceFormat: *pointer* is not of the form ``#/...``.
        ReferencePathNotFound: a segment names a missing key.
        SchemaTypeMismatch: the addressed value is not an object.
    """
    if not pointer.startswith(_FRAGMENT_PREFIX):
        raise UnsupportedReferenceFormat(pointer)

    current: Any = root
    for raw in pointer[len(_FRAGMENT_PREFIX) :].split("/"):
        key = unescape_segment(raw)
        if not isinstance(current, dict) or key not in current:
            raise ReferencePathNotFound(pointer, raw)
        current = current[key]

    if not isinstance(current, dict):
        raise SchemaTypeMismatch(pointer, type(current).__name__)
    return current


def resolve(pointer: str, root: dict[str, Any]) -> dict[str, Any]:
    """Like :func:`resolve_strict` but degrades to ``{}`` with a warning."""
    try:
        return resolve_strict(pointer, root)
    except SchemaReferenceError as exc:
        logger.warning("%s", exc)
        return {}
