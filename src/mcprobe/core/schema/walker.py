"""Schema walking: human-readable descriptions and synthetic examples.

This is an illustrative generator, not a validator: it never rejects a
schema.  Unknown shapes degrade to placeholders, and ``$ref`` cycles stop
at the point where a pointer would be entered a second time.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcprobe.core.schema.resolver import resolve

logger = logging.getLogger(__name__)

_INDENT = "  "


def _deref(
    node: Any, root: dict[str, Any], active: frozenset[str]
) -> tuple[dict[str, Any], frozenset[str]] | None:
    """Follow ``$ref`` chains; ``None`` means a cycle was hit."""
    if not isinstance(node, dict):
        return {}, active
    while isinstance(node.get("$ref"), str):
        pointer: str = node["$ref"]
        if pointer in active:
            logger.debug("Stopping at recursive reference %s", pointer)
            return None
        active = active | {pointer}
        node = resolve(pointer, root)
    return node, active


def _properties(schema: dict[str, Any]) -> dict[str, Any]:
    props = schema.get("properties")
    return props if isinstance(props, dict) else {}


def _primary_type(schema: dict[str, Any]) -> str | None:
    declared = schema.get("type")
    if isinstance(declared, list):
        return next((t for t in declared if isinstance(t, str) and t != "null"), None)
    return declared if isinstance(declared, str) else None


def _type_label(schema: dict[str, Any]) -> str:
    declared = schema.get("type")
    if isinstance(declared, list):
        return "|".join(str(t) for t in declared) or "any"
    return str(declared) if declared is not None else "any"


def _render(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


# ---------------------------------------------------------------------------
# Descriptions
# ---------------------------------------------------------------------------


def describe(
    schema: dict[str, Any],
    root: dict[str, Any] | None = None,
    prefix: str = "",
    depth: int = 1,
) -> list[str]:
    """Describe the properties of an object schema, one line per field.

    Lines look like ``"  - user.name (string): Display name"`` followed by
    optional ``default`` and ``enum`` annotations.  Nested objects are
    described recursively with their dotted path and one more level of
    indentation.
    """
    return _describe(schema, schema if root is None else root, prefix, depth, frozenset())


def _describe(
    schema: dict[str, Any],
    root: dict[str, Any],
    prefix: str,
    depth: int,
    active: frozenset[str],
) -> list[str]:
    indent = _INDENT * depth
    lines: list[str] = []
    for name, raw in _properties(schema).items():
        path = f"{prefix}.{name}" if prefix else name
        resolved = _deref(raw, root, active)
        if resolved is None:
            lines.append(f"{indent}- {path} (recursive)")
            continue
        prop, seen = resolved

        line = f"{indent}- {path} ({_type_label(prop)})"
        if prop.get("description") is not None:
            line += f": {prop['description']}"
        lines.append(line)

        if "default" in prop:
            lines.append(f"{indent}  ↳ default: {_render(prop['default'])}")
        if "enum" in prop:
            lines.append(f"{indent}  ↳ enum: {_render(prop['enum'])}")

        if _primary_type(prop) == "object":
            lines.extend(_describe(prop, root, path, depth + 1, seen))
    return lines


# ---------------------------------------------------------------------------
# Examples
# ---------------------------------------------------------------------------


def build_example(schema: dict[str, Any], root: dict[str, Any] | None = None) -> Any:
    """Synthesize a representative value for *schema*.

    A non-empty ``enum`` wins over the declared type and yields its first
    member.  Otherwise strings become ``"string"``, integers ``0``, numbers
    ``0.0``, booleans their default or ``False``, arrays a single example
    item, and objects a mapping of every declared property.  Anything else
    yields its ``default`` or ``None``.
    """
    return _example(schema, schema if root is None else root, frozenset())


def _example(node: Any, root: dict[str, Any], active: frozenset[str]) -> Any:
    resolved = _deref(node, root, active)
    if resolved is None:
        return None
    schema, seen = resolved

    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        return enum[0]

    kind = _primary_type(schema)
    if kind == "object":
        return {name: _example(prop, root, seen) for name, prop in _properties(schema).items()}
    if kind == "array":
        items = schema.get("items")
        return [_example(items, root, seen)] if isinstance(items, dict) else []
    if kind == "string":
        return "string"
    if kind == "integer":
        return 0
    if kind == "number":
        return 0.0
    if kind == "boolean":
        return schema.get("default", False)
    return schema.get("default")


def build_type_sketch(schema: dict[str, Any], root: dict[str, Any] | None = None) -> dict[str, Any]:
    """Coarse per-property sketch: arrays show their item type name."""
    return _sketch(schema, schema if root is None else root, frozenset())


def _sketch(schema: dict[str, Any], root: dict[str, Any], active: frozenset[str]) -> dict[str, Any]:
    sketch: dict[str, Any] = {}
    for name, raw in _properties(schema).items():
        resolved = _deref(raw, root, active)
        if resolved is None:
            sketch[name] = "any"
            continue
        prop, seen = resolved

        enum = prop.get("enum")
        if isinstance(enum, list) and enum:
            sketch[name] = enum[0]
            continue

        kind = _primary_type(prop)
        if kind == "string":
            sketch[name] = "string"
        elif kind == "integer":
            sketch[name] = 0
        elif kind == "boolean":
            sketch[name] = False
        elif kind == "array":
            items = _deref(prop.get("items"), root, seen)
            sketch[name] = [_type_label(items[0]) if items else "any"]
        elif kind == "object":
            sketch[name] = _sketch(prop, root, seen)
        else:
            sketch[name] = "any"
    return sketch
