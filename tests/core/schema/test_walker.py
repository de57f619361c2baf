"""Tests for schema descriptions and example synthesis."""

from typing import Any

from mcprobe.core.schema.walker import build_example, build_type_sketch, describe

ECHO_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"text": {"type": "string"}},
}

RECURSIVE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"root": {"$ref": "#/$defs/Node"}},
    "$defs": {
        "Node": {
            "type": "object",
            "properties": {"child": {"$ref": "#/$defs/Node"}},
        },
    },
}


class TestDescribe:
    def test_flat_schema(self) -> None:
        assert describe(ECHO_SCHEMA) == ["  - text (string)"]

    def test_description_suffix(self) -> None:
        schema = {"properties": {"q": {"type": "string", "description": "Search query"}}}
        assert describe(schema) == ["  - q (string): Search query"]

    def test_nested_object_with_annotations(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "user": {
                    "type": "object",
                    "description": "The user",
                    "properties": {
                        "name": {"type": "string", "default": "anon"},
                        "role": {"type": "string", "enum": ["admin", "guest"]},
                    },
                },
            },
        }
        assert describe(schema) == [
            "  - user (object): The user",
            "    - user.name (string)",
            '      ↳ default: "anon"',
            "    - user.role (string)",
            '      ↳ enum: ["admin", "guest"]',
        ]

    def test_prefix_and_depth(self) -> None:
        assert describe(ECHO_SCHEMA, prefix="args", depth=2) == ["    - args.text (string)"]

    def test_declared_order_is_kept(self) -> None:
        schema = {"properties": {"b": {"type": "string"}, "a": {"type": "integer"}}}
        assert describe(schema) == ["  - b (string)", "  - a (integer)"]

    def test_ref_property_is_resolved(self) -> None:
        schema = {
            "type": "object",
            "properties": {"item": {"$ref": "#/$defs/Item"}},
            "$defs": {"Item": {"type": "object", "properties": {"id": {"type": "integer"}}}},
        }
        assert describe(schema) == ["  - item (object)", "    - item.id (integer)"]

    def test_missing_and_union_types(self) -> None:
        schema = {"properties": {"x": {}, "y": {"type": ["string", "null"]}}}
        assert describe(schema) == ["  - x (any)", "  - y (string|null)"]

    def test_recursive_reference_stops(self) -> None:
        assert describe(RECURSIVE_SCHEMA) == ["  - root (object)", "    - root.child (recursive)"]

    def test_schema_without_properties(self) -> None:
        assert describe({"type": "object"}) == []


class TestBuildExample:
    def test_echo(self) -> None:
        assert build_example(ECHO_SCHEMA) == {"text": "string"}

    def test_scalars(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "s": {"type": "string"},
                "i": {"type": "integer"},
                "n": {"type": "number"},
                "b": {"type": "boolean"},
                "bd": {"type": "boolean", "default": True},
                "u": {"default": "fallback"},
                "none": {},
            },
        }
        example = build_example(schema)
        assert example == {
            "s": "string",
            "i": 0,
            "n": 0.0,
            "b": False,
            "bd": True,
            "u": "fallback",
            "none": None,
        }
        assert isinstance(example["n"], float)
        assert isinstance(example["i"], int)

    def test_arrays(self) -> None:
        assert build_example({"type": "array", "items": {"type": "integer"}}) == [0]
        assert build_example({"type": "array"}) == []

    def test_enum_wins_over_type(self) -> None:
        assert build_example({"type": "integer", "enum": ["b", "a"]}) == "b"
        assert build_example({"enum": ["b", "a"]}) == "b"

    def test_empty_enum_falls_back_to_type(self) -> None:
        assert build_example({"type": "string", "enum": []}) == "string"

    def test_ref_is_resolved_against_root(self) -> None:
        schema = {
            "type": "object",
            "properties": {"tags": {"type": "array", "items": {"$ref": "#/$defs/Tag"}}},
            "$defs": {"Tag": {"type": "object", "properties": {"label": {"type": "string"}}}},
        }
        assert build_example(schema) == {"tags": [{"label": "string"}]}

    def test_explicit_root(self) -> None:
        root = {"$defs": {"Flag": {"type": "boolean", "default": True}}}
        assert build_example({"$ref": "#/$defs/Flag"}, root) is True

    def test_dangling_ref_degrades(self) -> None:
        schema = {"type": "object", "properties": {"x": {"$ref": "#/$defs/Missing"}}}
        assert build_example(schema) == {"x": None}

    def test_nullable_union_uses_first_concrete_type(self) -> None:
        assert build_example({"type": ["null", "integer"]}) == 0

    def test_recursive_reference_stops(self) -> None:
        assert build_example(RECURSIVE_SCHEMA) == {"root": {"child": None}}

    def test_deterministic(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "items": {"type": "array", "items": {"$ref": "#/$defs/Item"}},
                "mode": {"enum": ["fast", "slow"]},
            },
            "$defs": {"Item": {"type": "object", "properties": {"id": {"type": "integer"}}}},
        }
        assert build_example(schema) == build_example(schema)


class TestBuildTypeSketch:
    def test_sketch(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "tags": {"type": "array", "items": {"type": "string"}},
                "count": {"type": "integer"},
                "ratio": {"type": "number"},
                "flag": {"type": "boolean", "default": True},
                "mode": {"type": "string", "enum": ["fast", "slow"]},
                "meta": {"type": "object", "properties": {"inner": {"type": "string"}}},
                "blob": {},
            },
        }
        assert build_type_sketch(schema) == {
            "tags": ["string"],
            "count": 0,
            "ratio": "any",
            "flag": False,
            "mode": "fast",
            "meta": {"inner": "string"},
            "blob": "any",
        }

    def test_array_without_items(self) -> None:
        assert build_type_sketch({"properties": {"xs": {"type": "array"}}}) == {"xs": ["any"]}

    def test_array_of_refs(self) -> None:
        schema = {
            "properties": {"xs": {"type": "array", "items": {"$ref": "#/$defs/N"}}},
            "$defs": {"N": {"type": "number"}},
        }
        assert build_type_sketch(schema) == {"xs": ["number"]}
