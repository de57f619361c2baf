"""Schema introspection: ``$ref`` resolution, descriptions, and examples."""

from mcprobe.core.schema.resolver import resolve, resolve_strict, unescape_segment
from mcprobe.core.schema.walker import build_example, build_type_sketch, describe

__all__ = [
    "build_example",
    "build_type_sketch",
    "describe",
    "resolve",
    "resolve_strict",
    "unescape_segment",
]
