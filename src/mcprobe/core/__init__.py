"""Core: tool registry and schema introspection."""
