"""Shared fixtures for the mcprobe test suite."""

from __future__ import annotations

from collections.abc import Callable

import pytest

ScriptedInput = Callable[..., Callable[[str], str]]


@pytest.fixture
def scripted_input() -> ScriptedInput:
    """Factory for operator input sources.

    ``scripted_input("list", "help")`` returns a ``read_line(prompt)``
    callable that yields the given lines in order and then raises
    ``EOFError``, like a terminal after Ctrl+D.
    """

    def make(*lines: str) -> Callable[[str], str]:
        pending = list(lines)

        def read_line(_prompt: str) -> str:
            if not pending:
                raise EOFError
            return pending.pop(0)

        return read_line

    return make
