"""Shared helpers for E2E integration tests."""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

import pytest

ECHO_SERVER = Path(__file__).with_name("echo_server.py")


@pytest.fixture
def echo_server_command() -> str:
    """Shell command that starts the line-delimited echo tool server."""
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(ECHO_SERVER))}"
