"""REPL: operator command interpretation and the interactive session."""

from mcprobe.repl.interpreter import Command, CommandInterpreter, CommandKind
from mcprobe.repl.session import Session

__all__ = [
    "Command",
    "CommandInterpreter",
    "CommandKind",
    "Session",
]
