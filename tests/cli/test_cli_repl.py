"""Tests for ``mcprobe repl`` CLI command."""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from mcprobe.cli import main
from mcprobe.cli_commands.repl import _enable_line_editing
from mcprobe.errors import TransportOpenError
from mcprobe.protocols.mcp.transport import FifoTransport, StdioTransport


class TestRepl:
    def test_starts_session_over_stdio(self) -> None:
        with patch("mcprobe.repl.session.Session") as mock_session_cls:
            runner = CliRunner()
            result = runner.invoke(main, ["repl", "--start-cmd", "cat", "--timeout", "2.5"])

            assert result.exit_code == 0, result.output
            assert "Starting MCP server with: cat" in result.output
            kwargs = mock_session_cls.call_args.kwargs
            assert isinstance(kwargs["transport"], StdioTransport)
            assert kwargs["response_timeout"] == 2.5
            mock_session_cls.return_value.run.assert_called_once()

    def test_fifo_without_start_command(self, tmp_path: Path) -> None:
        with patch("mcprobe.repl.session.Session") as mock_session_cls:
            runner = CliRunner()
            result = runner.invoke(main, ["repl", "--pipe-dir", str(tmp_path)])

            assert result.exit_code == 0, result.output
            assert "Waiting for a server" in result.output
            transport = mock_session_cls.call_args.kwargs["transport"]
            assert isinstance(transport, FifoTransport)
            assert transport.stdin_path == tmp_path / "mcp.stdin"

    def test_config_file_with_cli_override(self, tmp_path: Path) -> None:
        config = tmp_path / "mcprobe.yaml"
        config.write_text("start_command: from-file\nresponse_timeout: 9\n")

        with patch("mcprobe.repl.session.Session") as mock_session_cls:
            runner = CliRunner()
            result = runner.invoke(
                main, ["repl", "--config", str(config), "--start-cmd", "cat"]
            )

            assert result.exit_code == 0, result.output
            assert "Starting MCP server with: cat" in result.output
            assert mock_session_cls.call_args.kwargs["response_timeout"] == 9

    def test_invalid_config(self, tmp_path: Path) -> None:
        config = tmp_path / "mcprobe.yaml"
        config.write_text("transport: stdio\n")

        runner = CliRunner()
        result = runner.invoke(main, ["repl", "--config", str(config)])

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_transport_open_failure_exits(self) -> None:
        with patch("mcprobe.repl.session.Session") as mock_session_cls:
            mock_session_cls.return_value.run.side_effect = TransportOpenError("cannot start 'x'")

            runner = CliRunner()
            result = runner.invoke(main, ["repl", "--start-cmd", "x"])

            assert result.exit_code == 1
            assert "Transport error" in result.output

    def test_keyboard_interrupt_terminates(self) -> None:
        with patch("mcprobe.repl.session.Session") as mock_session_cls:
            mock_session_cls.return_value.run.side_effect = KeyboardInterrupt

            runner = CliRunner()
            result = runner.invoke(main, ["repl", "--start-cmd", "cat"])

            assert result.exit_code == 0
            assert "Terminating session" in result.output

    def test_rejects_non_positive_timeout(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["repl", "--start-cmd", "cat", "--timeout", "0"])
        assert result.exit_code == 2


class TestLineEditing:
    def test_repl_enables_line_editing(self) -> None:
        with (
            patch("mcprobe.repl.session.Session"),
            patch("mcprobe.cli_commands.repl._enable_line_editing") as mock_enable,
        ):
            runner = CliRunner()
            result = runner.invoke(main, ["repl", "--start-cmd", "cat"])

            assert result.exit_code == 0, result.output
            mock_enable.assert_called_once()

    def test_missing_readline_is_tolerated(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "readline", None)
        _enable_line_editing()
