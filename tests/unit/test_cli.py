"""Unit tests for the command-line entry point."""

from unittest.mock import patch

import pytest

from skillchat_server.__main__ import build_parser, main, settings_from_args
from skillchat_server.errors import ConfigurationError


def test_parser_defaults():
    """Test that unset options stay None so settings defaults apply."""
    args = build_parser().parse_args([])

    assert args.command is None
    assert args.host is None
    assert args.max_tool_rounds is None
    assert args.reload is False


def test_run_subcommand():
    args = build_parser().parse_args(["--model", "qwen3", "run", "--skill", "pdf", "--message", "hi"])

    assert args.command == "run"
    assert args.skill == "pdf"
    assert args.message == "hi"
    assert args.model == "qwen3"


def test_run_requires_message():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["run"])


def test_settings_from_args_overrides(monkeypatch):
    """Test that CLI options override environment settings."""
    monkeypatch.setenv("SKILLCHAT_PORT", "9000")
    monkeypatch.setenv("SKILLCHAT_MODEL", "from-env")
    args = build_parser().parse_args(["--model", "from-cli", "--max-tool-rounds", "4"])

    settings = settings_from_args(args)

    assert settings.model == "from-cli"
    assert settings.max_tool_rounds == 4
    assert settings.port == 9000


def test_main_starts_uvicorn():
    with patch("skillchat_server.__main__.uvicorn.run") as run:
        code = main(["--host", "0.0.0.0", "--port", "8123"])

    assert code == 0
    kwargs = run.call_args.kwargs
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 8123


def test_main_run_returns_turn_exit_code(tmp_path):
    """Test that `run` exits with the headless turn's code."""
    with patch("skillchat_server.__main__.run_headless", return_value=None) as run_headless, patch(
        "skillchat_server.__main__.asyncio.run", return_value=1
    ):
        code = main(["--data-dir", str(tmp_path), "run", "--message", "hi"])

    assert code == 1
    assert run_headless.call_args.args[1] == "hi"


def test_main_run_reports_configuration_errors(tmp_path, capsys):
    """Test that a configuration error is printed instead of a traceback."""
    (tmp_path / "mcp_servers.json").write_text("{broken")

    with patch("skillchat_server.headless.OllamaClient"):
        code = main(["--data-dir", str(tmp_path), "run", "--message", "hi"])

    assert code == 1
    assert "Error:" in capsys.readouterr().err


def test_configuration_error_code():
    assert ConfigurationError("x").error_code == "CONFIG_ERROR"
