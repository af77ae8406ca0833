"""Unit tests for CLI commands.

Tests CLI behavior using Click's CliRunner for isolated, fast testing.
Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

import json
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from httpbox import __version__
from httpbox.cli import cli
from httpbox.config import ServerConfig
from httpbox.server import HandlerApp


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def serve_mocks() -> Generator[tuple[MagicMock, MagicMock], None, None]:
    """Patch uvicorn.run and logging setup so serve returns immediately."""
    with (
        patch("httpbox.cli.main.uvicorn.run") as mock_run,
        patch("httpbox.cli.main.configure_logging") as mock_configure,
    ):
        yield mock_run, mock_configure


class TestVersion:
    """Tests for --version flag."""

    def test_version_flag_shows_version(self, runner: CliRunner) -> None:
        """Given --version flag, returns version string."""
        # Act
        result = runner.invoke(cli, ["--version"])

        # Assert
        assert result.exit_code == 0
        assert result.output.strip() == f"httpbox {__version__}"

    def test_no_command_shows_help(self, runner: CliRunner) -> None:
        """Given no subcommand, prints help."""
        # Act
        result = runner.invoke(cli, [])

        # Assert
        assert result.exit_code == 0
        assert "serve" in result.output


class TestServe:
    """Tests for the serve command."""

    def test_defaults(self, runner: CliRunner, serve_mocks: tuple[MagicMock, MagicMock]) -> None:
        """Given no options, serves the example app on 127.0.0.1:8080."""
        mock_run, mock_configure = serve_mocks

        # Act
        result = runner.invoke(cli, ["serve"])

        # Assert
        assert result.exit_code == 0, result.output
        args, kwargs = mock_run.call_args
        assert isinstance(args[0], HandlerApp)
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 8080
        assert kwargs["log_config"] is None
        mock_configure.assert_called_once_with(ServerConfig().logging)

    def test_flags_override(self, runner: CliRunner, serve_mocks: tuple[MagicMock, MagicMock]) -> None:
        """Given host/port/log flags, they override defaults."""
        mock_run, mock_configure = serve_mocks

        # Act
        result = runner.invoke(
            cli,
            ["serve", "--host", "0.0.0.0", "--port", "9000", "--log-level", "debug", "--log-format", "console"],
        )

        # Assert
        assert result.exit_code == 0, result.output
        assert mock_run.call_args.kwargs["host"] == "0.0.0.0"
        assert mock_run.call_args.kwargs["port"] == 9000
        logging_config = mock_configure.call_args.args[0]
        assert logging_config.level == "DEBUG"
        assert logging_config.format == "console"

    def test_config_file(self, runner: CliRunner, serve_mocks: tuple[MagicMock, MagicMock]) -> None:
        """Given --config, settings come from the file and flags still win."""
        mock_run, mock_configure = serve_mocks

        with runner.isolated_filesystem() as tmpdir:
            config_path = Path(tmpdir) / "httpbox.json"
            config_path.write_text(json.dumps({"host": "10.0.0.1", "port": 7000, "logging": {"level": "ERROR"}}))

            # Act
            result = runner.invoke(cli, ["serve", "--config", str(config_path), "--port", "7001"])

        # Assert
        assert result.exit_code == 0, result.output
        assert mock_run.call_args.kwargs["host"] == "10.0.0.1"
        assert mock_run.call_args.kwargs["port"] == 7001
        assert mock_configure.call_args.args[0].level == "ERROR"

    def test_invalid_config_file(self, runner: CliRunner, serve_mocks: tuple[MagicMock, MagicMock]) -> None:
        """Given an invalid config file, exits with an error and does not serve."""
        mock_run, _ = serve_mocks

        with runner.isolated_filesystem() as tmpdir:
            config_path = Path(tmpdir) / "httpbox.json"
            config_path.write_text(json.dumps({"port": "not-a-port"}))

            # Act
            result = runner.invoke(cli, ["serve", "--config", str(config_path)])

        # Assert
        assert result.exit_code == 1
        assert "port" in result.output
        mock_run.assert_not_called()

    def test_invalid_port_flag(self, runner: CliRunner, serve_mocks: tuple[MagicMock, MagicMock]) -> None:
        """Given an out-of-range port, click rejects it."""
        mock_run, _ = serve_mocks

        # Act
        result = runner.invoke(cli, ["serve", "--port", "70000"])

        # Assert
        assert result.exit_code == 2
        mock_run.assert_not_called()
