"""Main CLI entry point for httpbox.

Defines the CLI group and its subcommands.

Commands:
    serve - Run the example application with uvicorn

Subcommand help:
    httpbox COMMAND -h         Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli", "main", "serve"]

import sys
from pathlib import Path
from typing import get_args

import click
import uvicorn

from httpbox import __version__
from httpbox.cli.example import create_example_app
from httpbox.config import LogFormat, LogLevelName, ServerConfig
from httpbox.utils.logging.logger_setup import configure_logging


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """httpbox: error-returning HTTP handlers with access logging."""
    if version:
        click.echo(f"httpbox {__version__}")
        sys.exit(0)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _load_config(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    log_level: str | None,
    log_format: str | None,
) -> ServerConfig:
    config = ServerConfig.load_from_file(config_path) if config_path else ServerConfig()

    logging_overrides = {
        key: value for key, value in (("level", log_level), ("format", log_format)) if value is not None
    }
    overrides = {key: value for key, value in (("host", host), ("port", port)) if value is not None}
    if logging_overrides:
        overrides["logging"] = config.logging.model_copy(update=logging_overrides)
    return config.model_copy(update=overrides)


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON configuration file",
)
@click.option("--host", help="Interface to bind (default: 127.0.0.1)")
@click.option("--port", type=click.IntRange(1, 65535), help="Port to bind (default: 8080)")
@click.option(
    "--log-level",
    type=click.Choice(get_args(LogLevelName), case_sensitive=False),
    callback=lambda ctx, param, value: value.upper() if value else value,
    help="Log threshold for httpbox loggers",
)
@click.option("--log-format", type=click.Choice(get_args(LogFormat)), help="json or console")
def serve(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    log_level: str | None,
    log_format: str | None,
) -> None:
    """Run the example application.

    Serves GET /hello/{name} and GET /health behind the access-log middleware.
    """
    try:
        config = _load_config(config_path, host, port, log_level, log_format)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    configure_logging(config.logging)
    app = create_example_app(config)

    click.echo(f"Serving on http://{config.host}:{config.port}", err=True)
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


def main() -> None:
    """CLI entry point."""
    cli()
