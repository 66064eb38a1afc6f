"""CLI module for good-base."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from good_base import __version__
from good_base.cli.exit_codes import ExitCode
from good_base.config.errors import ConfigError, ConfigValidationError
from good_base.config.files import READERS
from good_base.config.loader import ConfigLoader, initialize_setup
from good_base.config.models import LoggingConfig, Setup
from good_base.logging import configure_logging

logger = logging.getLogger(__name__)

LOG_LEVELS = ["debug", "info", "warn", "error", "none"]


def get_loader(ctx: click.Context) -> ConfigLoader:
    """Return the loader stored in the context, creating it on first use.

    Tests can pass a preconfigured loader through ``obj={"loader": ...}``.
    """
    obj = ctx.ensure_object(dict)
    if "loader" not in obj:
        reader_cls = READERS[obj.get("config_format", "python")]
        obj["loader"] = ConfigLoader(file_reader=reader_cls())
    return obj["loader"]


def load_setup(
    ctx: click.Context, *, validate: bool = True, stop_on_first_run: bool = True
) -> Setup:
    """Resolve configuration for a command, exiting on fatal errors.

    Args:
        ctx: Click context holding the loader.
        validate: Apply the startup validation policy.
        stop_on_first_run: Exit with success after writing the example
            config file, asking the operator to edit it and restart.

    Returns:
        The resolved setup.
    """
    loader = get_loader(ctx)
    try:
        if validate:
            setup = asyncio.run(initialize_setup(loader))
        else:
            setup = asyncio.run(loader.load())
    except ConfigValidationError as e:
        click.echo("Error: configuration is invalid:", err=True)
        for problem in e.problems:
            click.echo(f"  - {problem}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    if stop_on_first_run and loader.first_run:
        source = loader.file_source
        click.echo(f"Created example configuration at {source.path}")
        click.echo("Edit it to suit this installation, then run the command again.")
        sys.exit(ExitCode.SUCCESS)
    return setup


def _configure_logging(log_level: str | None) -> None:
    """Configure stderr logging used while configuration is resolved."""
    configure_logging(LoggingConfig(level=log_level or "warn"))


@click.group()
@click.version_option(version=__version__, prog_name="good-base")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Override log level (default: warn, or the configured level for serve).",
)
@click.option(
    "--config-format",
    type=click.Choice(sorted(READERS), case_sensitive=False),
    default="python",
    show_default=True,
    help="Config file format to read.",
)
@click.pass_context
def main(ctx: click.Context, log_level: str | None, config_format: str) -> None:
    """good-base - record store configuration and server."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["config_format"] = config_format.lower()
    _configure_logging(log_level)


# Defer import to avoid circular dependency
def _register_commands():
    from good_base.cli.config import config_group
    from good_base.cli.init import init_command
    from good_base.cli.serve import serve_command

    main.add_command(config_group)
    main.add_command(init_command)
    main.add_command(serve_command)


_register_commands()
