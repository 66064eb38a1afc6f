"""CLI command for good-base initialization.

Provides the `good-base init` command to write an example configuration
file into the resolved config directory.
"""

from __future__ import annotations

import logging
import sys

import click

from good_base.cli.exit_codes import ExitCode
from good_base.config.directories import get_app_directories
from good_base.config.errors import ConfigError
from good_base.config.files import READERS
from good_base.config.templates import write_example_config

logger = logging.getLogger(__name__)


@click.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@click.option(
    "--format",
    "file_format",
    type=click.Choice(sorted(READERS), case_sensitive=False),
    default=None,
    help="Config file format (default: the --config-format in effect).",
)
@click.pass_context
def init_command(ctx: click.Context, force: bool, file_format: str | None) -> None:
    """Write an example configuration file.

    The file is written to the config directory under the resolved base
    directory (GOOD_BASE_DIR, ./tmp/good-base in development, or the OS
    data location).

    \b
    Examples:
        good-base init
        good-base init --format toml
        good-base init --force
    """
    obj = ctx.ensure_object(dict)
    file_format = (file_format or obj.get("config_format") or "python").lower()
    reader = READERS[file_format]()

    try:
        directories = get_app_directories()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    target = directories.config / reader.file_name
    existed = target.exists()
    try:
        written = write_example_config(directories.config, reader, force=force)
    except OSError as e:
        click.echo(f"Error: could not write {target}: {e}", err=True)
        sys.exit(ExitCode.OPERATION_FAILED)

    if written is None:
        click.echo(f"Error: config file already exists at {target}", err=True)
        click.echo("Use --force to overwrite it.", err=True)
        sys.exit(ExitCode.GENERAL_ERROR)

    click.echo(f"{'Replaced' if existed else 'Created'} {written}")
    click.echo("")
    click.echo("Next steps:")
    click.echo(f"  1. Review configuration: {written}")
    click.echo("  2. Check it: good-base config validate")
    click.echo("  3. Start the server: good-base serve")
