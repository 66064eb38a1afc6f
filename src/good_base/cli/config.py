"""CLI commands for inspecting configuration.

These commands resolve configuration exactly as the server does and
report the result: the merged values, validation problems, resolved
directories, and how each GOOD_BASE_* variable was decoded.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

import click

from good_base.cli import get_loader, load_setup
from good_base.cli.exit_codes import ExitCode
from good_base.config.loader import config_as_dict, get_config_value
from good_base.config.validation import Severity

logger = logging.getLogger(__name__)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "(unset)"
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


def _flatten(data: dict[str, Any], prefix: str = "") -> list[tuple[str, Any]]:
    rows = []
    for key, value in data.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict) and value:
            rows.extend(_flatten(value, f"{path}."))
        else:
            rows.append((path, value))
    return rows


@click.group("config")
def config_group() -> None:
    """Inspect the resolved configuration.

    Examples:

        # Show every setting
        good-base config show

        # Show one setting
        good-base config show server.port

        # Check for problems
        good-base config validate
    """
    pass


@config_group.command("show")
@click.argument("key", required=False)
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.option(
    "--show-secrets", is_flag=True, help="Print tokens and secrets unmasked."
)
@click.pass_context
def show_command(
    ctx: click.Context, key: str | None, json_output: bool, show_secrets: bool
) -> None:
    """Show the merged configuration, or one value by dotted KEY."""
    setup = load_setup(ctx, validate=False)
    data = config_as_dict(setup.config, redact=not show_secrets)

    if key:
        try:
            value = get_config_value(data, key)
        except KeyError:
            click.echo(f"Error: unknown config key: {key}", err=True)
            sys.exit(ExitCode.KEY_NOT_FOUND)
        if json_output:
            click.echo(json.dumps(value, indent=2))
        else:
            click.echo(_format_value(value))
        return

    if json_output:
        click.echo(json.dumps(data, indent=2))
        return
    for path, value in _flatten(data):
        click.echo(f"{path} = {_format_value(value)}")


@config_group.command("validate")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def validate_command(ctx: click.Context, json_output: bool) -> None:
    """Validate the merged configuration.

    Exits with code 11 if any problem is fatal. Warnings are reported but
    do not change the exit code.
    """
    setup = load_setup(ctx, validate=False)
    problems = get_loader(ctx).validate(setup.config)
    fatal = [p for p in problems if p.severity is Severity.FATAL]

    if json_output:
        click.echo(
            json.dumps(
                {
                    "valid": not fatal,
                    "problems": [
                        {
                            "path": p.path,
                            "message": p.message,
                            "severity": p.severity.value,
                        }
                        for p in problems
                    ],
                },
                indent=2,
            )
        )
    else:
        for problem in problems:
            click.echo(f"{problem.severity.value.upper()}: {problem}")
        if fatal:
            click.echo(f"Configuration is invalid ({len(fatal)} fatal problem(s)).")
        else:
            click.echo(f"Configuration is valid ({len(problems)} warning(s)).")

    if fatal:
        sys.exit(ExitCode.CONFIG_ERROR)


@config_group.command("paths")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def paths_command(ctx: click.Context, json_output: bool) -> None:
    """Show the resolved directories and config file location."""
    setup = load_setup(ctx, validate=False, stop_on_first_run=False)
    dirs = setup.directories
    source = get_loader(ctx).file_source

    paths: dict[str, Any] = {
        "base": str(dirs.base),
        "data": str(dirs.data),
        "config": str(dirs.config),
        "logs": str(dirs.logs),
        "cache": str(dirs.cache),
        "backups": str(dirs.backups),
        "auth_db": str(dirs.auth_db),
    }
    if source is not None:
        paths["config_file"] = str(source.path)
    if dirs.databases:
        paths["databases"] = {name: str(db.base) for name, db in dirs.databases.items()}

    if json_output:
        click.echo(json.dumps(paths, indent=2))
        return
    for path, value in _flatten(paths):
        click.echo(f"{path}: {value}")


@config_group.command("env")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def env_command(ctx: click.Context, json_output: bool) -> None:
    """Show how each GOOD_BASE_* environment variable was decoded."""
    load_setup(ctx, validate=False, stop_on_first_run=False)
    source = get_loader(ctx).env_source
    report = source.last_report if source is not None else []

    if json_output:
        click.echo(
            json.dumps(
                [
                    {
                        "variable": entry.variable,
                        "status": entry.status,
                        "path": entry.dotted_path,
                        "value": entry.value,
                        "reason": entry.reason,
                    }
                    for entry in report
                ],
                indent=2,
            )
        )
        return

    if not report:
        click.echo("No GOOD_BASE_* variables set.")
        return
    for entry in report:
        if entry.status == "applied":
            click.echo(
                f"{entry.variable} -> {entry.dotted_path} = {_format_value(entry.value)}"
            )
        else:
            click.echo(f"{entry.variable}: {entry.status} ({entry.reason})")
