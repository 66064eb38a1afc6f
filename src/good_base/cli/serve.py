"""CLI command for running the HTTP server."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import os
import signal
import sys

import click

from good_base.cli import get_loader, load_setup
from good_base.cli.exit_codes import ExitCode
from good_base.config.loader import ConfigLoader
from good_base.logging import configure_logging

logger = logging.getLogger(__name__)

LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


async def run_server(loader: ConfigLoader, host: str, port: int) -> int:
    """Run the HTTP server until SIGINT or SIGTERM.

    SIGHUP reloads the configuration where the platform supports it.

    Args:
        loader: Loaded configuration handle.
        host: Address to bind to.
        port: Port to bind to.

    Returns:
        Exit code (0 for clean shutdown, non-zero for errors).
    """
    from aiohttp import web

    from good_base.server.app import RELOADER_KEY, create_app

    app = create_app(loader)
    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    reload_tasks: set[asyncio.Task] = set()

    def _reload() -> None:
        task = loop.create_task(app[RELOADER_KEY].reload())
        reload_tasks.add(task)
        task.add_done_callback(reload_tasks.discard)

    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown_event.set)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal handlers not supported on this platform")
    if hasattr(signal, "SIGHUP"):
        try:
            loop.add_signal_handler(signal.SIGHUP, _reload)
            installed.append(signal.SIGHUP)
        except (NotImplementedError, RuntimeError):
            pass

    runner = web.AppRunner(app)
    await runner.setup()

    try:
        site = web.TCPSite(runner, host, port)
        await site.start()

        logger.info(
            "good-base server started on http://%s:%d (PID %d)", host, port, os.getpid()
        )
        logger.info("Send SIGHUP or POST /config/reload to reload configuration")
        logger.info("Press Ctrl+C or send SIGTERM to stop")

        await shutdown_event.wait()
        logger.info("Shutdown initiated")

    except OSError as e:
        if e.errno in (48, 98):
            logger.error("Port %d is already in use", port)
        elif e.errno == 99:
            logger.error("Cannot bind to address %s", host)
        else:
            logger.error("Server error: %s", e)
        return ExitCode.OPERATION_FAILED
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
        await runner.cleanup()
        logger.info("good-base server stopped")

    return ExitCode.SUCCESS


@click.command("serve")
@click.option("--host", type=str, default=None, help="Address to bind to (default: server.host).")
@click.option("--port", "-p", type=int, default=None, help="Port to bind to (default: server.port).")
@click.pass_context
def serve_command(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Run the HTTP server.

    Serves /health, /config and /config/reload. Configuration is resolved
    and validated first; fatal problems exit with code 11.

    \b
    Examples:
        good-base serve
        good-base serve --port 9000
        GOOD_BASE_SERVER_HOST=0.0.0.0 good-base serve
    """
    setup = load_setup(ctx)
    loader = get_loader(ctx)

    log_config = setup.config.logging
    cli_level = ctx.obj.get("log_level")
    if cli_level:
        log_config = dataclasses.replace(log_config, level=cli_level)
    log_file = configure_logging(log_config)
    if log_file is not None:
        logger.info("Logging to %s", log_file)

    server_host = host if host is not None else setup.config.server.host
    server_port = port if port is not None else setup.config.server.port
    if not 1 <= server_port <= 65535:
        click.echo(f"Error: port must be 1-65535, got {server_port}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    if server_host not in LOOPBACK_HOSTS:
        logger.warning(
            "Binding to %s exposes good-base to the network; "
            "make sure auth.required is set",
            server_host,
        )

    logger.info("Starting good-base server (host=%s, port=%d)", server_host, server_port)
    try:
        exit_code = asyncio.run(run_server(loader, server_host, server_port))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted before server started")
        sys.exit(ExitCode.INTERRUPTED)
