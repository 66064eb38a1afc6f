"""HTTP application for the configuration commands.

This module provides the aiohttp Application with the health check,
show-config and reload-config endpoints.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass

from aiohttp import web

from good_base import __version__
from good_base.config.loader import ConfigLoader, config_as_dict, get_config_value
from good_base.config.reload import ConfigReloader
from good_base.server.errors import (
    INVALID_PARAMETER,
    NOT_FOUND,
    RELOAD_FAILED,
    SERVICE_UNAVAILABLE,
    api_error,
)
from good_base.server.middleware import (
    create_cors_middleware,
    create_request_logging_middleware,
)

LOADER_KEY = web.AppKey("loader", ConfigLoader)
RELOADER_KEY = web.AppKey("reloader", ConfigReloader)
STARTED_KEY = web.AppKey("started", float)

_MEGABYTE = 1024 * 1024


@dataclass
class HealthStatus:
    """Health check response payload."""

    status: str
    """Overall status: 'healthy' or 'unhealthy'."""

    version: str
    """good-base version string."""

    uptime_seconds: float
    """Seconds since the application was created."""

    base_directory: str | None = None
    """Resolved base directory, None before configuration is loaded."""

    reload_count: int = 0
    """Number of successful reloads since startup."""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


async def health_handler(request: web.Request) -> web.Response:
    """Handle GET /health requests.

    Returns 200 when a configuration is loaded, 503 otherwise.
    """
    loader = request.app[LOADER_KEY]
    setup = loader.current
    health = HealthStatus(
        status="healthy" if setup is not None else "unhealthy",
        version=__version__,
        uptime_seconds=round(time.monotonic() - request.app[STARTED_KEY], 1),
        base_directory=str(setup.directories.base) if setup else None,
        reload_count=request.app[RELOADER_KEY].state.reload_count,
    )
    return web.json_response(health.to_dict(), status=200 if setup else 503)


async def config_handler(request: web.Request) -> web.Response:
    """Handle GET /config requests.

    Without parameters the whole configuration is returned. With
    ?key=section.field only that value is returned. Secrets are masked.
    """
    setup = request.app[LOADER_KEY].current
    if setup is None:
        return api_error(
            "Configuration not loaded", code=SERVICE_UNAVAILABLE, status=503
        )

    data = config_as_dict(setup.config, redact=True)
    key = request.query.get("key")
    if key is None:
        return web.json_response(
            {
                "config": data,
                "directories": {
                    "base": str(setup.directories.base),
                    "data": str(setup.directories.data),
                    "config": str(setup.directories.config),
                    "logs": str(setup.directories.logs),
                    "cache": str(setup.directories.cache),
                    "backups": str(setup.directories.backups),
                },
            }
        )

    if not key:
        return api_error("key must not be empty", code=INVALID_PARAMETER)
    try:
        value = get_config_value(data, key)
    except KeyError:
        return api_error(f"Unknown config key: {key}", code=NOT_FOUND, status=404)
    return web.json_response({"key": key, "value": value})


async def reload_handler(request: web.Request) -> web.Response:
    """Handle POST /config/reload requests.

    Returns the changed fields and the ones that need a restart. A failed
    reload keeps the previous configuration and returns 500.
    """
    result = await request.app[RELOADER_KEY].reload()
    if not result.success:
        return api_error(
            result.error or "Reload failed",
            code=RELOAD_FAILED,
            status=500,
            details=result.to_dict(),
        )
    return web.json_response(result.to_dict())


def create_app(loader: ConfigLoader) -> web.Application:
    """Create the aiohttp application.

    The loader should already be loaded. Server limits are read from the
    setup current at creation time; CORS and request logging read the
    current setup on every request.

    Args:
        loader: Loaded configuration handle.

    Returns:
        Configured aiohttp Application.
    """
    setup = loader.current
    max_body_mb = setup.config.server.max_body_size if setup else 10
    app = web.Application(
        client_max_size=int(max_body_mb * _MEGABYTE),
        middlewares=[
            create_request_logging_middleware(loader),
            create_cors_middleware(loader),
        ],
    )
    app[LOADER_KEY] = loader
    app[RELOADER_KEY] = ConfigReloader(loader)
    app[STARTED_KEY] = time.monotonic()

    app.router.add_get("/health", health_handler)
    app.router.add_get("/config", config_handler)
    app.router.add_post("/config/reload", reload_handler)
    return app
