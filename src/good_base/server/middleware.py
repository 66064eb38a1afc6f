"""Request logging and CORS middleware.

Both read the loader's current setup on every request, so a reload that
changes logging.enable_request_logging or the CORS settings applies to
the next request without a restart.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable

from aiohttp import hdrs, web

from good_base.config.loader import ConfigLoader

logger = logging.getLogger(__name__)
request_logger = logging.getLogger("good_base.requests")

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

ALLOWED_METHODS = "GET, POST, OPTIONS"
ALLOWED_HEADERS = "Authorization, Content-Type"


def create_request_logging_middleware(loader: ConfigLoader):
    """Create middleware that logs method, path, status and duration."""

    @web.middleware
    async def request_logging_middleware(
        request: web.Request, handler: Handler
    ) -> web.StreamResponse:
        setup = loader.current
        if setup is None or not setup.config.logging.enable_request_logging:
            return await handler(request)

        start = time.perf_counter()
        status = 500
        try:
            response = await handler(request)
            status = response.status
            return response
        except web.HTTPException as e:
            status = e.status
            raise
        finally:
            request_logger.info(
                "%s %s %d %.1fms",
                request.method,
                request.path,
                status,
                (time.perf_counter() - start) * 1000,
            )

    return request_logging_middleware


def _allowed_origin(origin: str, allowed: list[str]) -> str | None:
    if "*" in allowed:
        return "*"
    if origin in allowed:
        return origin
    return None


def create_cors_middleware(loader: ConfigLoader):
    """Create middleware that applies server.enable_cors and server.cors_origins."""

    @web.middleware
    async def cors_middleware(
        request: web.Request, handler: Handler
    ) -> web.StreamResponse:
        setup = loader.current
        origin = request.headers.get(hdrs.ORIGIN)
        if setup is None or not setup.config.server.enable_cors or not origin:
            return await handler(request)

        allow = _allowed_origin(origin, setup.config.server.cors_origins)
        if allow is None:
            logger.debug("Rejected CORS origin %s", origin)
            return await handler(request)

        preflight = (
            request.method == hdrs.METH_OPTIONS
            and hdrs.ACCESS_CONTROL_REQUEST_METHOD in request.headers
        )
        if preflight:
            response: web.StreamResponse = web.Response(status=204)
            response.headers[hdrs.ACCESS_CONTROL_ALLOW_METHODS] = ALLOWED_METHODS
            response.headers[hdrs.ACCESS_CONTROL_ALLOW_HEADERS] = ALLOWED_HEADERS
        else:
            response = await handler(request)

        response.headers[hdrs.ACCESS_CONTROL_ALLOW_ORIGIN] = allow
        if allow != "*":
            response.headers[hdrs.VARY] = "Origin"
        return response

    return cors_middleware
