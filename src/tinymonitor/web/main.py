"""
FastAPI application exposing the gateway.

Every path is served by the same route; only the method is checked. The
interactive docs and OpenAPI routes are disabled so that no path is shadowed.
"""

from __future__ import annotations

import json
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable, Optional
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import Response
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException as StarletteHTTPException

from tinymonitor import __version__
from tinymonitor.config.config import Config
from tinymonitor.errors import MethodError
from tinymonitor.observability import start_metrics_server

from .composer import JSON_MEDIA_TYPE, GatewayReply, compose_error
from .handler import GatewayHandler

logger = structlog.get_logger(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"]


def _to_response(reply: GatewayReply, background: Optional[BackgroundTask] = None) -> Response:
    return Response(
        content=reply.body,
        status_code=reply.status_code,
        media_type=reply.media_type,
        background=background,
    )


def create_app(config: Optional[Config] = None, handler: Optional[GatewayHandler] = None) -> FastAPI:
    """Build the gateway application around ``handler``."""
    config = config or Config()
    handler = handler or GatewayHandler(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        start_metrics_server(config.monitoring.prometheus_port)
        logger.info(
            "Gateway running",
            device=config.server.device_name,
            upstream=config.upstream.url,
            max_concurrent_requests=config.server.max_concurrent_requests,
        )

        yield

        logger.info("Gateway draining")

    app = FastAPI(
        title=config.server.device_name,
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config
    app.state.handler = handler

    @app.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def gateway(request: Request) -> Response:
        reply = await handler.handle(request.method)
        return _to_response(reply, background=BackgroundTask(handler.closed))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
        # Methods outside ALL_METHODS are rejected by routing before the handler runs
        if exc.status_code == 405:
            return _to_response(compose_error(MethodError()))
        body = json.dumps({"error": str(exc.detail).lower()}, separators=(",", ":"))
        return Response(content=body, status_code=exc.status_code, media_type=JSON_MEDIA_TYPE)

    @app.middleware("http")
    async def connection_headers(request: Request, call_next: Callable) -> Response:
        """One response per connection, never cached, with a request id."""
        start_time = time.time()
        request_id = str(uuid4())
        structlog.contextvars.bind_contextvars(correlation_id=request_id)
        try:
            response = await call_next(request)

            process_time = time.time() - start_time
            response.headers["Connection"] = "close"
            response.headers["Cache-Control"] = "no-store"
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{process_time:.6f}"

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                client=request.client.host if request.client else None,
                status=response.status_code,
                response_time_ms=round(process_time * 1000, 3),
            )
            return response
        finally:
            structlog.contextvars.unbind_contextvars("correlation_id")

    return app
