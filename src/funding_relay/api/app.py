"""FastAPI application factory for the relay service."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from funding_relay.api import routes
from funding_relay.exceptions import MethodNotAllowed, RelayError
from funding_relay.handler import TickerRelay
from funding_relay.logging import get_logger

logger = get_logger(__name__)


async def _relay_error_handler(request: Request, exc: RelayError) -> PlainTextResponse:
    """Render a RelayError as its status code and fixed plain-text body."""
    logger.info(
        "request_failed",
        path=request.url.path,
        status_code=exc.status_code,
        error=type(exc).__name__,
    )
    return PlainTextResponse(exc.body, status_code=exc.status_code)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Answer router-level 405s (TRACE, CONNECT, custom verbs) in plain text too."""
    if exc.status_code == 405:
        return PlainTextResponse(
            MethodNotAllowed.default_message, status_code=405, headers=exc.headers
        )
    return await http_exception_handler(request, exc)


def create_app(relay: TickerRelay, lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        relay: The request handler shared by all requests.
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to connect and close the exchange and store.

    Returns:
        Configured FastAPI application with routes under ``/api``.
    """
    app = FastAPI(
        title="Funding Rate Relay",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.relay = relay

    app.add_exception_handler(RelayError, _relay_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.include_router(routes.router, prefix="/api")

    return app
