"""Relay HTTP endpoints: liveness and snapshot trigger."""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from funding_relay.handler import TickerRelay

log = structlog.get_logger(__name__)

router = APIRouter()

# These verbs reach the handler; any other verb gets the app-level plain-text 405.
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.get("/health", response_class=PlainTextResponse)
async def health() -> str:
    """Return process liveness status."""
    return "OK"


@router.api_route("/get-ticker", methods=_ALL_METHODS, response_class=PlainTextResponse)
async def get_ticker(request: Request) -> PlainTextResponse:
    """Fetch ticker and funding rate for ``product_code`` and persist the snapshot.

    Errors are RelayError subclasses rendered by the app-level handler.
    """
    relay: TickerRelay = request.app.state.relay
    product_code = request.query_params.get("product_code")

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=uuid.uuid4().hex[:12],
        product_code=product_code or None,
    )

    record = await relay.handle(
        method=request.method,
        project_id=request.headers.get("ProjectId"),
        product_code=product_code,
    )
    log.debug("get_ticker_succeeded", key=record.document_key)
    return PlainTextResponse("success")
