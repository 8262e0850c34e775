"""Map domain errors onto HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from quotedesk.errors import QuoteDeskError
from quotedesk.events import emit
from quotedesk.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)


async def quotedesk_error_handler(request: Request, exc: QuoteDeskError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Internal detail goes to the log only
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    await emit(SystemEvent(
        event_type=EventType.SYSTEM_ERROR,
        data={"path": request.url.path, "error_type": type(exc).__name__},
        source_module="api.errors",
    ))
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QuoteDeskError, quotedesk_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
