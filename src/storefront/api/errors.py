"""HTTP mapping for storefront errors.

Protean's own exceptions (``ValidationError``, ``ObjectNotFoundError``)
are mapped by ``protean.integrations.fastapi``; this module adds the
storefront taxonomy, request-body validation and the catch-all.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.exceptions import (
    ConflictError,
    Forbidden,
    InvalidStateError,
    NotFoundError,
    StorefrontError,
    Unauthenticated,
)

logger = structlog.get_logger(__name__)

_STATUS_CODES = (
    (Unauthenticated, 401),
    (Forbidden, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (InvalidStateError, 422),
)


def status_code_for(exc: StorefrontError) -> int:
    for exc_class, status_code in _STATUS_CODES:
        if isinstance(exc, exc_class):
            return status_code
    return 400


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    status_code = status_code_for(exc)
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        status_code=status_code,
        **exc.details,
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "messages": exc.messages, **exc.details},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "ValidationError", "messages": jsonable_encoder(exc.errors())},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content={"error": "InternalError", "messages": {"server": ["Internal server error"]}})


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
