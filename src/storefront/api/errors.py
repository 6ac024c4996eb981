"""Map the storefront error taxonomy onto HTTP responses.

Protean's own handlers cover ``ValidationError`` (400) and
``ObjectNotFoundError`` (404). ``NotFoundError`` gets its own handler so the
body carries its messages dict. Conflicts are ValidationErrors too, so they
get a more specific handler; Starlette resolves handlers along the MRO.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.exceptions import ConflictError, ForbiddenError, GatewayError, NotFoundError, PaymentProcessingFailed

logger = structlog.get_logger(__name__)

ERROR_STATUS_CODES = {
    ConflictError: 409,
    ForbiddenError: 403,
    NotFoundError: 404,
    PaymentProcessingFailed: 500,
    GatewayError: 502,
}


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error("request_failed", path=request.url.path, error=type(exc).__name__)
        return JSONResponse(status_code=status_code, content={"error": getattr(exc, "messages", str(exc))})

    return handler


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    for exc_class, status_code in ERROR_STATUS_CODES.items():
        app.add_exception_handler(exc_class, _error_handler(status_code))
