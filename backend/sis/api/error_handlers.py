"""Error Handlers - map every failure leaving a route to the SIS error envelope.

Invariants:
    - SisError → its own http_status with to_response() as the body
    - RequestValidationError → 400 VALIDATION_ERROR, one detail per offending parameter
    - Anything else → 500 INTERNAL_ERROR with a fixed message; the cause is only logged
    - Every body has the shape {"error": {code, message, category, severity, ...}}

Design Decisions:
    - Handlers registered with add_exception_handler from one table so tests can
      mount them on a bare FastAPI app
    - Validation details split the pydantic loc into location (path/query/body)
      and a dotted field name
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from sis.core.errors import ErrorCategory, ErrorSeverity, SisError

logger = logging.getLogger(__name__)

_LOCATIONS = {"path", "query", "header", "cookie", "body"}


def _envelope(
    code: str, message: str, category: ErrorCategory, severity: ErrorSeverity, **extra,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            **extra,
        },
    }


def validation_details(exc: RequestValidationError) -> list[dict]:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        location = loc.pop(0) if loc and loc[0] in _LOCATIONS else None
        details.append({
            "location": location,
            "field": ".".join(loc) or None,
            "message": err["msg"],
            "type": err["type"],
        })
    return details


async def handle_sis_error(request: Request, exc: SisError) -> JSONResponse:
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(
        f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "entity_type": exc.context.entity_type,
            "entity_id": exc.context.entity_id,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = validation_details(exc)
    logger.warning(
        f"Rejected {request.method} {request.url.path}: "
        f"{', '.join(d['field'] or d['location'] or '?' for d in details)}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request parameters",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


_HANDLERS = (
    (SisError, handle_sis_error),
    (RequestValidationError, handle_validation_error),
    (Exception, handle_unexpected_error),
)


def register_error_handlers(app: FastAPI) -> None:
    for exc_class, handler in _HANDLERS:
        app.add_exception_handler(exc_class, handler)
