"""Error Handlers — HTTP envelopes for gateway errors on the REST surface.

Invariants:
    - AuthenticationError → 401 with ``WWW-Authenticate: Bearer``; the body only
      says "Authentication error", the reason goes to the log
    - PolicyError → 403; every other ChatGatewayError uses its own http_status
    - Malformed query/body → the ValidationError envelope plus per-field details
    - Anything else → opaque 500 INTERNAL_ERROR, traceback logged

Design Decisions:
    - Handlers are plain module functions registered with add_exception_handler,
      so tests can call them without an app
    - WebSocket failures never reach these handlers; the socket route answers
      with connect_error frames and close codes instead
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tunechat.core.errors import (
    AuthenticationError, ChatGatewayError, ErrorCategory, ErrorSeverity,
    ValidationError,
)

logger = logging.getLogger(__name__)

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}

_INTERNAL_ERROR_BODY = {
    "error": {
        "code": "INTERNAL_ERROR",
        "message": "An unexpected error occurred",
        "category": ErrorCategory.INTERNAL.value,
        "severity": ErrorSeverity.CRITICAL.value,
    },
}


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ChatGatewayError, handle_gateway_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)


def _log_extra(request: Request, exc: ChatGatewayError) -> dict:
    extra = {"error_code": exc.code, "path": request.url.path}
    if exc.context.user_id:
        extra["user_id"] = exc.context.user_id
    return extra


async def handle_gateway_error(
    request: Request, exc: ChatGatewayError,
) -> JSONResponse:
    if isinstance(exc, AuthenticationError):
        logger.warning(
            f"Request credential refused: {exc.reason}",
            extra=_log_extra(request, exc),
        )
        return JSONResponse(
            exc.to_response(),
            status_code=exc.http_status,
            headers=BEARER_CHALLENGE,
        )
    log = logger.warning if exc.http_status < 500 else logger.error
    log(exc.message, extra=_log_extra(request, exc))
    return JSONResponse(exc.to_response(), status_code=exc.http_status)


def _field_details(exc: RequestValidationError) -> list[dict]:
    details = []
    for e in exc.errors():
        location, *path = e["loc"] or ("request",)
        details.append({
            "field": ".".join(str(p) for p in path) or str(location),
            "location": str(location),
            "message": e["msg"],
        })
    return details


async def handle_request_validation(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = _field_details(exc)
    error = ValidationError(
        "Invalid request parameters",
        field=details[0]["field"] if details else "request",
    )
    logger.info(
        f"Rejected request to {request.url.path}: "
        + ", ".join(f"{d['field']} ({d['message']})" for d in details),
        extra={"error_code": error.code, "path": request.url.path},
    )
    body = error.to_response()
    body["error"]["details"] = details
    return JSONResponse(body, status_code=error.http_status)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}", exc_info=True,
    )
    return JSONResponse(
        _INTERNAL_ERROR_BODY,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
