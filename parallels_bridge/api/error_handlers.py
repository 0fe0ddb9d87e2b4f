"""Error Handlers — map exceptions escaping the tool routes to JSON envelopes.

Invariants:
    - Every error body has the shape {"error": {code, message, category, severity, ...}}
    - BridgeError keeps its own http_status; ToolValidationError adds per-field details
    - Client faults (4xx) log at WARNING, server faults at ERROR
    - The catch-all never echoes exception text to the caller

Design Decisions:
    - Tool-level failures never get here: handlers return isError results.
      Only UnknownToolError, malformed request bodies and infrastructure
      failures (audit DB) reach these handlers
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from parallels_bridge.core.errors import (
    BridgeError,
    ErrorCategory,
    ErrorSeverity,
    ToolValidationError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BridgeError, handle_bridge_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


async def handle_bridge_error(request: Request, exc: BridgeError) -> JSONResponse:
    level = logging.WARNING if exc.http_status < 500 else logging.ERROR
    logger.log(
        level,
        f"{exc.code} on {request.url.path}: {exc.message}",
        extra={"error_code": exc.code, "tool_name": exc.context.tool_name},
    )
    body = exc.to_response()
    if isinstance(exc, ToolValidationError):
        body["error"]["details"] = [
            {"field": v.field, "message": v.message} for v in exc.violations
        ]
    return JSONResponse(status_code=exc.http_status, content=body)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Malformed {name, arguments} body."""
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(
        f"Malformed request on {request.url.path}: {len(details)} violation(s)",
        extra={"error_code": "VALIDATION_ERROR"},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.url.path}",
        exc_info=exc,
        extra={"error_code": "INTERNAL_ERROR"},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def _envelope(
    code: str,
    message: str,
    category: ErrorCategory,
    severity: ErrorSeverity,
    details: list[dict] | None = None,
) -> dict:
    error: dict = {
        "code": code,
        "message": message,
        "category": category.value,
        "severity": severity.value,
    }
    if details is not None:
        error["details"] = details
    return {"error": error}
