"""
Global error handling for the FastAPI application.

Catches VidScribeError subclasses, Pydantic validation errors, and
unhandled exceptions, converting them into the failure envelope
``{"success": false, "error": ..., "code": ..., "timestamp": ...}``.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from vidscribe.core.exceptions import VidScribeError

logger = logging.getLogger(__name__)


def error_body(detail: str, code: str, timestamp: str | None = None) -> dict:
    """Build the JSON failure envelope shared by every handler."""
    return {
        "success": False,
        "error": detail,
        "code": code,
        "timestamp": timestamp or datetime.now(UTC).isoformat(),
    }


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application.

    Registers three handlers in priority order:
    1. ``VidScribeError`` — maps domain errors to structured JSON responses.
    2. ``RequestValidationError`` — Pydantic validation failures (422).
    3. ``Exception`` — catch-all for unexpected server errors (500).

    Args:
        app: The FastAPI application instance to register handlers on.
    """

    @app.exception_handler(VidScribeError)
    async def vidscribe_error_handler(_request: Request, exc: VidScribeError) -> JSONResponse:
        """Convert domain-specific errors into a JSON error envelope."""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.detail, exc.code, exc.timestamp),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle Pydantic request validation errors (malformed body/params)."""
        return JSONResponse(
            status_code=422,
            content=error_body(str(exc), "VALIDATION_ERROR"),
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler — prevents stack traces from leaking to clients."""
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            status_code=500,
            content=error_body("Internal server error", "INTERNAL_ERROR"),
        )
