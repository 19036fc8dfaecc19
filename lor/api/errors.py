"""
Error Handlers
Custom exception handlers for FastAPI.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from ..reviews.errors import LORError, ServerFaultError

logger = logging.getLogger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    """
    Set up custom error handlers for the FastAPI app.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(LORError)
    async def lor_error_handler(request: Request, exc: LORError):
        """Render review rejections and server faults."""
        if isinstance(exc, ServerFaultError):
            logger.error(
                f"Server fault: {exc.message}",
                extra={
                    "reason": exc.reason.value,
                    "details": exc.details,
                    "path": request.url.path,
                },
            )
        else:
            logger.warning(
                f"Rejected: {exc.message}",
                extra={"reason": exc.reason.value, "path": request.url.path},
            )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "message": exc.message,
                    "type": exc.__class__.__name__,
                    "reason": exc.reason.value,
                    "details": exc.details,
                }
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        logger.warning(f"Validation error: {exc}", extra={"path": request.url.path})

        # Convert error details to JSON-serializable format
        errors = []
        for error in exc.errors():
            errors.append(
                {
                    "loc": error.get("loc", []),
                    "msg": str(error.get("msg", "")),
                    "type": error.get("type", ""),
                }
            )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": {
                    "message": "Request validation failed",
                    "type": "ValidationError",
                    "details": errors,
                }
            },
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        """Handle value errors."""
        logger.warning(f"Value error: {exc}", extra={"path": request.url.path})

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "message": str(exc),
                    "type": "ValueError",
                }
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(f"Unexpected error: {exc}", exc_info=True, extra={"path": request.url.path})

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "message": "An unexpected error occurred",
                    "type": "InternalServerError",
                }
            },
        )
