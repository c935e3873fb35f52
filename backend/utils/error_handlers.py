"""
Error types and helpers for rendering them as API responses.
"""

import logging
import traceback
from typing import Dict, Optional, Union
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error class."""

    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        status_code: int = 500,
        details: Optional[Dict] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.user_message = user_message or message
        self.timestamp = datetime.now(timezone.utc).isoformat()


class ReductionError(AppError):
    """A reducer could not shrink the file (corrupt or unsupported content)."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            code="REDUCTION_FAILED",
            status_code=422,
            **kwargs
        )


class ValidationError(AppError):
    """Input validation error."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            status_code=400,
            **kwargs
        )


def error_response(error: Union[AppError, Exception]) -> JSONResponse:
    """
    Create a standardized error response.

    Args:
        error: The error to convert to response

    Returns:
        JSONResponse with error details
    """
    if isinstance(error, AppError):
        content = {
            "error": {
                "code": error.code,
                "message": error.user_message,
                "details": error.details,
                "timestamp": error.timestamp
            }
        }
        status_code = error.status_code
    else:
        content = {
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
        status_code = 500
        logger.error(f"Unhandled error: {str(error)}", exc_info=error)

    return JSONResponse(
        status_code=status_code,
        content=content
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render AppError subclasses raised by route handlers as JSON."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        logger.warning(f"{exc.code}: {exc.message}", extra={"details": exc.details})
        return error_response(exc)


def log_error(error: Exception, context: Optional[Dict] = None):
    """
    Log error with context and traceback.

    Args:
        error: The error to log
        context: Additional context information
    """
    error_info = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "traceback": "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
    }

    if context:
        error_info["context"] = context

    if isinstance(error, AppError):
        error_info["error_code"] = error.code
        error_info["error_details"] = error.details

    logger.debug("Error details", extra=error_info)
