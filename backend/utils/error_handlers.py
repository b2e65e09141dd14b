"""
Error handling utilities.
"""

import logging
import traceback
from typing import Dict, Optional, Union
from datetime import datetime, timezone

from fastapi import Request
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


class ConfigurationError(AppError):
    """
    A rule declaration is malformed.

    This is a setup problem in the application, not a failed validation of
    user input, so it is never turned into a form error message.
    """

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("user_message", "Upload validation is misconfigured")
        super().__init__(
            message,
            code="CONFIGURATION_ERROR",
            status_code=500,
            **kwargs
        )


class ValidationError(AppError):
    """Input validation error."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR", **kwargs):
        super().__init__(
            message,
            code=code,
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

        logger.error(f"Unhandled error: {str(error)}", exc_info=True)

    return JSONResponse(
        status_code=status_code,
        content=content
    )


async def app_error_handler(request: Request, error: AppError) -> JSONResponse:
    """FastAPI exception handler for AppError and its subclasses."""
    log_error(error, context={
        "path": request.url.path,
        "request_id": getattr(request.state, "request_id", None),
    })
    return error_response(error)


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
        "traceback": traceback.format_exc()
    }

    if context:
        error_info["context"] = context

    if isinstance(error, AppError):
        error_info["error_code"] = error.code
        error_info["error_details"] = error.details

    logger.error("Error occurred", extra=error_info)
