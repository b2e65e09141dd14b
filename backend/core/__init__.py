"""
Core module for Uploadable backend
"""

from .config import settings
from .context import current_request_id, is_cli, request_context
from .middleware import RequestContextMiddleware, LoggingMiddleware

__all__ = [
    "settings",
    "current_request_id",
    "is_cli",
    "request_context",
    "RequestContextMiddleware",
    "LoggingMiddleware",
]
