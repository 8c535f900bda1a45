"""
FastAPI middleware components.
"""

from .auth_context import (
    AuthMiddleware,
    get_current_claims,
    get_current_token,
    require_access_level,
)
from .error_handler import ErrorHandlerMiddleware, register_exception_handlers

__all__ = [
    "AuthMiddleware",
    "get_current_claims",
    "get_current_token",
    "require_access_level",
    "ErrorHandlerMiddleware",
    "register_exception_handlers",
]
