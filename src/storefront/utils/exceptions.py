"""
Custom exceptions for Storefront API.

Every application error carries the HTTP status it maps to, so services
can raise domain errors and the API layer renders them uniformly.
"""

from typing import Optional, Dict, Any


class StorefrontError(Exception):
    """Base exception for all Storefront errors."""

    status_code = 500
    error = "Internal Error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception with message and optional details.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(StorefrontError):
    """Raised when configuration is invalid or missing."""
    pass


class ValidationError(StorefrontError):
    """Raised when input fails a business rule (bad request)."""
    status_code = 400
    error = "Bad Request"


class AuthenticationError(StorefrontError):
    """Raised when credentials or tokens are missing or invalid."""
    status_code = 401
    error = "Unauthorized"


class PermissionDeniedError(StorefrontError):
    """Raised when the caller's access level is insufficient."""
    status_code = 403
    error = "Forbidden"


class NotFoundError(StorefrontError):
    """Raised when a resource does not exist or is soft-deleted."""
    status_code = 404
    error = "Not Found"


class ConflictError(StorefrontError):
    """Raised when a write collides with existing state."""
    status_code = 409
    error = "Conflict"


class DatabaseError(StorefrontError):
    """Raised when database operations fail."""
    error = "Database Error"


class ExternalServiceError(StorefrontError):
    """Raised when an upstream HTTP service fails."""

    status_code = 502
    error = "Bad Gateway"

    def __init__(self, message: str, service: Optional[str] = None,
                 upstream_status: Optional[int] = None,
                 response_data: Optional[Dict[str, Any]] = None):
        """
        Initialize external service error.

        Args:
            message: Error message
            service: Name of the upstream service
            upstream_status: HTTP status returned upstream
            response_data: Upstream response body
        """
        details = {}
        if service:
            details["service"] = service
        if upstream_status:
            details["upstream_status"] = upstream_status
        if response_data:
            details["response_data"] = response_data

        super().__init__(message, details)
        self.service = service
        self.upstream_status = upstream_status
        self.response_data = response_data
