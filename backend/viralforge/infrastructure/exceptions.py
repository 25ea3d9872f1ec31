"""
Custom Exceptions for ViralForge AI

Hierarchical exception classes for proper error handling across layers.
Every error carries the HTTP status and machine-readable code it maps to.
"""

from typing import Optional, Dict, Any


class ViralForgeError(Exception):
    """Base exception for all ViralForge errors."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            **self.details,
        }


class UnauthorizedError(ViralForgeError):
    """Raised when no valid session is present."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ForbiddenError(ViralForgeError):
    """Raised when the session lacks the required privilege."""

    status_code = 403
    error_code = "forbidden"

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class ValidationError(ViralForgeError):
    """Raised when input validation fails."""

    status_code = 400
    error_code = "validation_error"


class NotFoundError(ViralForgeError):
    """Raised when a requested resource is missing or not owned by the caller."""

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if resource:
            details["resource"] = resource
        super().__init__(message, details, original_error)


class LimitReachedError(ViralForgeError):
    """Raised when a metered feature's quota is exhausted."""

    status_code = 429
    error_code = "limit_reached"

    def __init__(
        self,
        message: str,
        used: int,
        limit: Optional[int],
        remaining: Optional[int],
    ):
        super().__init__(
            message,
            {"remaining": remaining, "limit": limit, "used": used},
        )


class UpstreamError(ViralForgeError):
    """Raised when a data-store or provider call fails."""

    status_code = 502
    error_code = "upstream_failure"


class DatabaseError(UpstreamError):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class AIServiceError(UpstreamError):
    """Raised when LLM provider operations fail."""

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if model:
            details["model"] = model
        if operation:
            details["operation"] = operation
        super().__init__(message, details, original_error)


class RateLimitError(AIServiceError):
    """Raised when provider rate limits are exceeded."""

    status_code = 429
    error_code = "rate_limited"

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[int] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message, original_error=original_error)
        if retry_after:
            self.details["retry_after_seconds"] = retry_after


class ConfigurationError(ViralForgeError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, details, original_error)


class InternalError(ViralForgeError):
    """Raised when a request fails for a reason the caller cannot fix."""

    status_code = 500
    error_code = "internal_error"
