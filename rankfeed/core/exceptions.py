"""
Custom exception hierarchy for centralized error handling.
All exceptions map to appropriate HTTP status codes.
"""
from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(AppException):
    """Invalid input data."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(
            message=f"{resource} not found: {identifier}",
            status_code=404,
            error_code="NOT_FOUND",
            details={"resource": resource, "identifier": identifier},
        )


class DependencyUnavailableError(AppException):
    """
    A downstream call failed or timed out.

    The public message is generic. The dependency name and the reason stay
    on the exception (and on ``__cause__``) for logging only.
    """

    def __init__(
        self,
        dependency: str,
        reason: str = "Unknown error",
        operation: str = "request",
    ) -> None:
        self.dependency = dependency
        self.reason = reason
        self.operation = operation
        super().__init__(
            message=f"Failed to process {operation}",
            status_code=500,
            error_code="DEPENDENCY_UNAVAILABLE",
        )

    def with_operation(self, operation: str) -> "DependencyUnavailableError":
        """Re-label the failed operation for the public message."""
        self.operation = operation
        self.message = f"Failed to process {operation}"
        return self

    def __str__(self) -> str:
        return f"{self.dependency} unavailable: {self.reason}"
