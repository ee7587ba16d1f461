"""Core infrastructure components."""
from .exceptions import (
    AppException,
    DependencyUnavailableError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "AppException",
    "DependencyUnavailableError",
    "NotFoundError",
    "ValidationError",
]
