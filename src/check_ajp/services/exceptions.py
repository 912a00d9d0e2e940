"""Service layer exceptions.

Domain-specific exceptions for check logic errors. These exceptions are
independent of AJP13 wire errors and represent invalid check settings or
failures evaluating a response.
"""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """Base exception for service layer errors.

    Attributes:
        message: Human-readable error message
        details: Additional error context

    Example:
        >>> raise ServiceError("Check failed", details={"reason": "timeout"})
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize service error.

        Args:
            message: Error message
            details: Optional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(ServiceError):
    """Raised when check options are inconsistent.

    Example:
        >>> raise ValidationError("--json-key requires --json-value")
    """

    pass


class CheckError(ServiceError):
    """Raised when a response cannot be evaluated."""

    pass
