"""Shared exceptions for the Companion Chat API.

Every application error carries one of a closed set of kinds so callers can
branch on the kind instead of parsing messages. The HTTP status is attached
per exception class and rendered by the handler registered in 'api.main'.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Closed set of error kinds surfaced by the application."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    DEPENDENCY_FAILURE = "dependency_failure"
    INTERNAL = "internal"


class CompanionException(Exception):
    """Base exception for the Companion Chat API."""

    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(CompanionException):
    """Raised when a required parameter is missing or empty."""

    kind = ErrorKind.VALIDATION
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class NotFoundError(CompanionException):
    """Raised when a resource is not found."""

    kind = ErrorKind.NOT_FOUND
    status_code = 404

    def __init__(self, resource: str, identifier: str, error_code: str = "NOT_FOUND"):
        message = f"{resource} with identifier '{identifier}' not found"
        super().__init__(message, error_code, {"resource": resource, "identifier": identifier})


class ConflictError(CompanionException):
    """Raised when there's a conflict with existing data."""

    kind = ErrorKind.CONFLICT
    status_code = 409

    def __init__(
        self,
        message: str,
        error_code: str = "CONFLICT",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details)


class StorageError(CompanionException):
    """Raised when persistence operations fail."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "STORAGE_ERROR", details)


class ExternalServiceError(CompanionException):
    """Raised when external service calls fail."""

    kind = ErrorKind.DEPENDENCY_FAILURE
    status_code = 502

    def __init__(
        self,
        service: str,
        message: str,
        error_code: str = "EXTERNAL_SERVICE_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        full_message = f"{service} service error: {message}"
        error_details = {"service": service}
        if details:
            error_details.update(details)
        super().__init__(full_message, error_code, error_details)
