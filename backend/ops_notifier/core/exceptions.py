"""
Custom exceptions for the Ops Notifier service.
Provides meaningful error types for different failure scenarios.

Only the ``error_code`` of an exception is ever returned to HTTP callers;
``message`` and ``details`` are for logs.
"""
from typing import Any, Optional


class NotifierException(Exception):
    """Base exception for all Ops Notifier errors."""

    error_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error": self.__class__.__name__,
            "code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class AuthError(NotifierException):
    """
    Raised when a bot access token cannot be obtained.

    Fatal for the current request: covers missing credentials, malformed
    key material, signing failures and token endpoint errors. Never retried.
    """

    error_code = "AUTH_FAILED"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        original_error: Optional[str] = None
    ):
        details = {}
        if status_code is not None:
            details["upstream_status"] = status_code
        if original_error:
            details["original_error"] = original_error

        super().__init__(message, details, status_code=500)


class RecipientLookupError(NotifierException):
    """Raised when an email cannot be resolved to a NAVER WORKS user id."""

    error_code = "RECIPIENT_NOT_FOUND"

    def __init__(
        self,
        message: str,
        email: str,
        status_code: Optional[int] = None
    ):
        details = {"email": email}
        if status_code is not None:
            details["upstream_status"] = status_code

        super().__init__(message, details, status_code=404)


class SendError(NotifierException):
    """Raised when a single message delivery fails."""

    error_code = "SEND_FAILED"

    def __init__(
        self,
        message: str,
        target: str,
        status_code: Optional[int] = None,
        original_error: Optional[str] = None
    ):
        details = {"target": target}
        if status_code is not None:
            details["upstream_status"] = status_code
        if original_error:
            details["original_error"] = original_error

        super().__init__(message, details, status_code=502)


class ConfigurationError(NotifierException):
    """Raised when required configuration is missing or invalid."""

    error_code = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str,
        config_key: str,
    ):
        super().__init__(message, {"config_key": config_key}, status_code=500)
