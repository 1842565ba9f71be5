"""Error types for the todo client.

Remote failures are raised by RemoteTaskClient and caught at the
TaskStore operation boundary; ValidationError never leaves the client.
"""

from typing import Any


class ErrorCode:
    """Standard error codes."""

    # Input errors
    VALIDATION_FAILED = "VALIDATION_FAILED"

    # Remote errors
    NETWORK_ERROR = "NETWORK_ERROR"
    AUTH_FAILED = "AUTH_FAILED"
    NOT_FOUND = "NOT_FOUND"

    # Local errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class TodoClientError(Exception):
    """Base error with structured information.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        details: Additional error details
    """

    default_code = "TODO_CLIENT_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ValidationError(TodoClientError):
    """Input rejected locally, before any remote call."""

    default_code = ErrorCode.VALIDATION_FAILED


class ConfigurationError(TodoClientError):
    """Settings are unusable at runtime."""

    default_code = ErrorCode.CONFIGURATION_ERROR


class RemoteError(TodoClientError):
    """A call to the remote task service failed."""

    default_code = ErrorCode.NETWORK_ERROR

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details=details)
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class NetworkError(RemoteError):
    """Transport failure, timeout, unexpected status or malformed body."""

    default_code = ErrorCode.NETWORK_ERROR


class AuthError(RemoteError):
    """The service rejected the token."""

    default_code = ErrorCode.AUTH_FAILED


class NotFoundError(RemoteError):
    """The addressed task does not exist on the service."""

    default_code = ErrorCode.NOT_FOUND
