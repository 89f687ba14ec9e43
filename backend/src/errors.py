"""
Application error taxonomy.

Every error a handler can surface derives from ``AppError`` and carries the
HTTP status and the public message rendered as ``{"error": message}``.
Internal causes are chained with ``raise ... from`` and logged, never sent
to the client.
"""

from typing import Any, Callable, Optional

from fastapi import status


class AppError(Exception):
    """Base class for errors mapped to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """A required field is missing or the request body is malformed."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "All fields are required"


class ConflictError(AppError):
    """A unique key (user email) is already taken."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Email already registered"


class NotFoundError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User not found"


class InvalidCredentialsError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid credentials"


class ProviderError(AppError):
    """The identity provider rejected the request or is not configured."""

    default_message = "Failed to send reset email"


class MailError(AppError):
    """The mail relay could not deliver the message."""

    default_message = "Failed to send reset email"


class UnhandledError(AppError):
    """Anything else; carries the endpoint's generic message."""


def is_absent(value: Any) -> bool:
    """
    Check whether a submitted field counts as absent.

    Missing, null, empty strings and numeric zero are all treated as absent.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)):
        return value == 0
    return False


def require_fields(message: Optional[str] = None, /, **fields: Any) -> None:
    """
    Raise ValidationError if any of the given fields is absent.

    Args:
        message: Error message (defaults to "All fields are required"),
            positional only so a field may itself be called ``message``
        **fields: Field name to submitted value

    Raises:
        ValidationError: If at least one field is absent
    """
    missing = [name for name, value in fields.items() if is_absent(value)]
    if missing:
        raise ValidationError(message, details={"missing": missing})


def failure_message(message: str) -> Callable:
    """
    Attach an endpoint's generic 500 message to its handler function.

    The request validation handler reports field values that cannot be cast
    to the declared type with this message, as any other unexpected failure
    of the endpoint would be.

    Args:
        message: Public error message, e.g. "Error adding trip"

    Returns:
        Decorator that sets ``failure_message`` on the endpoint
    """
    def decorator(endpoint: Callable) -> Callable:
        endpoint.failure_message = message
        return endpoint
    return decorator
