"""Centralized error definitions for the Gigboard client.

Usage:
    from gigboard.errors import GigboardError, ApiError, handle_error

    try:
        await api.get("/user/notifications/active")
    except GigboardError as e:
        print(handle_error(e))
"""

from __future__ import annotations

from typing import Any

from gigboard.errors.user_messages import (
    format_error_for_cli,
    format_error_for_user,
    get_recovery_suggestion,
    get_user_message,
)


# =============================================================================
# Base Error
# =============================================================================


class GigboardError(Exception):
    """Base exception for all Gigboard client errors.

    Attributes:
        code: Error code for categorization
        user_message: User-friendly message (optional override)
        recoverable: Whether the error is potentially recoverable
        details: Additional error details for debugging
    """

    code: str = "GIGBOARD_ERROR"
    default_message: str = "An unexpected error occurred"
    recoverable: bool = True

    def __init__(
        self,
        message: str | None = None,
        *,
        user_message: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.message = message or self.default_message
        self._user_message = user_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def user_message(self) -> str:
        """Get user-friendly message."""
        if self._user_message:
            return self._user_message
        return get_user_message(self)

    @property
    def recovery_suggestion(self) -> str:
        """Get recovery suggestion."""
        return get_recovery_suggestion(self)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "recoverable": self.recoverable,
            "details": self.details,
        }


# =============================================================================
# API Errors
# =============================================================================


class ApiError(GigboardError):
    """The API answered with a non-2xx status."""

    code = "API_ERROR"
    default_message = "API request failed"

    def __init__(
        self,
        status_code: int,
        *,
        method: str = "GET",
        path: str = "",
        body: Any = None,
        message: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.method = method
        self.path = path
        self.body = body
        super().__init__(
            message or f"{method} {path} failed with status {status_code}",
            details={"status_code": status_code, "path": path},
        )


class ApiConnectionError(GigboardError):
    """The API could not be reached (DNS, refused, timeout)."""

    code = "API_CONNECTION_ERROR"
    default_message = "Cannot connect to the API"


class AuthenticationRequiredError(GigboardError):
    """Operation needs an authenticated session."""

    code = "AUTHENTICATION_REQUIRED"
    default_message = "Authentication required"


# =============================================================================
# Notification Errors
# =============================================================================


class NotificationError(GigboardError):
    """Base error for notification operations."""

    code = "NOTIFICATION_ERROR"
    default_message = "Notification operation failed"


class NotificationNotFoundError(NotificationError):
    """Notification id is not in the active set."""

    code = "NOTIFICATION_NOT_FOUND"
    default_message = "Notification not found"

    def __init__(self, notification_id: int, *, message: str | None = None) -> None:
        self.notification_id = notification_id
        super().__init__(
            message or f"Notification {notification_id} not found",
            details={"notification_id": notification_id},
        )


class PreferencesError(NotificationError):
    """Preference update was rejected or failed."""

    code = "PREFERENCES_ERROR"
    default_message = "Failed to update notification preferences"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(GigboardError):
    """Base error for configuration issues."""

    code = "CONFIGURATION_ERROR"
    default_message = "Configuration error"


class InvalidConfigError(ConfigurationError):
    """Configuration is invalid."""

    code = "INVALID_CONFIG"
    default_message = "Invalid configuration"


# =============================================================================
# Error Handler
# =============================================================================


def handle_error(error: Exception) -> str:
    """Return a user-friendly message with recovery suggestion."""
    return format_error_for_user(error)


def is_recoverable(error: Exception) -> bool:
    """Check if an error is potentially recoverable."""
    if isinstance(error, GigboardError):
        return error.recoverable
    return False


__all__ = [
    "GigboardError",
    "ApiError",
    "ApiConnectionError",
    "AuthenticationRequiredError",
    "NotificationError",
    "NotificationNotFoundError",
    "PreferencesError",
    "ConfigurationError",
    "InvalidConfigError",
    "handle_error",
    "is_recoverable",
    "format_error_for_cli",
    "format_error_for_user",
]
