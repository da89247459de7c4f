"""User-friendly error messages for the Gigboard client.

Maps error codes to short human-readable messages and recovery suggestions
so toasts and CLI output never show raw transport errors.

Privacy Note:
- Error messages NEVER include auth tokens
- Response bodies are only shown in CLI details, never in toasts
"""

from __future__ import annotations

from typing import Any


# =============================================================================
# Error Message Catalog
# =============================================================================

ERROR_MESSAGES: dict[str, str] = {
    # API errors
    "API_ERROR": "The server rejected the request.",
    "API_CONNECTION_ERROR": "Cannot reach the Gigboard API.",
    "AUTHENTICATION_REQUIRED": "You need to be signed in to do that.",
    # Notification errors
    "NOTIFICATION_ERROR": "A notification operation failed.",
    "NOTIFICATION_NOT_FOUND": "That notification is no longer active.",
    "PREFERENCES_ERROR": "Failed to update notification preferences.",
    # Configuration errors
    "CONFIGURATION_ERROR": "The client configuration could not be used.",
    "INVALID_CONFIG": "A setting in ~/.gigboard/config.json is invalid.",
    # Generic
    "GIGBOARD_ERROR": "An unexpected error occurred. Please try again.",
    "UNKNOWN_ERROR": "Something unexpected went wrong.",
}


# =============================================================================
# Recovery Suggestions
# =============================================================================

RECOVERY_SUGGESTIONS: dict[str, str] = {
    "API_ERROR": "Retry in a moment. Notifications refresh every 5 minutes.",
    "API_CONNECTION_ERROR": "Check the API URL: gigboard config show",
    "AUTHENTICATION_REQUIRED": "Store a token with: gigboard config set-token <token>",
    "NOTIFICATION_ERROR": "Refresh with: gigboard notifications list",
    "NOTIFICATION_NOT_FOUND": "List active notifications: gigboard notifications list",
    "PREFERENCES_ERROR": "Check current values: gigboard notifications preferences",
    "CONFIGURATION_ERROR": "Check config: gigboard config show",
    "INVALID_CONFIG": "Fix or delete ~/.gigboard/config.json and retry.",
    "GIGBOARD_ERROR": "If this persists, please report the issue.",
    "UNKNOWN_ERROR": "Retry the command. Report if the issue continues.",
}


# =============================================================================
# Helper Functions
# =============================================================================


def _error_code(error: Any) -> str:
    if hasattr(error, "code"):
        return error.code
    if isinstance(error, str):
        return error
    return type(error).__name__.upper()


def get_user_message(error: Any) -> str:
    """Get user-friendly message for an error.

    Args:
        error: The error (can be Exception or error code string)

    Returns:
        User-friendly error message
    """
    return ERROR_MESSAGES.get(_error_code(error), ERROR_MESSAGES["UNKNOWN_ERROR"])


def get_recovery_suggestion(error: Any) -> str:
    """Get recovery suggestion for an error."""
    return RECOVERY_SUGGESTIONS.get(
        _error_code(error), RECOVERY_SUGGESTIONS["UNKNOWN_ERROR"]
    )


def format_error_for_user(error: Any) -> str:
    """Format a complete user-friendly error message.

    Args:
        error: The error to format

    Returns:
        Complete error message with recovery suggestion
    """
    message = get_user_message(error)
    suggestion = get_recovery_suggestion(error)

    return f"{message}\n\nSuggestion: {suggestion}"


def format_error_for_cli(error: Any) -> str:
    """Format error for CLI output.

    Args:
        error: The error to format

    Returns:
        CLI-formatted error message
    """
    message = get_user_message(error)
    suggestion = get_recovery_suggestion(error)
    code = getattr(error, "code", "ERROR")

    lines = [
        f"Error [{code}]: {message}",
        "",
        f"Suggestion: {suggestion}",
    ]

    if getattr(error, "details", None):
        lines.append("")
        lines.append("Details:")
        for key, value in error.details.items():
            # Never echo credentials
            if key not in ("token", "authorization", "password"):
                lines.append(f"  {key}: {value}")

    return "\n".join(lines)


__all__ = [
    "ERROR_MESSAGES",
    "RECOVERY_SUGGESTIONS",
    "get_user_message",
    "get_recovery_suggestion",
    "format_error_for_user",
    "format_error_for_cli",
]
