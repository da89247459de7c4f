"""Tests for the error hierarchy and user-facing messages."""

from gigboard.errors import (
    ApiConnectionError,
    ApiError,
    AuthenticationRequiredError,
    GigboardError,
    NotificationNotFoundError,
    PreferencesError,
    format_error_for_cli,
    handle_error,
    is_recoverable,
)


def test_api_error_carries_status():
    error = ApiError(503, method="PUT", path="/user/notifications/preferences")

    assert error.status_code == 503
    assert "503" in str(error)
    assert error.to_dict()["details"]["status_code"] == 503
    assert error.user_message == "The server rejected the request."


def test_subclasses_share_base():
    for error in (
        ApiConnectionError(),
        AuthenticationRequiredError(),
        NotificationNotFoundError(3),
        PreferencesError(),
    ):
        assert isinstance(error, GigboardError)
        assert is_recoverable(error)


def test_user_message_override():
    error = PreferencesError("PUT failed", user_message="Try again later")
    assert error.user_message == "Try again later"


def test_cli_format_hides_credentials():
    error = GigboardError("boom", details={"token": "abc", "path": "/x"})

    text = format_error_for_cli(error)

    assert "abc" not in text
    assert "path: /x" in text
    assert text.startswith("Error [GIGBOARD_ERROR]")


def test_handle_error_includes_suggestion():
    text = handle_error(AuthenticationRequiredError())
    assert "gigboard config set-token" in text


def test_plain_exceptions_are_not_recoverable():
    assert is_recoverable(ValueError("x")) is False
    assert "Something unexpected went wrong" in handle_error(ValueError("x"))
