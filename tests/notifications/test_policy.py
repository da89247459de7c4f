"""Tests for the notification gate."""

from __future__ import annotations

from datetime import datetime

import pytest

from gigboard.notifications.models import NotificationPreferences, Priority, priority_rank
from gigboard.notifications.policy import (
    TOAST_MESSAGE_LIMIT,
    SuppressReason,
    UiState,
    evaluate,
    is_in_quiet_hours,
    meets_minimum_priority,
    parse_clock,
    toast_description,
)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 5, 1, hour, minute)


def overnight_quiet() -> NotificationPreferences:
    return NotificationPreferences(
        respect_quiet_hours=True,
        quiet_hours_start="22:00",
        quiet_hours_end="06:00",
    )


class TestQuietHours:
    def test_overnight_window_suppresses_normal_but_not_urgent(self, make_notification):
        prefs = overnight_quiet()

        normal = evaluate(make_notification(priority="normal"), prefs, at(23, 30))
        urgent = evaluate(make_notification(priority="urgent"), prefs, at(23, 30))

        assert normal.admitted is False
        assert normal.reason == SuppressReason.QUIET_HOURS
        assert urgent.admitted is True

    @pytest.mark.parametrize(
        "hour,minute,expected",
        [
            (21, 59, False),
            (22, 0, True),
            (0, 0, True),
            (5, 59, True),
            (6, 0, False),
            (12, 0, False),
        ],
    )
    def test_overnight_window_is_half_open(self, hour, minute, expected):
        assert is_in_quiet_hours(overnight_quiet(), at(hour, minute)) is expected

    def test_daytime_window(self):
        prefs = NotificationPreferences(
            respect_quiet_hours=True,
            quiet_hours_start="09:00",
            quiet_hours_end="17:00",
        )
        assert is_in_quiet_hours(prefs, at(9, 0)) is True
        assert is_in_quiet_hours(prefs, at(16, 59)) is True
        assert is_in_quiet_hours(prefs, at(17, 0)) is False
        assert is_in_quiet_hours(prefs, at(8, 59)) is False

    def test_equal_bounds_never_suppress(self):
        prefs = NotificationPreferences(
            respect_quiet_hours=True,
            quiet_hours_start="22:00",
            quiet_hours_end="22:00",
        )
        assert is_in_quiet_hours(prefs, at(22, 0)) is False

    def test_disabled_window_never_suppresses(self):
        prefs = overnight_quiet().model_copy(update={"respect_quiet_hours": False})
        assert is_in_quiet_hours(prefs, at(23, 30)) is False

    def test_malformed_bounds_never_suppress(self):
        prefs = NotificationPreferences(
            respect_quiet_hours=True,
            quiet_hours_start="late",
            quiet_hours_end="06:00",
        )
        assert is_in_quiet_hours(prefs, at(23, 30)) is False

    def test_missing_preferences_never_suppress(self):
        assert is_in_quiet_hours(None, at(23, 30)) is False


class TestSuppression:
    def test_receive_off_suppresses_everything(self, make_notification):
        prefs = NotificationPreferences(receive_admin_notifications=False)

        decision = evaluate(make_notification(priority="urgent"), prefs, at(12))

        assert decision.admitted is False
        assert decision.reason == SuppressReason.DISABLED
        assert decision.show_modal is False
        assert decision.show_toast is False

    def test_receive_off_checked_before_priority(self, make_notification):
        prefs = NotificationPreferences(
            receive_admin_notifications=False,
            min_priority_level="high",
        )
        decision = evaluate(make_notification(priority="low"), prefs, at(12))
        assert decision.reason == SuppressReason.DISABLED

    def test_below_minimum_priority(self, make_notification):
        prefs = NotificationPreferences(min_priority_level="high")

        normal = evaluate(make_notification(priority="normal"), prefs, at(12))
        high = evaluate(make_notification(priority="high"), prefs, at(12))

        assert normal.reason == SuppressReason.BELOW_MIN_PRIORITY
        assert high.admitted is True

    def test_priority_checked_before_quiet_hours(self, make_notification):
        prefs = overnight_quiet().model_copy(update={"min_priority_level": Priority.HIGH})
        decision = evaluate(make_notification(priority="low"), prefs, at(23, 30))
        assert decision.reason == SuppressReason.BELOW_MIN_PRIORITY

    def test_missing_preferences_deliver_everything(self, make_notification):
        decision = evaluate(make_notification(priority="low"), None, at(23, 30))
        assert decision.admitted is True


class TestChannels:
    def test_normal_both_opens_modal_and_chatbot_when_idle(self, make_notification):
        decision = evaluate(make_notification(priority="normal"), None, at(12), UiState())

        assert decision.show_modal is True
        assert decision.show_chatbot is True
        assert decision.show_toast is False

    def test_low_priority_toasts_and_never_opens_modal(self, make_notification):
        decision = evaluate(make_notification(priority="low"), None, at(12), UiState())

        assert decision.show_toast is True
        assert decision.show_modal is False
        assert decision.show_chatbot is True

    def test_visible_chatbot_holds_back_normal_modal(self, make_notification):
        ui = UiState(is_chatbot_visible=True)

        normal = evaluate(make_notification(priority="normal"), None, at(12), ui)
        high = evaluate(make_notification(priority="high"), None, at(12), ui)

        assert normal.show_modal is False
        assert high.show_modal is True
        assert normal.show_chatbot is False

    def test_open_modal_holds_back_chatbot(self, make_notification):
        ui = UiState(is_modal_open=True)
        decision = evaluate(
            make_notification(priority="normal", notification_type="chatbot"),
            None,
            at(12),
            ui,
        )
        assert decision.admitted is True
        assert decision.show_chatbot is False

    def test_chatbot_only_method_never_opens_modal(self, make_notification):
        prefs = NotificationPreferences(preferred_delivery_method="chatbot")

        decision = evaluate(make_notification(priority="urgent"), prefs, at(12))

        assert decision.show_modal is False
        assert decision.show_chatbot is True

    def test_chatbot_notification_with_modal_method_shows_nothing(self, make_notification):
        prefs = NotificationPreferences(preferred_delivery_method="modal")

        decision = evaluate(
            make_notification(priority="high", notification_type="chatbot"),
            prefs,
            at(12),
        )

        assert decision.admitted is True
        assert decision.show_modal is False
        assert decision.show_chatbot is False

    def test_sound_follows_preference(self, make_notification):
        quiet = evaluate(make_notification(), NotificationPreferences(), at(12))
        loud = evaluate(make_notification(), NotificationPreferences(sound_enabled=True), at(12))

        assert quiet.play_sound is False
        assert loud.play_sound is True


def test_parse_clock():
    assert parse_clock("00:00") == 0
    assert parse_clock("22:30") == 22 * 60 + 30
    assert parse_clock("06:00:00") == 360
    with pytest.raises(ValueError):
        parse_clock("24:00")
    with pytest.raises(ValueError):
        parse_clock("noon")


def test_priority_ranks():
    assert priority_rank("low") < priority_rank("normal") < priority_rank("high")
    assert priority_rank(Priority.URGENT) == 4
    assert priority_rank("whenever") == priority_rank("low")
    assert meets_minimum_priority("urgent", NotificationPreferences(min_priority_level="high"))


def test_toast_description_truncates_long_messages():
    short = "a" * TOAST_MESSAGE_LIMIT
    long = "b" * (TOAST_MESSAGE_LIMIT + 1)

    assert toast_description(short) == short
    assert toast_description(long) == "b" * TOAST_MESSAGE_LIMIT + "..."
