"""Tests for notification and preference models."""

from __future__ import annotations

from gigboard.notifications.models import (
    AdminNotification,
    ButtonAction,
    ModalSize,
    NotificationPreferences,
    Priority,
    Theme,
)


def test_notification_parses_wire_format():
    notification = AdminNotification.model_validate(
        {
            "id": 3,
            "title": "Payout delay",
            "message": "Payouts are delayed by one day.",
            "notification_type": "modal",
            "priority": "high",
            "modal_size": "large",
            "display_settings": {
                "theme": "warning",
                "dismissible": False,
                "autoClose": 10,
                "showIcon": False,
                "actionButtons": [
                    {"text": "Details", "action": "redirect", "url": "/payouts"}
                ],
            },
            "created_at": "2024-05-01T10:00:00Z",
            "viewed_at": None,
        }
    )

    settings = notification.display_settings
    assert notification.priority == Priority.HIGH
    assert notification.modal_size == ModalSize.LARGE
    assert notification.targets_modal and not notification.targets_chatbot
    assert notification.is_unread
    assert settings.theme == Theme.WARNING
    assert settings.auto_close_seconds == 10
    assert settings.action_buttons[0].action == ButtonAction.REDIRECT


def test_payload_uses_camel_case_display_settings():
    notification = AdminNotification(id=1, title="Hi")

    payload = notification.to_payload()

    assert payload["display_settings"]["autoClose"] is False
    assert "actionButtons" in payload["display_settings"]
    assert payload["notification_type"] == "both"


def test_auto_close_flag_without_duration():
    notification = AdminNotification.model_validate(
        {"id": 1, "title": "Hi", "display_settings": {"autoClose": True}}
    )
    assert notification.display_settings.auto_close_seconds is None


def test_preference_defaults_deliver_everything():
    prefs = NotificationPreferences.defaults()

    assert prefs.receive_admin_notifications is True
    assert prefs.min_priority_level == Priority.LOW
    assert prefs.respect_quiet_hours is False
    assert prefs.to_payload()["preferred_delivery_method"] == "both"
