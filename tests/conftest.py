"""Shared fixtures for notification tests."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest

from gigboard.configuration.settings import NotificationSettings
from gigboard.notifications.models import AdminNotification, NotificationPreferences
from gigboard.notifications.presentation import (
    ChatbotPresenter,
    ModalPresenter,
    Presentation,
    SoundPlayer,
    Toaster,
)
from gigboard.notifications.service import AdminNotificationService


class RecordingToaster(Toaster):
    def __init__(self) -> None:
        self.toasts: List[Dict[str, Any]] = []

    def toast(self, title, description="", duration_ms=None, variant="default") -> None:
        self.toasts.append(
            {
                "title": title,
                "description": description,
                "duration_ms": duration_ms,
                "variant": variant,
            }
        )


class RecordingSoundPlayer(SoundPlayer):
    def __init__(self) -> None:
        self.plays = 0

    def play(self) -> None:
        self.plays += 1


class RecordingModalPresenter(ModalPresenter):
    def __init__(self) -> None:
        self.opened: List[int] = []
        self.closed = 0

    def open(self, notification: AdminNotification) -> None:
        self.opened.append(notification.id)

    def close(self) -> None:
        self.closed += 1


class RecordingChatbotPresenter(ChatbotPresenter):
    def __init__(self) -> None:
        self.visibility: List[bool] = []

    def set_visible(self, visible: bool) -> None:
        self.visibility.append(visible)


@pytest.fixture
def make_notification() -> Callable[..., AdminNotification]:
    """Factory for notifications with sensible defaults."""

    def factory(notification_id: int = 1, **overrides: Any) -> AdminNotification:
        payload: Dict[str, Any] = {
            "id": notification_id,
            "title": f"Notice {notification_id}",
            "message": "Platform maintenance tonight",
            "notification_type": "both",
            "priority": "normal",
            "created_at": "2024-05-01T10:00:00Z",
        }
        payload.update(overrides)
        return AdminNotification.model_validate(payload)

    return factory


@pytest.fixture
def api() -> MagicMock:
    """NotificationsApi double with an authenticated client."""
    api = MagicMock()
    api.client.is_authenticated = True
    api.client.aclose = AsyncMock()
    api.get_active = AsyncMock(return_value=[])
    api.get_preferences = AsyncMock(return_value=NotificationPreferences().to_payload())
    api.update_preferences = AsyncMock(return_value={"success": True})
    api.mark_viewed = AsyncMock(return_value=None)
    api.mark_dismissed = AsyncMock(return_value=None)
    api.mark_clicked = AsyncMock(return_value=None)
    api.dismiss_all = AsyncMock(return_value=None)
    return api


@pytest.fixture
def presentation() -> Presentation:
    return Presentation(
        toaster=RecordingToaster(),
        sound=RecordingSoundPlayer(),
        modal=RecordingModalPresenter(),
        chatbot=RecordingChatbotPresenter(),
    )


@pytest.fixture
def noon() -> datetime:
    return datetime(2024, 5, 1, 12, 0)


@pytest.fixture
def notification_settings() -> NotificationSettings:
    return NotificationSettings(modal_close_delay_ms=20)


@pytest.fixture
def service(
    api: MagicMock,
    presentation: Presentation,
    notification_settings: NotificationSettings,
    noon: datetime,
) -> AdminNotificationService:
    return AdminNotificationService(
        api,
        presentation=presentation,
        settings=notification_settings,
        clock=lambda: noon,
    )
