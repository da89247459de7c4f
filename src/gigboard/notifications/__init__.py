"""Admin notification delivery for the Gigboard client.

This package decides whether and how admin-authored notifications are
presented (modal, chatbot bubble, toast, or suppressed) and tracks each
notification's lifecycle against the marketplace API.
"""

from gigboard.notifications.models import (
    AdminNotification,
    DeliveryMethod,
    NotificationPreferences,
    NotificationType,
    Priority,
)
from gigboard.notifications.policy import DeliveryDecision, SuppressReason, UiState, evaluate
from gigboard.notifications.presentation import Presentation
from gigboard.notifications.results import OperationResult
from gigboard.notifications.service import AdminNotificationService

__all__ = [
    "AdminNotification",
    "AdminNotificationService",
    "DeliveryDecision",
    "DeliveryMethod",
    "NotificationPreferences",
    "NotificationType",
    "OperationResult",
    "Presentation",
    "Priority",
    "SuppressReason",
    "UiState",
    "evaluate",
]
