"""Routes real-time socket events into the notification service.

The socket transport itself lives outside this package. It delivers every
payload from the ``admin_notification`` channel to ``RealtimeDispatcher``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from gigboard.notifications.models import AdminNotification
from gigboard.notifications.policy import DeliveryDecision
from gigboard.notifications.service import AdminNotificationService

logger = logging.getLogger(__name__)

ADMIN_NOTIFICATION_CHANNEL = "admin_notification"

EVENT_NEW = "admin_notification"
EVENT_UPDATE = "notification_update"

# Routes where notifications never render
HIDDEN_PATH_PREFIXES = ("/auth",)
HIDDEN_PATHS = ("/",)


def should_render(pathname: str) -> bool:
    """Whether notification surfaces render on ``pathname``."""
    if pathname in HIDDEN_PATHS:
        return False
    return not pathname.startswith(HIDDEN_PATH_PREFIXES)


class RealtimeDispatcher:
    """Dispatches ``admin_notification`` channel payloads.

    Each call runs to completion before returning, so two notifications are
    never evaluated concurrently.
    """

    def __init__(self, service: AdminNotificationService):
        self.service = service

    def dispatch(self, event: Dict[str, Any]) -> Optional[DeliveryDecision]:
        """Handle one payload.

        Returns:
            The gate decision for new notifications, otherwise None
        """
        event_type = event.get("type") if isinstance(event, dict) else None

        if event_type == EVENT_NEW:
            return self._handle_new(event.get("notification"))

        if event_type == EVENT_UPDATE:
            self._handle_update(event.get("notification_id"), event.get("updates"))
            return None

        logger.debug(f"Ignoring event on {ADMIN_NOTIFICATION_CHANNEL}: {event_type!r}")
        return None

    def _handle_new(self, payload: Any) -> Optional[DeliveryDecision]:
        try:
            notification = AdminNotification.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Dropping malformed admin notification: {e}")
            return None
        return self.service.handle_new_notification(notification)

    def _handle_update(self, notification_id: Any, updates: Any) -> None:
        if isinstance(notification_id, str) and notification_id.isdigit():
            notification_id = int(notification_id)
        if not isinstance(notification_id, int) or not isinstance(updates, dict):
            logger.warning(
                f"Dropping malformed notification update for {notification_id!r}"
            )
            return
        if not self.service.handle_notification_update(notification_id, updates):
            logger.debug(f"Update for inactive notification {notification_id} ignored")
