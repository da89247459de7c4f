"""Data models for admin notifications and user delivery preferences.

Wire format follows the marketplace API: snake_case for notification and
preference fields, camelCase inside ``display_settings``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Priority(str, Enum):
    """Notification priority levels."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


PRIORITY_RANKS: Dict[str, int] = {
    Priority.LOW.value: 1,
    Priority.NORMAL.value: 2,
    Priority.HIGH.value: 3,
    Priority.URGENT.value: 4,
}


def priority_rank(priority: Union[Priority, str, None]) -> int:
    """Rank a priority; unknown values rank as ``low``."""
    if isinstance(priority, Priority):
        priority = priority.value
    return PRIORITY_RANKS.get(priority or "", 1)


class NotificationType(str, Enum):
    """Presentation surfaces a notification was authored for."""

    MODAL = "modal"
    CHATBOT = "chatbot"
    BOTH = "both"


class DeliveryMethod(str, Enum):
    """Presentation surfaces a user accepts."""

    MODAL = "modal"
    CHATBOT = "chatbot"
    BOTH = "both"


class Theme(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class ModalSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class ButtonAction(str, Enum):
    DISMISS = "dismiss"
    REDIRECT = "redirect"


class ActionButton(BaseModel):
    """A button rendered in the modal footer."""

    model_config = ConfigDict(extra="ignore")

    text: str
    action: ButtonAction = ButtonAction.DISMISS
    url: Optional[str] = None
    variant: Optional[str] = None


class DisplaySettings(BaseModel):
    """Rendering hints attached by the admin who authored the notification.

    Attributes:
        theme: Color scheme and icon family
        dismissible: Whether the user may close it (close button and backdrop)
        auto_close: ``False`` or a number of seconds after which it dismisses itself
        show_icon: Render the theme icon
        action_buttons: Footer buttons
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    theme: Theme = Theme.INFO
    dismissible: bool = True
    auto_close: Union[bool, int] = Field(default=False, alias="autoClose")
    show_icon: bool = Field(default=True, alias="showIcon")
    action_buttons: List[ActionButton] = Field(
        default_factory=list, alias="actionButtons"
    )

    @property
    def auto_close_seconds(self) -> Optional[int]:
        """Seconds until auto-dismiss, or None when auto-close is off.

        A bare ``true`` carries no duration and does not start a countdown.
        """
        if isinstance(self.auto_close, bool):
            return None
        if self.auto_close > 0:
            return self.auto_close
        return None


class AdminNotification(BaseModel):
    """An admin-authored notification delivered to this user."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str
    message: str = ""
    notification_type: NotificationType = NotificationType.BOTH
    priority: Priority = Priority.NORMAL
    display_settings: DisplaySettings = Field(default_factory=DisplaySettings)
    modal_size: ModalSize = ModalSize.MEDIUM
    created_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    viewed_at: Optional[datetime] = None
    dismissed_at: Optional[datetime] = None

    @property
    def is_unread(self) -> bool:
        return self.viewed_at is None

    @property
    def targets_modal(self) -> bool:
        return self.notification_type in (NotificationType.MODAL, NotificationType.BOTH)

    @property
    def targets_chatbot(self) -> bool:
        return self.notification_type in (NotificationType.CHATBOT, NotificationType.BOTH)

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the API wire format."""
        return self.model_dump(mode="json", by_alias=True)


class NotificationPreferences(BaseModel):
    """Per-user delivery preferences, owned by the user and cached per session.

    Attributes:
        receive_admin_notifications: Master switch
        preferred_delivery_method: Surfaces the user accepts
        auto_dismiss_timeout: Milliseconds before passive surfaces fade
        sound_enabled: Play a sound on admission
        animation_enabled: Animate modal and chatbot transitions
        respect_quiet_hours: Enforce the quiet-hours window
        quiet_hours_start: Window start, local ``HH:MM``
        quiet_hours_end: Window end (exclusive), local ``HH:MM``
        min_priority_level: Lowest priority that is delivered
    """

    model_config = ConfigDict(extra="ignore")

    receive_admin_notifications: bool = True
    preferred_delivery_method: DeliveryMethod = DeliveryMethod.BOTH
    auto_dismiss_timeout: int = 5000
    sound_enabled: bool = False
    animation_enabled: bool = True
    respect_quiet_hours: bool = False
    quiet_hours_start: str = "22:00"
    quiet_hours_end: str = "08:00"
    min_priority_level: Priority = Priority.LOW

    @classmethod
    def defaults(cls) -> "NotificationPreferences":
        """Preferences that deliver everything."""
        return cls()

    def merged(self, updates: Dict[str, Any]) -> "NotificationPreferences":
        """Return a copy with a partial update applied.

        Values are not validated; the server is the source of truth and the
        next fetch replaces whatever was merged here. Unknown keys are dropped.
        """
        known = {k: v for k, v in updates.items() if k in type(self).model_fields}
        return self.model_copy(update=known)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
