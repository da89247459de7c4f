"""Notification gate: decides whether and where an incoming notification shows.

The gate is a pure function of the notification, the user's preferences,
the local wall-clock time and the current UI state. Predicates run in order
and the first failing one suppresses delivery:

1. ``receive_admin_notifications`` is off
2. priority ranks below ``min_priority_level``
3. inside quiet hours and not urgent

An admitted notification gets a set of channel flags; applying them
(state mutation, sound, modal, chatbot, toast) is the service's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from gigboard.notifications.models import (
    AdminNotification,
    DeliveryMethod,
    NotificationPreferences,
    Priority,
    priority_rank,
)

logger = logging.getLogger(__name__)

TOAST_DURATION_MS = 3000
TOAST_MESSAGE_LIMIT = 100
MINUTES_PER_DAY = 24 * 60


class SuppressReason(str, Enum):
    """Why the gate refused a notification."""

    DISABLED = "disabled"
    BELOW_MIN_PRIORITY = "below_min_priority"
    QUIET_HOURS = "quiet_hours"


@dataclass(frozen=True)
class UiState:
    """Presentation state at the moment a notification arrives."""

    is_chatbot_visible: bool = False
    is_modal_open: bool = False


@dataclass(frozen=True)
class DeliveryDecision:
    """Outcome of evaluating one notification.

    Attributes:
        admitted: Whether the notification joins the active set
        reason: Suppression reason when not admitted
        play_sound: Play the notification sound
        show_modal: Open the modal dialog
        show_chatbot: Reveal the chatbot bubble
        show_toast: Show a transient acknowledgement toast
    """

    admitted: bool
    reason: Optional[SuppressReason] = None
    play_sound: bool = False
    show_modal: bool = False
    show_chatbot: bool = False
    show_toast: bool = False

    @classmethod
    def suppressed(cls, reason: SuppressReason) -> "DeliveryDecision":
        return cls(admitted=False, reason=reason)


def parse_clock(value: str) -> int:
    """Parse ``HH:MM`` into minutes since midnight.

    Raises:
        ValueError: If the value is not a valid wall-clock time
    """
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Expected HH:MM, got {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Time out of range: {value!r}")
    return hours * 60 + minutes


def is_in_quiet_hours(
    preferences: Optional[NotificationPreferences],
    now: Optional[datetime] = None,
) -> bool:
    """Check whether ``now`` falls inside the half-open quiet window.

    The window is ``[start, end)`` in local time. ``start > end`` spans
    midnight; ``start == end`` is empty. Unparseable bounds never suppress.
    """
    if preferences is None or not preferences.respect_quiet_hours:
        return False

    try:
        start = parse_clock(preferences.quiet_hours_start)
        end = parse_clock(preferences.quiet_hours_end)
    except (ValueError, AttributeError) as e:
        logger.warning(f"Ignoring malformed quiet hours: {e}")
        return False

    now = now or datetime.now()
    current = now.hour * 60 + now.minute

    if start == end:
        return False
    if start < end:
        return start <= current < end
    # Overnight window
    return current >= start or current < end


def meets_minimum_priority(
    priority: Priority | str,
    preferences: Optional[NotificationPreferences],
) -> bool:
    if preferences is None:
        return True
    return priority_rank(priority) >= priority_rank(preferences.min_priority_level)


def toast_description(message: str) -> str:
    """Truncate a message for the acknowledgement toast."""
    if len(message) > TOAST_MESSAGE_LIMIT:
        return message[:TOAST_MESSAGE_LIMIT] + "..."
    return message


def _accepts(method: DeliveryMethod | str, surface: DeliveryMethod) -> bool:
    return method == surface or method == DeliveryMethod.BOTH


def evaluate(
    notification: AdminNotification,
    preferences: Optional[NotificationPreferences],
    now: Optional[datetime] = None,
    ui_state: Optional[UiState] = None,
) -> DeliveryDecision:
    """Run the gate for one notification.

    Args:
        notification: The incoming notification
        preferences: Cached user preferences; None means deliver everything
        now: Local wall-clock time (defaults to the current time)
        ui_state: Presentation state before this notification is applied

    Returns:
        DeliveryDecision describing suppression or the channels to use
    """
    prefs = preferences or NotificationPreferences.defaults()
    ui_state = ui_state or UiState()
    priority = notification.priority

    if not prefs.receive_admin_notifications:
        logger.debug(f"Notification {notification.id} suppressed: admin notifications off")
        return DeliveryDecision.suppressed(SuppressReason.DISABLED)

    if not meets_minimum_priority(priority, prefs):
        logger.debug(
            f"Notification {notification.id} suppressed: priority {priority.value} "
            f"below {prefs.min_priority_level}"
        )
        return DeliveryDecision.suppressed(SuppressReason.BELOW_MIN_PRIORITY)

    if priority != Priority.URGENT and is_in_quiet_hours(prefs, now):
        logger.debug(f"Notification {notification.id} suppressed: quiet hours")
        return DeliveryDecision.suppressed(SuppressReason.QUIET_HOURS)

    method = prefs.preferred_delivery_method or DeliveryMethod.BOTH

    show_modal = False
    if notification.targets_modal and _accepts(method, DeliveryMethod.MODAL):
        # Low priority is acknowledged by toast and never escalates to a modal
        if priority in (Priority.HIGH, Priority.URGENT):
            show_modal = True
        elif priority != Priority.LOW and not ui_state.is_chatbot_visible:
            show_modal = True

    show_chatbot = (
        notification.targets_chatbot
        and _accepts(method, DeliveryMethod.CHATBOT)
        and not ui_state.is_chatbot_visible
        and not ui_state.is_modal_open
    )

    decision = DeliveryDecision(
        admitted=True,
        play_sound=prefs.sound_enabled,
        show_modal=show_modal,
        show_chatbot=show_chatbot,
        show_toast=priority == Priority.LOW,
    )
    logger.debug(f"Notification {notification.id} admitted: {decision}")
    return decision
