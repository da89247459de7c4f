"""Behavior of an open notification modal, independent of rendering.

Handles auto-close countdowns, footer action buttons and a dismiss guard
that keeps a modal from being dismissed twice.
"""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from typing import TYPE_CHECKING, Callable, Optional

from gigboard.notifications.models import ActionButton, AdminNotification, ButtonAction
from gigboard.notifications.results import OperationResult

if TYPE_CHECKING:
    from gigboard.notifications.service import AdminNotificationService

logger = logging.getLogger(__name__)


class ModalSession:
    """One opening of the modal for one notification.

    Usage:
        session = ModalSession(service, notification)
        session.start_auto_close()
        await session.handle_action(notification.display_settings.action_buttons[0])
    """

    def __init__(
        self,
        service: "AdminNotificationService",
        notification: AdminNotification,
        opener: Callable[[str], object] = webbrowser.open,
    ):
        self.service = service
        self.notification = notification
        self._opener = opener
        self._dismissed = False
        self._auto_close_task: Optional[asyncio.Task] = None
        self._auto_close_deadline: Optional[float] = None

    @property
    def is_dismissed(self) -> bool:
        return self._dismissed

    @property
    def time_remaining(self) -> Optional[int]:
        """Whole seconds left before auto-close, or None when not counting down."""
        if self._auto_close_deadline is None:
            return None
        remaining = self._auto_close_deadline - asyncio.get_running_loop().time()
        return max(0, round(remaining))

    def start_auto_close(self) -> bool:
        """Begin the auto-close countdown if the notification asks for one.

        Returns:
            True if a countdown was started
        """
        seconds = self.notification.display_settings.auto_close_seconds
        if seconds is None or self._auto_close_task is not None:
            return False

        loop = asyncio.get_running_loop()
        self._auto_close_deadline = loop.time() + seconds
        self._auto_close_task = loop.create_task(self._auto_close(seconds))
        logger.debug(f"Modal {self.notification.id} auto-closes in {seconds}s")
        return True

    async def _auto_close(self, seconds: int) -> None:
        await asyncio.sleep(seconds)
        self._auto_close_task = None
        await self.dismiss()

    async def dismiss(self) -> OperationResult[None]:
        """Dismiss the notification and close the modal, at most once."""
        if self._dismissed:
            return OperationResult.skip()

        self._dismissed = True
        result = await self.service.mark_as_dismissed(self.notification.id)
        if not result.ok:
            # Re-arm so the user can retry
            self._dismissed = False
            return result

        self.cancel_auto_close()
        self.service.close_modal()
        return result

    def cancel_auto_close(self) -> None:
        # Called from inside the auto-close task too; never cancel ourselves
        task = self._auto_close_task
        if task is not None and task is not asyncio.current_task():
            task.cancel()
        self._auto_close_task = None
        self._auto_close_deadline = None

    async def dismiss_from_backdrop(self) -> OperationResult[None]:
        if not self.notification.display_settings.dismissible:
            return OperationResult.skip()
        return await self.dismiss()

    async def handle_action(self, button: ActionButton) -> OperationResult[None]:
        """Record the click, then redirect or dismiss."""
        if self._dismissed:
            return OperationResult.skip()

        data = {"url": button.url} if button.url else None
        result = await self.service.mark_as_clicked(
            self.notification.id, button.action.value, data
        )
        if not result.ok:
            return result

        if button.action == ButtonAction.REDIRECT and button.url:
            logger.info(f"Opening {button.url} from notification {self.notification.id}")
            self._opener(button.url)
        elif button.action == ButtonAction.DISMISS:
            return await self.dismiss()
        return result

    def close(self) -> None:
        """Close without dismissing (e.g. user navigated away)."""
        self.cancel_auto_close()
        self.service.close_modal()
