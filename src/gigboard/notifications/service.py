"""Admin notification service for one signed-in session.

Key features:
- Active-set cache with a periodic authoritative refresh
- Notification gate on real-time arrivals (see ``policy``)
- Modal and chatbot state with an idempotent modal display gate
- Lifecycle calls (view, dismiss, click, dismiss-all) that never raise

The service is constructed once per session and handed to whatever needs
it; ``stop()`` cancels the refresh loop and every in-flight background call.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Coroutine, Dict, List, Optional, Set

from pydantic import ValidationError

from gigboard.api.notifications import NotificationsApi
from gigboard.configuration.settings import NotificationSettings
from gigboard.errors import ApiError, GigboardError, NotificationNotFoundError
from gigboard.notifications.models import AdminNotification, NotificationPreferences
from gigboard.notifications.policy import (
    DeliveryDecision,
    UiState,
    evaluate,
    toast_description,
)
from gigboard.notifications.preferences import PreferencesStore
from gigboard.notifications.presentation import Presentation
from gigboard.notifications.results import OperationResult

logger = logging.getLogger(__name__)


class AdminNotificationService:
    """Session-scoped owner of admin notification state.

    Usage:
        service = AdminNotificationService(NotificationsApi(client))
        await service.start()
        service.handle_new_notification(notification)
        await service.stop()
    """

    def __init__(
        self,
        api: NotificationsApi,
        presentation: Optional[Presentation] = None,
        settings: Optional[NotificationSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
        is_authenticated: Optional[Callable[[], bool]] = None,
    ):
        """Initialize notification service.

        Args:
            api: Notification endpoints
            presentation: Toast, sound, modal and chatbot surfaces
            settings: Refresh interval, modal close delay, toast duration
            clock: Local wall-clock source for quiet hours
            is_authenticated: Session check; defaults to the API client's token
        """
        self.api = api
        self.presentation = presentation or Presentation()
        self.settings = settings or NotificationSettings()
        self._clock = clock or datetime.now
        self._is_authenticated = is_authenticated or (lambda: api.client.is_authenticated)

        self.preferences_store = PreferencesStore(
            api,
            toaster=self.presentation.toaster,
            rollback_on_failure=self.settings.rollback_preferences_on_failure,
            is_authenticated=self._is_authenticated,
        )

        self._notifications: List[AdminNotification] = []
        self.is_loading = False

        self.current_modal_notification: Optional[AdminNotification] = None
        self.is_modal_open = False
        self.is_chatbot_visible = False

        self._modal_shown_ids: Set[int] = set()
        self._modal_generation = 0
        self._modal_clear_handle: Optional[asyncio.TimerHandle] = None

        self._tasks: Set[asyncio.Task] = set()
        self._refresh_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def notifications(self) -> List[AdminNotification]:
        """Active set, newest first."""
        return list(self._notifications)

    @property
    def preferences(self) -> Optional[NotificationPreferences]:
        return self.preferences_store.preferences

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._notifications if n.is_unread)

    @property
    def chatbot_notifications(self) -> List[AdminNotification]:
        return [n for n in self._notifications if n.targets_chatbot]

    def get_notification(self, notification_id: int) -> Optional[AdminNotification]:
        for n in self._notifications:
            if n.id == notification_id:
                return n
        return None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Load notifications and preferences, then start the periodic refresh."""
        if not self._is_authenticated():
            logger.info("Notification service not started: no authenticated session")
            return

        await asyncio.gather(self.fetch_notifications(), self.fetch_preferences())

        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.create_task(self._refresh_loop())
            self._refresh_task.add_done_callback(self._task_done)
        logger.info(
            f"Notification service started "
            f"(active={len(self._notifications)}, "
            f"refresh={self.settings.refresh_interval_seconds}s)"
        )

    async def stop(self) -> None:
        """Cancel the refresh loop, pending timers and in-flight calls."""
        pending: List[asyncio.Task] = list(self._tasks)
        if self._refresh_task is not None:
            pending.append(self._refresh_task)
            self._refresh_task = None
        if self._modal_clear_handle is not None:
            self._modal_clear_handle.cancel()
            self._modal_clear_handle = None

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._tasks.clear()
        logger.info(f"Notification service stopped ({len(pending)} task(s) cancelled)")

    async def __aenter__(self) -> "AdminNotificationService":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    async def _refresh_loop(self) -> None:
        interval = self.settings.refresh_interval_seconds
        while True:
            await asyncio.sleep(interval)
            try:
                await self.fetch_notifications()
            except Exception as e:  # noqa: BLE001 - keep refreshing
                logger.error(f"Periodic notification refresh failed: {e}")

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> Optional[asyncio.Task]:
        """Run a background call tied to the service lifetime."""
        try:
            task = asyncio.get_running_loop().create_task(coro)
        except RuntimeError:
            coro.close()
            logger.warning("No running event loop; background notification call dropped")
            return None
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc:
            logger.error(f"Background notification task failed: {exc}")

    # ------------------------------------------------------------------
    # Remote operations
    # ------------------------------------------------------------------

    async def fetch_notifications(self) -> OperationResult[List[AdminNotification]]:
        """Replace the active set with the server's (last write wins)."""
        if not self._is_authenticated():
            return OperationResult.skip()

        self.is_loading = True
        try:
            payload = await self.api.get_active()
        except GigboardError as e:
            logger.error(f"Failed to fetch notifications: {e}")
            return OperationResult.failure(e)
        finally:
            self.is_loading = False

        notifications = []
        for item in payload:
            try:
                notifications.append(AdminNotification.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Dropping malformed notification from server: {e}")

        self._notifications = notifications
        self._prune_modal_shown_ids()
        logger.debug(f"Fetched {len(notifications)} active notification(s)")
        return OperationResult.success(self.notifications)

    async def fetch_preferences(self) -> OperationResult[NotificationPreferences]:
        return await self.preferences_store.fetch()

    async def update_preferences(
        self, updates: Dict[str, Any]
    ) -> OperationResult[NotificationPreferences]:
        return await self.preferences_store.update(updates)

    async def mark_as_viewed(self, notification_id: int) -> OperationResult[None]:
        try:
            await self.api.mark_viewed(notification_id)
        except GigboardError as e:
            logger.error(f"Failed to mark notification {notification_id} as viewed: {e}")
            return OperationResult.failure(_lifecycle_error(notification_id, e))

        viewed_at = datetime.now(timezone.utc)
        self._notifications = [
            n.model_copy(update={"viewed_at": viewed_at}) if n.id == notification_id else n
            for n in self._notifications
        ]
        current = self.current_modal_notification
        if current is not None and current.id == notification_id:
            self.current_modal_notification = current.model_copy(
                update={"viewed_at": viewed_at}
            )
        return OperationResult.success()

    async def mark_as_dismissed(self, notification_id: int) -> OperationResult[None]:
        try:
            await self.api.mark_dismissed(notification_id)
        except GigboardError as e:
            logger.error(f"Failed to dismiss notification {notification_id}: {e}")
            return OperationResult.failure(_lifecycle_error(notification_id, e))

        self._notifications = [n for n in self._notifications if n.id != notification_id]
        logger.debug(f"Notification {notification_id} dismissed")
        return OperationResult.success()

    async def mark_as_clicked(
        self,
        notification_id: int,
        action: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> OperationResult[None]:
        """Record a click-through; lifecycle state is unchanged."""
        try:
            await self.api.mark_clicked(notification_id, action, data)
        except GigboardError as e:
            logger.error(f"Failed to mark notification {notification_id} as clicked: {e}")
            return OperationResult.failure(_lifecycle_error(notification_id, e))
        return OperationResult.success()

    async def dismiss_all(self) -> OperationResult[None]:
        toaster = self.presentation.toaster
        try:
            await self.api.dismiss_all()
        except GigboardError as e:
            logger.error(f"Failed to dismiss all notifications: {e}")
            toaster.toast("Error", "Failed to dismiss notifications.", variant="destructive")
            return OperationResult.failure(e)

        cleared = len(self._notifications)
        self._notifications = []
        self.hide_chatbot()
        if self.is_modal_open:
            self.is_modal_open = False
            self.current_modal_notification = None
            self.presentation.modal.close()
        toaster.toast(
            "All Notifications Dismissed",
            "All notifications have been cleared.",
        )
        logger.info(f"Dismissed all notifications ({cleared} cleared)")
        return OperationResult.success()

    # ------------------------------------------------------------------
    # Modal and chatbot controls
    # ------------------------------------------------------------------

    def show_modal_notification(self, notification: AdminNotification) -> None:
        """Open the modal; marking it viewed runs in the background."""
        self._modal_generation += 1
        if self._modal_clear_handle is not None:
            self._modal_clear_handle.cancel()
            self._modal_clear_handle = None

        self._modal_shown_ids.add(notification.id)
        self.current_modal_notification = notification
        self.is_modal_open = True
        self.presentation.modal.open(notification)
        self._spawn(self.mark_as_viewed(notification.id))

    def close_modal(self) -> None:
        """Close now; clear the displayed notification after the close animation."""
        self.is_modal_open = False
        self.presentation.modal.close()

        generation = self._modal_generation
        delay = self.settings.modal_close_delay_ms / 1000
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._clear_modal_notification(generation)
            return
        if self._modal_clear_handle is not None:
            self._modal_clear_handle.cancel()
        self._modal_clear_handle = loop.call_later(
            delay, self._clear_modal_notification, generation
        )

    def _clear_modal_notification(self, generation: int) -> None:
        self._modal_clear_handle = None
        # A modal opened after close_modal() keeps its notification
        if generation == self._modal_generation and not self.is_modal_open:
            self.current_modal_notification = None

    def _prune_modal_shown_ids(self) -> None:
        # Only ids still active or on screen stay gated
        keep = {n.id for n in self._notifications}
        if self.current_modal_notification is not None:
            keep.add(self.current_modal_notification.id)
        self._modal_shown_ids &= keep

    def toggle_chatbot(self) -> None:
        self._set_chatbot_visible(not self.is_chatbot_visible)

    def show_chatbot(self) -> None:
        self._set_chatbot_visible(True)

    def hide_chatbot(self) -> None:
        self._set_chatbot_visible(False)

    def _set_chatbot_visible(self, visible: bool) -> None:
        self.is_chatbot_visible = visible
        self.presentation.chatbot.set_visible(visible)

    # ------------------------------------------------------------------
    # Real-time handlers
    # ------------------------------------------------------------------

    def handle_new_notification(self, notification: AdminNotification) -> DeliveryDecision:
        """Gate one pushed notification and apply the decision synchronously."""
        ui_state = UiState(
            is_chatbot_visible=self.is_chatbot_visible,
            is_modal_open=self.is_modal_open,
        )
        decision = evaluate(notification, self.preferences, self._clock(), ui_state)
        if not decision.admitted:
            logger.info(
                f"Notification {notification.id} suppressed ({decision.reason.value})"
            )
            return decision

        self._notifications = [notification] + [
            n for n in self._notifications if n.id != notification.id
        ]

        if decision.play_sound:
            self._play_sound()

        if decision.show_modal:
            if notification.id in self._modal_shown_ids:
                logger.debug(f"Notification {notification.id} already shown as modal")
            else:
                self.show_modal_notification(notification)

        if decision.show_chatbot:
            self.show_chatbot()

        if decision.show_toast:
            self.presentation.toaster.toast(
                notification.title,
                toast_description(notification.message),
                duration_ms=self.settings.toast_duration_ms,
            )

        logger.info(f"Notification {notification.id} admitted ({notification.priority.value})")
        return decision

    def handle_notification_update(
        self, notification_id: int, updates: Dict[str, Any]
    ) -> bool:
        """Merge pushed field updates into an active notification.

        Returns:
            True if a matching notification was updated
        """
        for index, existing in enumerate(self._notifications):
            if existing.id != notification_id:
                continue
            try:
                updated = AdminNotification.model_validate(
                    {**existing.to_payload(), **updates, "id": notification_id}
                )
            except ValidationError as e:
                logger.warning(f"Ignoring invalid update for notification {notification_id}: {e}")
                return False
            self._notifications[index] = updated
            return True
        return False

    def _play_sound(self) -> None:
        try:
            self.presentation.sound.play()
        except Exception as e:  # noqa: BLE001 - sound is best effort
            logger.debug(f"Notification sound failed: {e}")

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> Dict[str, Any]:
        prefs = self.preferences
        return {
            "active_notifications": len(self._notifications),
            "unread_notifications": self.unread_count,
            "chatbot_notifications": len(self.chatbot_notifications),
            "is_modal_open": self.is_modal_open,
            "current_modal_notification": (
                self.current_modal_notification.id
                if self.current_modal_notification
                else None
            ),
            "is_chatbot_visible": self.is_chatbot_visible,
            "is_loading": self.is_loading,
            "preferences_loaded": prefs is not None,
            "refresh_interval_seconds": self.settings.refresh_interval_seconds,
        }


def _lifecycle_error(notification_id: int, error: GigboardError) -> GigboardError:
    """Report a 404 on a lifecycle call as a missing notification."""
    if isinstance(error, ApiError) and error.status_code == 404:
        return NotificationNotFoundError(notification_id)
    return error
