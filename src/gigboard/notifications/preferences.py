"""Session cache for the user's notification delivery preferences."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from gigboard.api.notifications import NotificationsApi
from gigboard.errors import GigboardError, PreferencesError
from gigboard.notifications.models import NotificationPreferences
from gigboard.notifications.presentation import NullToaster, Toaster
from gigboard.notifications.results import OperationResult

logger = logging.getLogger(__name__)


class PreferencesStore:
    """Caches preferences and applies partial updates optimistically.

    Updates are merged into memory before the server confirms them. A failed
    write shows an error toast; the cached value stays diverged unless
    ``rollback_on_failure`` is set, and the next fetch reconciles it.

    Usage:
        store = PreferencesStore(api, toaster)
        await store.fetch()
        await store.update({"sound_enabled": True})
    """

    def __init__(
        self,
        api: NotificationsApi,
        toaster: Optional[Toaster] = None,
        rollback_on_failure: bool = False,
        is_authenticated: Optional[Callable[[], bool]] = None,
    ):
        self.api = api
        self.toaster = toaster or NullToaster()
        self.rollback_on_failure = rollback_on_failure
        self._is_authenticated = is_authenticated or (lambda: True)
        self._preferences: Optional[NotificationPreferences] = None

    @property
    def preferences(self) -> Optional[NotificationPreferences]:
        return self._preferences

    def replace(self, preferences: Optional[NotificationPreferences]) -> None:
        self._preferences = preferences

    async def fetch(self) -> OperationResult[NotificationPreferences]:
        """Load preferences from the server, keeping the cache on failure."""
        if not self._is_authenticated():
            return OperationResult.skip()

        try:
            payload = await self.api.get_preferences()
            preferences = NotificationPreferences.model_validate(payload or {})
        except (GigboardError, ValidationError) as e:
            logger.error(f"Failed to fetch preferences: {e}")
            return OperationResult.failure(e)

        self._preferences = preferences
        logger.debug(f"Preferences loaded: {preferences.to_payload()}")
        return OperationResult.success(preferences)

    async def update(self, updates: Dict[str, Any]) -> OperationResult[NotificationPreferences]:
        """Merge ``updates`` locally, then send them to the server.

        Args:
            updates: Partial preferences; only these keys are sent

        Returns:
            OperationResult carrying the cached preferences after the call
        """
        previous = self._preferences
        if previous is not None:
            self._preferences = previous.merged(updates)

        try:
            await self.api.update_preferences(updates)
        except GigboardError as e:
            logger.error(f"Failed to update preferences: {e}")
            if self.rollback_on_failure:
                self._preferences = previous
                logger.info("Rolled back cached preferences after failed update")
            self.toaster.toast(
                "Error",
                "Failed to update notification preferences.",
                variant="destructive",
            )
            return OperationResult.failure(PreferencesError(str(e)))

        self.toaster.toast(
            "Preferences Updated",
            "Your notification preferences have been saved.",
        )
        logger.info(f"Preferences updated: {sorted(updates)}")
        return OperationResult.success(self._preferences)
