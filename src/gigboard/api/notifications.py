"""Admin notification endpoints of the marketplace API.

Returns decoded JSON; model validation happens in the notification service.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from gigboard.api.client import ApiClient
from gigboard.errors import ApiError

BASE_PATH = "/user/notifications"


def _unwrap(payload: Any) -> Any:
    """Accept both bare payloads and ``{"data": ...}`` envelopes."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class NotificationsApi:
    """Wrapper for the ``/user/notifications`` endpoints."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def get_active(self) -> List[Dict[str, Any]]:
        """Fetch the active set.

        Raises:
            ApiError: If a 2xx reply does not carry a list of notifications
        """
        path = f"{BASE_PATH}/active"
        payload = _unwrap(await self.client.get(path))
        if isinstance(payload, dict) and "notifications" in payload:
            payload = payload["notifications"]
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise ApiError(
                200,
                method="GET",
                path=path,
                body=payload,
                message=f"GET {path} returned {type(payload).__name__}, expected a list",
            )
        return payload

    async def get_preferences(self) -> Optional[Dict[str, Any]]:
        return _unwrap(await self.client.get(f"{BASE_PATH}/preferences"))

    async def update_preferences(self, updates: Dict[str, Any]) -> Any:
        return await self.client.put(f"{BASE_PATH}/preferences", updates)

    async def mark_viewed(self, notification_id: int) -> Any:
        return await self.client.post(f"{BASE_PATH}/{notification_id}/view")

    async def mark_dismissed(self, notification_id: int) -> Any:
        return await self.client.post(f"{BASE_PATH}/{notification_id}/dismiss")

    async def mark_clicked(
        self,
        notification_id: int,
        action: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        click_data = {"action": action, **(data or {}), "timestamp": utc_timestamp()}
        return await self.client.post(
            f"{BASE_PATH}/{notification_id}/click",
            {"click_data": click_data},
        )

    async def dismiss_all(self) -> Any:
        return await self.client.post(f"{BASE_PATH}/dismiss-all")
