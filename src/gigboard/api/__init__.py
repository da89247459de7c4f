"""HTTP access to the Gigboard marketplace API."""

from gigboard.api.client import ApiClient
from gigboard.api.notifications import NotificationsApi

__all__ = ["ApiClient", "NotificationsApi"]
