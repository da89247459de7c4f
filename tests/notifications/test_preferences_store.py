"""Tests for the preferences cache."""

from __future__ import annotations

import pytest

from gigboard.errors import ApiError, PreferencesError
from gigboard.notifications.models import DeliveryMethod, NotificationPreferences
from gigboard.notifications.preferences import PreferencesStore


@pytest.fixture
def store(api, presentation) -> PreferencesStore:
    return PreferencesStore(api, toaster=presentation.toaster)


@pytest.mark.asyncio
async def test_fetch_caches_preferences(store, api):
    api.get_preferences.return_value = {
        "receive_admin_notifications": True,
        "preferred_delivery_method": "chatbot",
        "min_priority_level": "high",
        "unknown_server_field": 1,
    }

    result = await store.fetch()

    assert result.ok
    assert store.preferences.preferred_delivery_method == DeliveryMethod.CHATBOT
    assert store.preferences.sound_enabled is False


@pytest.mark.asyncio
async def test_fetch_failure_keeps_cache(store, api):
    await store.fetch()
    api.get_preferences.side_effect = ApiError(500)

    result = await store.fetch()

    assert result.ok is False
    assert store.preferences is not None


@pytest.mark.asyncio
async def test_fetch_skipped_when_signed_out(api):
    store = PreferencesStore(api, is_authenticated=lambda: False)

    result = await store.fetch()

    assert result.skipped
    api.get_preferences.assert_not_called()


@pytest.mark.asyncio
async def test_update_merges_before_server_confirms(store, api, presentation):
    await store.fetch()
    seen_during_call = {}

    async def put(updates):
        seen_during_call["sound"] = store.preferences.sound_enabled
        return {"success": True}

    api.update_preferences.side_effect = put

    result = await store.update({"sound_enabled": True})

    assert result.ok
    assert seen_during_call["sound"] is True
    api.update_preferences.assert_awaited_once_with({"sound_enabled": True})
    assert presentation.toaster.toasts[-1]["title"] == "Preferences Updated"


@pytest.mark.asyncio
async def test_update_failure_toasts_and_keeps_merged_value(store, api, presentation):
    await store.fetch()
    api.update_preferences.side_effect = ApiError(400, method="PUT")

    result = await store.update({"min_priority_level": "urgent"})

    assert result.ok is False
    assert isinstance(result.error, PreferencesError)
    assert store.preferences.min_priority_level == "urgent"
    toast = presentation.toaster.toasts[-1]
    assert toast["title"] == "Error"
    assert toast["description"] == "Failed to update notification preferences."
    assert toast["variant"] == "destructive"


@pytest.mark.asyncio
async def test_update_failure_rolls_back_when_configured(api, presentation):
    store = PreferencesStore(api, toaster=presentation.toaster, rollback_on_failure=True)
    await store.fetch()
    api.update_preferences.side_effect = ApiError(500, method="PUT")

    await store.update({"sound_enabled": True})

    assert store.preferences.sound_enabled is False


@pytest.mark.asyncio
async def test_update_without_cache_only_sends(store, api):
    result = await store.update({"animation_enabled": False})

    assert result.ok
    assert store.preferences is None
    api.update_preferences.assert_awaited_once_with({"animation_enabled": False})


def test_merged_drops_unknown_keys():
    prefs = NotificationPreferences().merged({"sound_enabled": True, "volume": 11})

    assert prefs.sound_enabled is True
    assert "volume" not in prefs.to_payload()
