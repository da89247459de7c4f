"""Admin notification CLI commands.

Provides commands for:
- Listing the active notification set
- Viewing and updating delivery preferences
- Viewing, dismissing and clicking notifications
- Dry-running the delivery gate and replaying socket events
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer import Argument, Option, Typer

from gigboard.api.client import ApiClient
from gigboard.api.notifications import NotificationsApi
from gigboard.configuration.settings import (
    DEFAULT_CONFIG_PATH,
    bootstrap_settings,
    resolve_auth_token,
)
from gigboard.errors import AuthenticationRequiredError, format_error_for_cli
from gigboard.notifications.models import (
    AdminNotification,
    DeliveryMethod,
    Priority,
)
from gigboard.notifications.policy import UiState, evaluate, parse_clock
from gigboard.notifications.presentation import Presentation
from gigboard.notifications.realtime import RealtimeDispatcher
from gigboard.notifications.results import OperationResult
from gigboard.notifications.service import AdminNotificationService

logger = logging.getLogger(__name__)

console = Console()
notifications_app = Typer(help="Admin notification commands")

T = TypeVar("T")


def _create_service(config_path: Path) -> AdminNotificationService:
    """Build a service for one CLI invocation."""
    settings = bootstrap_settings(path=config_path)
    client = ApiClient.from_settings(settings.api, token=resolve_auth_token())
    return AdminNotificationService(
        NotificationsApi(client),
        presentation=Presentation.console(Console(stderr=True)),
        settings=settings.notifications,
    )


def _run(
    config_path: Path,
    action: Callable[[AdminNotificationService], Awaitable[T]],
) -> T:
    service = _create_service(config_path)

    async def runner() -> T:
        try:
            return await action(service)
        finally:
            await service.stop()
            await service.api.client.aclose()

    return asyncio.run(runner())


def _require_session(service: AdminNotificationService) -> None:
    if not service.api.client.is_authenticated:
        raise AuthenticationRequiredError("No API token configured")


def _print_result(
    result: OperationResult,
    output_json: bool,
    success_message: str,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    if output_json:
        payload = result.to_dict()
        payload.update(extra or {})
        print(json.dumps(payload))
    elif result.ok:
        console.print(success_message)
    else:
        console.print(f"[red]{escape(format_error_for_cli(result.error))}[/red]")


def _print_error(e: Exception, output_json: bool, **fields: Any) -> None:
    logger.error(f"Notification command failed: {e}")
    if output_json:
        print(json.dumps({"success": False, "error": str(e), **fields}))
    else:
        console.print(f"[red]{escape(format_error_for_cli(e))}[/red]")


def _notification_row(n: AdminNotification) -> List[str]:
    created = n.created_at.isoformat()[:16] if n.created_at else ""
    return [
        "" if n.viewed_at else "●",
        str(n.id),
        n.priority.value,
        n.notification_type.value,
        escape(n.title[:50]),
        created,
    ]


# ============================================================================
# Active set
# ============================================================================


@notifications_app.command("list")
def list_notifications(
    unread_only: bool = Option(False, "--unread", "-u", help="Only show unread"),
    config_path: Path = Option(DEFAULT_CONFIG_PATH, "--config", help="Path to config"),
    output_json: bool = Option(False, "--json", help="Output as JSON"),
) -> None:
    """List active admin notifications.

    Examples:
        gigboard notifications list
        gigboard notifications list --unread --json
    """
    try:
        async def action(service: AdminNotificationService):
            _require_session(service)
            result = await service.fetch_notifications()
            return service, result

        service, result = _run(config_path, action)
        if not result.ok:
            raise result.error

        notifications = service.notifications
        if unread_only:
            notifications = [n for n in notifications if n.is_unread]

        if output_json:
            print(json.dumps({
                "success": True,
                "notifications": [n.to_payload() for n in notifications],
                "totalCount": len(notifications),
                "unreadCount": service.unread_count,
            }))
            return

        table = Table(title=f"Active Notifications ({service.unread_count} unread)")
        for column in ("", "ID", "Priority", "Type", "Title", "Created"):
            table.add_column(column)
        for n in notifications:
            table.add_row(*_notification_row(n))
        console.print(table)

    except Exception as e:
        _print_error(e, output_json, notifications=[], totalCount=0, unreadCount=0)


@notifications_app.command("view")
def view_notification(
    notification_id: int = Argument(..., help="Notification ID"),
    config_path: Path = Option(DEFAULT_CONFIG_PATH, "--config", help="Path to config"),
    output_json: bool = Option(False, "--json", help="Output as JSON"),
) -> None:
    """Mark a notification as viewed."""
    try:
        async def action(service: AdminNotificationService):
            _require_session(service)
            return await service.mark_as_viewed(notification_id)

        result = _run(config_path, action)
        _print_result(
            result,
            output_json,
            f"Marked notification {notification_id} as viewed",
            {"notificationId": notification_id},
        )
    except Exception as e:
        _print_error(e, output_json)


@notifications_app.command("dismiss")
def dismiss_notification(
    notification_id: int = Argument(..., help="Notification ID"),
    config_path: Path = Option(DEFAULT_CONFIG_PATH, "--config", help="Path to config"),
    output_json: bool = Option(False, "--json", help="Output as JSON"),
) -> None:
    """Dismiss a notification."""
    try:
        async def action(service: AdminNotificationService):
            _require_session(service)
            return await service.mark_as_dismissed(notification_id)

        result = _run(config_path, action)
        _print_result(
            result,
            output_json,
            f"Dismissed notification {notification_id}",
            {"notificationId": notification_id},
        )
    except Exception as e:
        _print_error(e, output_json)


@notifications_app.command("click")
def click_notification(
    notification_id: int = Argument(..., help="Notification ID"),
    action_name: str = Option(..., "--action", "-a", help="Action tag, e.g. redirect"),
    data: Optional[List[str]] = Option(None, "--data", "-d", help="Extra click data as key=value"),
    config_path: Path = Option(DEFAULT_CONFIG_PATH, "--config", help="Path to config"),
    output_json: bool = Option(False, "--json", help="Output as JSON"),
) -> None:
    """Record a click-through on a notification.

    Examples:
        gigboard notifications click 12 --action redirect -d url=https://example.com
    """
    try:
        click_data: Dict[str, str] = {}
        for item in data or []:
            key, sep, value = item.partition("=")
            if not sep or not key:
                raise ValueError(f"Expected key=value, got '{item}'")
            click_data[key] = value

        async def action(service: AdminNotificationService):
            _require_session(service)
            return await service.mark_as_clicked(notification_id, action_name, click_data)

        result = _run(config_path, action)
        _print_result(
            result,
            output_json,
            f"Recorded '{action_name}' on notification {notification_id}",
            {"notificationId": notification_id, "action": action_name},
        )
    except Exception as e:
        _print_error(e, output_json)


@notifications_app.command("dismiss-all")
def dismiss_all(
    config_path: Path = Option(DEFAULT_CONFIG_PATH, "--config", help="Path to config"),
    output_json: bool = Option(False, "--json", help="Output as JSON"),
) -> None:
    """Dismiss every active notification."""
    try:
        async def action(service: AdminNotificationService):
            _require_session(service)
            return await service.dismiss_all()

        result = _run(config_path, action)
        if output_json:
            print(json.dumps(result.to_dict()))
    except Exception as e:
        _print_error(e, output_json)


# ============================================================================
# Preferences
# ============================================================================


@notifications_app.command("preferences")
def get_preferences(
    config_path: Path = Option(DEFAULT_CONFIG_PATH, "--config", help="Path to config"),
    output_json: bool = Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show notification delivery preferences."""
    try:
        async def action(service: AdminNotificationService):
            _require_session(service)
            return await service.fetch_preferences()

        result = _run(config_path, action)
        if not result.ok:
            raise result.error

        prefs = result.data
        if output_json:
            print(json.dumps({"success": True, "preferences": prefs.to_payload()}))
            return

        console.print("\nNotification Preferences")
        console.print("-" * 40)
        console.print(f"Receive admin notifications: {prefs.receive_admin_notifications}")
        console.print(f"Delivery method: {prefs.preferred_delivery_method.value}")
        console.print(f"Minimum priority: {prefs.min_priority_level.value}")
        console.print(f"Auto-dismiss: {prefs.auto_dismiss_timeout}ms")
        console.print(f"Sound: {'on' if prefs.sound_enabled else 'off'}")
        console.print(f"Animation: {'on' if prefs.animation_enabled else 'off'}")
        quiet = "on" if prefs.respect_quiet_hours else "off"
        console.print(
            f"Quiet hours: {quiet} ({prefs.quiet_hours_start} - {prefs.quiet_hours_end})"
        )

    except Exception as e:
        _print_error(e, output_json)


@notifications_app.command("set-preferences")
def set_preferences(
    receive: Optional[bool] = Option(None, "--receive/--no-receive", help="Receive admin notifications"),
    method: Optional[str] = Option(None, "--method", help="Delivery method: modal, chatbot, both"),
    min_priority: Optional[str] = Option(None, "--min-priority", help="low, normal, high, urgent"),
    sound: Optional[bool] = Option(None, "--sound/--no-sound", help="Play a sound on arrival"),
    animation: Optional[bool] = Option(None, "--animation/--no-animation", help="Animate surfaces"),
    quiet_hours: Optional[bool] = Option(None, "--quiet-hours/--no-quiet-hours", help="Respect quiet hours"),
    quiet_start: Optional[str] = Option(None, "--quiet-start", help="Quiet hours start (HH:MM)"),
    quiet_end: Optional[str] = Option(None, "--quiet-end", help="Quiet hours end (HH:MM)"),
    auto_dismiss: Optional[int] = Option(None, "--auto-dismiss-ms", help="Auto-dismiss timeout in ms"),
    config_path: Path = Option(DEFAULT_CONFIG_PATH, "--config", help="Path to config"),
    output_json: bool = Option(False, "--json", help="Output as JSON"),
) -> None:
    """Update notification delivery preferences.

    Only the given options are sent.

    Examples:
        gigboard notifications set-preferences --min-priority high
        gigboard notifications set-preferences --quiet-hours --quiet-start 22:00 --quiet-end 06:00
    """
    try:
        if method is not None and method not in {m.value for m in DeliveryMethod}:
            valid = ", ".join(m.value for m in DeliveryMethod)
            raise ValueError(f"Invalid method '{method}'. Valid: {valid}")
        if min_priority is not None and min_priority not in {p.value for p in Priority}:
            valid = ", ".join(p.value for p in Priority)
            raise ValueError(f"Invalid priority '{min_priority}'. Valid: {valid}")

        candidates = {
            "receive_admin_notifications": receive,
            "preferred_delivery_method": method,
            "min_priority_level": min_priority,
            "sound_enabled": sound,
            "animation_enabled": animation,
            "respect_quiet_hours": quiet_hours,
            "quiet_hours_start": quiet_start,
            "quiet_hours_end": quiet_end,
            "auto_dismiss_timeout": auto_dismiss,
        }
        updates = {k: v for k, v in candidates.items() if v is not None}
        if not updates:
            raise ValueError("No preference changes given")

        async def action(service: AdminNotificationService):
            _require_session(service)
            await service.fetch_preferences()
            return await service.update_preferences(updates)

        result = _run(config_path, action)
        if output_json:
            payload = result.to_dict()
            payload["updated"] = sorted(updates)
            print(json.dumps(payload))
    except Exception as e:
        _print_error(e, output_json)


# ============================================================================
# Gate tools
# ============================================================================


@notifications_app.command("check")
def check_notification(
    notification_file: Path = Argument(..., help="Notification JSON file"),
    at: Optional[str] = Option(None, "--at", help="Local time to evaluate at (HH:MM)"),
    chatbot_visible: bool = Option(False, "--chatbot-visible", help="Chatbot bubble is open"),
    modal_open: bool = Option(False, "--modal-open", help="A modal is open"),
    offline: bool = Option(False, "--offline", help="Use default preferences"),
    config_path: Path = Option(DEFAULT_CONFIG_PATH, "--config", help="Path to config"),
    output_json: bool = Option(False, "--json", help="Output as JSON"),
) -> None:
    """Evaluate the delivery gate for a notification without side effects.

    Examples:
        gigboard notifications check urgent.json --at 23:30
        gigboard notifications check notice.json --offline --chatbot-visible --json
    """
    try:
        notification = AdminNotification.model_validate_json(notification_file.read_text())

        now = datetime.now()
        if at is not None:
            minutes = parse_clock(at)
            now = now.replace(hour=minutes // 60, minute=minutes % 60)

        preferences = None
        if not offline:
            async def action(service: AdminNotificationService):
                _require_session(service)
                return await service.fetch_preferences()

            result = _run(config_path, action)
            if not result.ok:
                raise result.error
            preferences = result.data

        decision = evaluate(
            notification,
            preferences,
            now,
            UiState(is_chatbot_visible=chatbot_visible, is_modal_open=modal_open),
        )

        data = {
            "success": True,
            "notificationId": notification.id,
            "admitted": decision.admitted,
            "reason": decision.reason.value if decision.reason else None,
            "modal": decision.show_modal,
            "chatbot": decision.show_chatbot,
            "toast": decision.show_toast,
            "sound": decision.play_sound,
        }
        if output_json:
            print(json.dumps(data))
        elif decision.admitted:
            channels = [
                name for name in ("modal", "chatbot", "toast", "sound") if data[name]
            ]
            console.print(
                f"Notification {notification.id} admitted: "
                f"{', '.join(channels) if channels else 'active list only'}"
            )
        else:
            console.print(
                f"Notification {notification.id} suppressed ({decision.reason.value})"
            )

    except Exception as e:
        _print_error(e, output_json)


@notifications_app.command("replay")
def replay_events(
    events_file: Path = Argument(..., help="JSON-lines file of socket events"),
    config_path: Path = Option(DEFAULT_CONFIG_PATH, "--config", help="Path to config"),
    output_json: bool = Option(False, "--json", help="Output as JSON"),
) -> None:
    """Replay recorded admin_notification socket events through the service.

    Lines are dispatched in order against freshly fetched state.
    """
    try:
        events = [
            json.loads(line)
            for line in events_file.read_text().splitlines()
            if line.strip()
        ]

        async def action(service: AdminNotificationService):
            _require_session(service)
            await asyncio.gather(service.fetch_notifications(), service.fetch_preferences())
            dispatcher = RealtimeDispatcher(service)
            decisions = [dispatcher.dispatch(event) for event in events]
            # Let background view calls settle
            await asyncio.sleep(0)
            return service, decisions

        service, decisions = _run(config_path, action)
        admitted = sum(1 for d in decisions if d is not None and d.admitted)
        suppressed = sum(1 for d in decisions if d is not None and not d.admitted)

        if output_json:
            print(json.dumps({
                "success": True,
                "events": len(events),
                "admitted": admitted,
                "suppressed": suppressed,
                "status": service.get_status(),
            }))
        else:
            console.print(
                f"Replayed {len(events)} events: {admitted} admitted, {suppressed} suppressed"
            )

    except Exception as e:
        _print_error(e, output_json)


@notifications_app.command("status")
def get_status(
    config_path: Path = Option(DEFAULT_CONFIG_PATH, "--config", help="Path to config"),
    output_json: bool = Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show notification session status."""
    try:
        async def action(service: AdminNotificationService):
            _require_session(service)
            await asyncio.gather(service.fetch_notifications(), service.fetch_preferences())
            return service.get_status()

        status = _run(config_path, action)
        status["success"] = True

        if output_json:
            print(json.dumps(status))
        else:
            console.print("\nNotification Status")
            console.print("-" * 40)
            console.print(f"Active notifications: {status['active_notifications']}")
            console.print(f"Unread: {status['unread_notifications']}")
            console.print(f"Chatbot notifications: {status['chatbot_notifications']}")
            console.print(f"Preferences loaded: {status['preferences_loaded']}")
            console.print(f"Refresh interval: {status['refresh_interval_seconds']}s")

    except Exception as e:
        _print_error(e, output_json)
