"""Presentation collaborators for admin notifications.

The service never renders anything itself. It talks to four surfaces:
- Toaster: transient toasts
- SoundPlayer: the arrival sound
- ModalPresenter: the blocking modal dialog
- ChatbotPresenter: the side-channel chatbot bubble

Console implementations render with ``rich`` for the CLI; null
implementations keep headless sessions quiet.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from gigboard.notifications.models import AdminNotification, Priority, Theme

logger = logging.getLogger(__name__)

THEME_STYLES = {
    Theme.INFO: "blue",
    Theme.SUCCESS: "green",
    Theme.WARNING: "yellow",
    Theme.ERROR: "red",
}

PRIORITY_STYLES = {
    Priority.LOW: "blue",
    Priority.NORMAL: "green",
    Priority.HIGH: "yellow",
    Priority.URGENT: "bold red",
}


class Toaster(ABC):
    """Shows transient toasts."""

    @abstractmethod
    def toast(
        self,
        title: str,
        description: str = "",
        duration_ms: Optional[int] = None,
        variant: str = "default",
    ) -> None:
        """Show a toast.

        Args:
            title: Toast heading
            description: Body text
            duration_ms: Lifetime, or None for the surface default
            variant: ``default`` or ``destructive``
        """


class SoundPlayer(ABC):
    """Plays the arrival sound. Callers treat failures as best effort."""

    @abstractmethod
    def play(self) -> None:
        pass


class ModalPresenter(ABC):
    """Renders the modal dialog."""

    @abstractmethod
    def open(self, notification: AdminNotification) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass


class ChatbotPresenter(ABC):
    """Renders the chatbot bubble."""

    @abstractmethod
    def set_visible(self, visible: bool) -> None:
        pass


class NullToaster(Toaster):
    def toast(self, title, description="", duration_ms=None, variant="default") -> None:
        logger.debug(f"Toast suppressed (headless): {title}")


class NullSoundPlayer(SoundPlayer):
    def play(self) -> None:
        pass


class NullModalPresenter(ModalPresenter):
    def open(self, notification: AdminNotification) -> None:
        pass

    def close(self) -> None:
        pass


class NullChatbotPresenter(ChatbotPresenter):
    def set_visible(self, visible: bool) -> None:
        pass


class ConsoleToaster(Toaster):
    """Prints toasts as single styled lines."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def toast(self, title, description="", duration_ms=None, variant="default") -> None:
        style = "bold red" if variant == "destructive" else "bold cyan"
        line = f"[{style}]{escape(title)}[/{style}]"
        if description:
            line += f" {escape(description)}"
        self.console.print(line)


class TerminalBellPlayer(SoundPlayer):
    """Rings the terminal bell."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def play(self) -> None:
        self.console.bell()


class ConsoleModalPresenter(ModalPresenter):
    """Renders the modal as a rich panel."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def open(self, notification: AdminNotification) -> None:
        settings = notification.display_settings
        body = escape(notification.message)
        if settings.action_buttons:
            buttons = "  ".join(escape(f"[{b.text}]") for b in settings.action_buttons)
            body = f"{body}\n\n{buttons}"
        if settings.auto_close_seconds:
            body = f"{body}\n\nAuto-close in {settings.auto_close_seconds}s"

        priority_style = PRIORITY_STYLES.get(notification.priority, "white")
        self.console.print(
            Panel(
                body,
                title=(
                    f"{escape(notification.title)} "
                    f"[{priority_style}]{notification.priority.value}[/{priority_style}]"
                ),
                border_style=THEME_STYLES.get(settings.theme, "blue"),
            )
        )

    def close(self) -> None:
        pass


class ConsoleChatbotPresenter(ChatbotPresenter):
    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def set_visible(self, visible: bool) -> None:
        if visible:
            self.console.print("[magenta]New messages in the notification assistant[/magenta]")


@dataclass
class Presentation:
    """Bundle of the four surfaces handed to the service."""

    toaster: Toaster = field(default_factory=NullToaster)
    sound: SoundPlayer = field(default_factory=NullSoundPlayer)
    modal: ModalPresenter = field(default_factory=NullModalPresenter)
    chatbot: ChatbotPresenter = field(default_factory=NullChatbotPresenter)

    @classmethod
    def console(cls, console: Optional[Console] = None) -> "Presentation":
        console = console or Console()
        return cls(
            toaster=ConsoleToaster(console),
            sound=TerminalBellPlayer(console),
            modal=ConsoleModalPresenter(console),
            chatbot=ConsoleChatbotPresenter(console),
        )
