"""Console render sink for the CLI."""

import json
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.status import Status

from rasa_webchat.models.events import TransportStatus
from rasa_webchat.models.message import ChoiceOption
from rasa_webchat.models.view import MessageView

STATUS_BANNERS = {
    TransportStatus.CONNECTING: "[dim]Connecting...[/dim]",
    TransportStatus.CONNECTED: "[dim]Connected.[/dim]",
    TransportStatus.DISCONNECTED: "[yellow]Disconnected. Reconnecting...[/yellow]",
}


class ConsoleSink:
    def __init__(self, console: Console, bot_name: str = "Bot", show_user: bool = False):
        self._console = console
        self._bot_name = bot_name
        self._show_user = show_user
        self._typing: Optional[Status] = None
        self.last_options: list[ChoiceOption] = []

    def render_message(self, view: MessageView) -> None:
        if view.sender == "user":
            if self._show_user:
                self._console.print(f"[cyan]You:[/cyan] {escape(view.text or '')}")
            return
        if view.image:
            self._console.print(f"[green]{self._bot_name}:[/green] [blue]<image {view.image}>[/blue]")
        if view.text:
            self._console.print(f"[green]{self._bot_name}:[/green] {escape(view.text)}", highlight=False)
        if view.custom is not None and view.text != _dumps(view.custom):
            self._console.print_json(_dumps(view.custom))
        if view.options:
            self.last_options = list(view.options)
            for i, option in enumerate(view.options, 1):
                self._console.print(f"  [magenta]{i}.[/magenta] {escape(option.label)}")
            self._console.print("[dim]  /choose N to pick[/dim]")

    def show_typing(self) -> None:
        if self._typing is not None:
            return
        self._typing = self._console.status(f"{self._bot_name} is typing...")
        self._typing.start()

    def hide_typing(self) -> None:
        if self._typing is not None:
            self._typing.stop()
            self._typing = None

    def render_status(self, status: TransportStatus) -> None:
        banner = STATUS_BANNERS.get(status)
        if banner:
            self._console.print(banner)

    def set_visible(self, visible: bool) -> None:
        """The terminal is always visible."""


def _dumps(data) -> str:
    return json.dumps(data, ensure_ascii=False, default=str)
