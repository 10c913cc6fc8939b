"""
Render sink — what a presentation layer implements to display a chat.

ChatEngine.attach(sink) translates engine events into these calls.
"""

from typing import Protocol

from rasa_webchat.models.events import TransportStatus
from rasa_webchat.models.view import MessageView


class RenderSink(Protocol):
    def render_message(self, view: MessageView) -> None: ...

    def show_typing(self) -> None: ...

    def hide_typing(self) -> None: ...

    def render_status(self, status: TransportStatus) -> None: ...

    def set_visible(self, visible: bool) -> None: ...
