"""
MessageView — the flat view model handed to a render sink.
"""

import time
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field

from rasa_webchat.models.message import (
    ChoiceMessage,
    ChoiceOption,
    CompositeMessage,
    CustomMessage,
    ImageMessage,
    TextMessage,
)


def _now_ms() -> int:
    return int(time.time() * 1000)


class MessageView(BaseModel):
    sender: Literal["user", "bot"]
    text: Optional[str] = None
    image: Optional[str] = None
    options: list[ChoiceOption] = Field(default_factory=list)
    custom: Optional[Any] = None
    timestamp: int = Field(default_factory=_now_ms)

    @classmethod
    def outbound(cls, text: str) -> "MessageView":
        return cls(sender="user", text=text)

    @classmethod
    def inbound(cls, message: Any) -> "MessageView":
        """Flatten any inbound variant into a bot-side view."""
        if isinstance(message, TextMessage):
            return cls(sender="bot", text=message.text)
        if isinstance(message, ImageMessage):
            return cls(sender="bot", image=message.url, text=message.caption)
        if isinstance(message, ChoiceMessage):
            return cls(sender="bot", text=message.prompt, options=list(message.options))
        if isinstance(message, CompositeMessage):
            return cls(
                sender="bot",
                text=message.text,
                image=message.image,
                options=list(message.options or []),
                custom=message.data,
            )
        if isinstance(message, CustomMessage):
            return cls(sender="bot", text=message.preview or None, custom=message.data)
        raise TypeError(f"Unsupported message type: {type(message).__name__}")
