"""
Message normalizer — maps backend message objects onto renderable variants.

Rasa bots answer with loosely shaped dicts:
  {"text": "hi"}
  {"image": "https://..."}
  {"text": "pick", "buttons": [{"title": ..., "payload": ...}]}
  {"custom": {...}}
  {"attachment": {"payload": {"src": ...}}}  (socket channel)
A top-level `image` is the REST image response and becomes an ImageMessage
(with `text` as its caption); an `attachment` image comes with the socket
channel's richer shapes and always stays a CompositeMessage.

normalize() never raises; anything it does not recognize comes back as a
CustomMessage carrying the original payload.
"""

import json
from typing import Any, Optional, Union

from rasa_webchat.models.message import (
    ChoiceMessage,
    ChoiceOption,
    CompositeMessage,
    CustomMessage,
    ImageMessage,
    TextMessage,
)

NormalizedMessage = Union[TextMessage, ImageMessage, ChoiceMessage, CustomMessage, CompositeMessage]

DEFAULT_CHOICE_PROMPT = "Choose:"


def _dig(raw: Any, *path: str) -> Any:
    """Follow a key path through nested dicts, None on any miss."""
    node = raw
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _first(raw: Any, *paths: tuple[str, ...]) -> Any:
    for path in paths:
        value = _dig(raw, *path)
        if value:
            return value
    return None


def _options(items: Any) -> Optional[list[ChoiceOption]]:
    if not items:
        return None
    if not isinstance(items, list):
        items = [items]
    return [ChoiceOption.from_raw(item) for item in items]


def _preview(raw: Any) -> str:
    try:
        return json.dumps(raw, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return repr(raw)


def normalize(raw: Any) -> NormalizedMessage:
    """Map one backend message object to a renderable message."""
    if not isinstance(raw, dict):
        return CustomMessage(data=raw, preview=_preview(raw))

    if raw.get("quick_replies") is not None:
        text = raw.get("text")
        return ChoiceMessage(
            prompt=text if isinstance(text, str) and text else DEFAULT_CHOICE_PROMPT,
            options=_options(raw["quick_replies"]) or [],
        )

    text = _first(raw, ("text",), ("message", "text"))
    image = _first(raw, ("image",), ("attachment", "payload", "src"))
    options = _options(_first(raw, ("buttons",), ("payload", "buttons")))
    custom = _first(raw, ("custom",), ("payload", "custom"))

    if text is not None and not isinstance(text, str):
        text = str(text)
    if image is not None and not isinstance(image, str):
        image = str(image)

    if text and not (image or options or custom):
        return TextMessage(text=text)
    if image and raw.get("image") and not (options or custom):
        return ImageMessage(url=image, caption=text)
    if text or image or options or custom:
        return CompositeMessage(text=text, image=image, options=options, data=custom)

    return CustomMessage(data=raw, preview=_preview(raw))
