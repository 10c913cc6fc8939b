"""
Normalized inbound messages — the closed set of shapes a sink can render.

Every backend payload maps onto exactly one of these variants; the `kind`
field tells them apart once serialized.
"""

from typing import Any, Literal, Optional
from pydantic import BaseModel, Field


class ChoiceOption(BaseModel):
    label: str
    payload: str

    @classmethod
    def from_raw(cls, item: Any) -> "ChoiceOption":
        """Build from a backend button: {title, payload} or a bare string."""
        if isinstance(item, dict):
            title = item.get("title") or item.get("label")
            payload = item.get("payload") or title
            label = title or payload
            return cls(label=_as_str(label), payload=_as_str(payload))
        return cls(label=_as_str(item), payload=_as_str(item))


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class TextMessage(BaseModel):
    kind: Literal["text"] = "text"
    text: str


class ImageMessage(BaseModel):
    kind: Literal["image"] = "image"
    url: str
    caption: Optional[str] = None


class ChoiceMessage(BaseModel):
    kind: Literal["choice"] = "choice"
    prompt: Optional[str] = None
    options: list[ChoiceOption] = Field(default_factory=list)


class CustomMessage(BaseModel):
    kind: Literal["custom"] = "custom"
    data: Any = None
    preview: str = ""  # JSON rendering of `data`, shown when nothing else is renderable


class CompositeMessage(BaseModel):
    kind: Literal["composite"] = "composite"
    text: Optional[str] = None
    image: Optional[str] = None
    options: Optional[list[ChoiceOption]] = None
    data: Optional[Any] = None

