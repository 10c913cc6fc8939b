"""
Outbound envelope — one user-originated event attributed to a sender.
"""

from typing import Any, Optional
from pydantic import BaseModel


class OutboundEnvelope(BaseModel):
    sender_id: str
    text: Optional[str] = None
    raw: Optional[Any] = None  # structured payload (quick replies, programmatic sends)

    @property
    def is_text(self) -> bool:
        """True for user-typed text, False when a raw payload is attached."""
        return self.raw is None
