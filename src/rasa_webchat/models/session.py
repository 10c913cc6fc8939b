"""
Session model — the persisted conversation identity.

Stored as one JSON entry: {"sender_id": str, "timestamp": epoch ms}.
"""

from pydantic import BaseModel


class Session(BaseModel):
    sender_id: str
    timestamp: int  # epoch milliseconds of creation or last touch

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.timestamp
