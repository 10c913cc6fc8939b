"""
Client configuration — immutable once the engine is built.

Durations are in seconds.
"""

from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_REST_ENDPOINT = "http://localhost:5005/webhooks/rest/webhook"
DEFAULT_SOCKET_URL = "http://localhost:5005"


class ChatConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    transport: Literal["rest", "socket"] = "rest"
    rest_endpoint: str = DEFAULT_REST_ENDPOINT
    socket_url: str = DEFAULT_SOCKET_URL
    socketio_path: str = "socket.io"
    socket_transports: list[str] = Field(default_factory=lambda: ["websocket"])
    jwt: Optional[str] = None
    session_timeout: float = Field(default=60 * 60, gt=0)
    reconnect_interval: float = Field(default=5.0, gt=0)
    request_timeout: float = Field(default=30.0, gt=0)
    storage_key: str = Field(default="rasa_webchat", min_length=1)
    init_payload: Optional[str] = None
    user_id: Optional[str] = None
    bot_name: str = "Bot"
