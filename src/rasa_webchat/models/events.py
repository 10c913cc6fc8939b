"""
Event names and transport status.

C2SEvent / S2CEvent are the Socket.IO event names of the Rasa socket channel.
EngineEvent are the event types ChatEngine emits to its subscribers.
"""

from enum import Enum


class C2SEvent:
    SESSION_REQUEST = "session_request"
    USER_UTTERED = "user_uttered"
    USER_MESSAGE = "user_message"


class S2CEvent:
    SESSION_CONFIRM = "session_confirm"
    BOT_UTTERED = "bot_uttered"
    TYPING = "typing"


class EngineEvent:
    OUTBOUND = "outbound"
    MESSAGE = "message"
    STATUS = "status"
    VISIBILITY = "visibility"


class TransportStatus(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    TYPING = "typing"
