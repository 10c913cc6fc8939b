"""
rasa-webchat — embeddable chat client for Rasa bots.

REST or Socket.IO transport, persisted sender session, and normalization of
bot responses into a small set of renderable message shapes.
"""

from rasa_webchat.chat import ChatEngine, ChatEvent
from rasa_webchat.errors import (
    WebChatError,
    StorageError,
    NetworkError,
    ConnectionError,
    ConfigurationError,
)
from rasa_webchat.models.config import ChatConfig
from rasa_webchat.models.events import C2SEvent, S2CEvent, EngineEvent, TransportStatus
from rasa_webchat.normalizer import normalize
from rasa_webchat.sessions import SessionStore
from rasa_webchat.storage import FileStore, MemoryStore

__version__ = "0.1.0"
__all__ = [
    "ChatEngine",
    "ChatEvent",
    "ChatConfig",
    "SessionStore",
    "FileStore",
    "MemoryStore",
    "normalize",
    "WebChatError",
    "StorageError",
    "NetworkError",
    "ConnectionError",
    "ConfigurationError",
    "C2SEvent",
    "S2CEvent",
    "EngineEvent",
    "TransportStatus",
]
