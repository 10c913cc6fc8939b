"""
Chat engine — owns the session, picks a transport and fans events out.

Subscribers receive ChatEvent objects:
- outbound:   data is the MessageView of a user bubble to draw
- message:    data is a normalized inbound message
- status:     data is the new TransportStatus
- visibility: data is True (open) or False (close)
"""

import logging
from typing import Any, Callable, Optional

import httpx

from rasa_webchat.errors import ConnectionError
from rasa_webchat.models.config import ChatConfig
from rasa_webchat.models.envelope import OutboundEnvelope
from rasa_webchat.models.events import EngineEvent, TransportStatus
from rasa_webchat.models.message import ChoiceOption
from rasa_webchat.models.session import Session
from rasa_webchat.models.view import MessageView
from rasa_webchat.normalizer import NormalizedMessage
from rasa_webchat.sessions import SessionStore
from rasa_webchat.sink import RenderSink
from rasa_webchat.storage import KeyValueStore
from rasa_webchat.transport.base import Transport
from rasa_webchat.transport.http import RestTransport
from rasa_webchat.transport.socketio import SocketTransport

logger = logging.getLogger(__name__)


class ChatEvent:
    __slots__ = ("type", "data")

    def __init__(self, type: str, data: Any = None):
        self.type = type
        self.data = data

    def __repr__(self) -> str:
        return f"ChatEvent(type={self.type!r}, data={self.data!r})"


EventHandler = Callable[[ChatEvent], None]


def build_transport(
    config: ChatConfig,
    sessions: SessionStore,
    session: Session,
    http_client: Optional[httpx.AsyncClient] = None,
    socket_client: Optional[Any] = None,
) -> Transport:
    if config.transport == "socket":
        return SocketTransport(config, sessions, session, client=socket_client)
    return RestTransport(config, sessions, session, client=http_client)


class ChatEngine:
    """Must be created inside a running asyncio event loop."""

    def __init__(
        self,
        config: Optional[ChatConfig] = None,
        storage: Optional[KeyValueStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        socket_client: Optional[Any] = None,
    ):
        self._config = config or ChatConfig()
        self._sessions = SessionStore(
            storage,
            storage_key=self._config.storage_key,
            session_timeout=self._config.session_timeout,
            user_id=self._config.user_id,
        )
        self._session = self._sessions.load()
        self._transport = build_transport(
            self._config, self._sessions, self._session,
            http_client=http_client, socket_client=socket_client,
        )
        self._status = self._transport.status
        self._handlers: list[EventHandler] = []
        self._visible = False
        self._closed = False
        self._pending_init: Optional[str] = None

        self._transport.on_message(self._on_message)
        self._transport.on_status(self._on_status)

        if self._config.transport == "socket":
            self._transport.start()
        if self._config.init_payload:
            self._send_init(self._config.init_payload)

    @property
    def config(self) -> ChatConfig:
        return self._config

    @property
    def session(self) -> Session:
        return self._session

    @property
    def sessions(self) -> SessionStore:
        return self._sessions

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def status(self) -> TransportStatus:
        return self._status

    @property
    def visible(self) -> bool:
        return self._visible

    def add_event_handler(self, handler: EventHandler) -> Callable[[], None]:
        """Add an event handler. Returns a cleanup function."""
        self._handlers.append(handler)

        def remove() -> None:
            try:
                self._handlers.remove(handler)
            except ValueError:
                pass

        return remove

    def attach(self, sink: RenderSink) -> Callable[[], None]:
        """Drive a render sink from engine events. Returns a cleanup function."""
        typing = False

        def handler(event: ChatEvent) -> None:
            nonlocal typing
            if event.type == EngineEvent.OUTBOUND:
                sink.render_message(event.data)
            elif event.type == EngineEvent.MESSAGE:
                sink.render_message(MessageView.inbound(event.data))
            elif event.type == EngineEvent.STATUS:
                if event.data == TransportStatus.TYPING:
                    typing = True
                    sink.show_typing()
                    return
                if typing:
                    typing = False
                    sink.hide_typing()
                sink.render_status(event.data)
            elif event.type == EngineEvent.VISIBILITY:
                sink.set_visible(event.data)

        return self.add_event_handler(handler)

    def send_text(self, text: str, silent: bool = False) -> None:
        """Send typed text. Blank input is ignored; silent skips the user bubble."""
        self._ensure_open()
        text = (text or "").strip()
        if not text:
            return
        if not silent:
            self._emit(EngineEvent.OUTBOUND, MessageView.outbound(text))
        self._transport.send(OutboundEnvelope(sender_id=self._session.sender_id, text=text))

    def send_custom_payload(self, data: Any) -> None:
        """Send a structured payload without rendering anything."""
        self._ensure_open()
        self._transport.send(OutboundEnvelope(sender_id=self._session.sender_id, raw=data))

    def select_option(self, option: ChoiceOption) -> None:
        """Quick-reply click: the option payload is sent as a typed message."""
        self.send_text(option.payload)

    def open(self) -> None:
        self._set_visible(True)

    def close(self) -> None:
        self._set_visible(False)

    async def drain(self) -> None:
        """Wait for in-flight exchanges to finish."""
        await self._transport.drain()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._pending_init = None
        await self._transport.stop()

    def _send_init(self, payload: str) -> None:
        if isinstance(self._transport, SocketTransport) and not self._transport.connected:
            if self._transport.available:
                logger.debug("Holding init payload until the socket connects")
                self._pending_init = payload
                return
        self.send_text(payload, silent=True)

    def _set_visible(self, visible: bool) -> None:
        self._visible = visible
        self._emit(EngineEvent.VISIBILITY, visible)

    def _on_message(self, message: NormalizedMessage) -> None:
        self._emit(EngineEvent.MESSAGE, message)

    def _on_status(self, status: TransportStatus) -> None:
        self._status = status
        self._emit(EngineEvent.STATUS, status)
        if status == TransportStatus.CONNECTED and self._pending_init:
            payload, self._pending_init = self._pending_init, None
            self.send_text(payload, silent=True)

    def _emit(self, type: str, data: Any) -> None:
        event = ChatEvent(type, data)
        for handler in list(self._handlers):
            handler(event)

    def _ensure_open(self) -> None:
        if self._closed:
            raise ConnectionError("Chat engine is closed.")
