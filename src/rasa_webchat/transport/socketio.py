"""
Socket.IO transport — persistent connection to the Rasa socket channel.

On connect the client asks for its session with `session_request`
{session_id}; bot replies arrive as `bot_uttered`. Typed text goes out as
`user_uttered`, raw payloads as `user_message`.

Reconnection is owned here rather than by python-socketio: after a
disconnect or connect error exactly one retry is scheduled every
`reconnect_interval` seconds, forever, until stop() is called.
"""

import asyncio
import logging
from typing import Any, Optional

try:
    import socketio
except ImportError:  # python-socketio missing from the environment
    socketio = None

from rasa_webchat.models.config import ChatConfig
from rasa_webchat.models.envelope import OutboundEnvelope
from rasa_webchat.models.events import C2SEvent, S2CEvent, TransportStatus
from rasa_webchat.models.message import TextMessage
from rasa_webchat.models.session import Session
from rasa_webchat.normalizer import normalize
from rasa_webchat.sessions import SessionStore
from rasa_webchat.transport.base import Transport

logger = logging.getLogger(__name__)

NOT_CONNECTED_TEXT = "Not connected. Trying to reconnect..."


def build_payload(envelope: OutboundEnvelope) -> tuple[str, dict[str, Any]]:
    """Pick the outbound event name and body for an envelope."""
    if envelope.is_text:
        return C2SEvent.USER_UTTERED, {"message": envelope.text, "sender": envelope.sender_id}
    raw = envelope.raw
    message = envelope.text
    if message is None and not isinstance(raw, dict):
        message = raw
    body: dict[str, Any] = {"message": message, "sender": envelope.sender_id}
    if isinstance(raw, dict):
        body.update(raw)
    return C2SEvent.USER_MESSAGE, body


class SocketTransport(Transport):
    def __init__(
        self,
        config: ChatConfig,
        sessions: SessionStore,
        session: Session,
        client: Optional[Any] = None,
    ):
        super().__init__(sessions, session)
        self._url = config.socket_url
        self._path = config.socketio_path
        self._transports = list(config.socket_transports)
        self._token = config.jwt
        self._interval = config.reconnect_interval
        self._reconnect_handle: Optional[asyncio.TimerHandle] = None
        self._stopped = False
        self._warned = False
        self._connected = False

        if client is None and socketio is not None:
            client = socketio.AsyncClient(reconnection=False)
        self._client = client
        if self._client is not None:
            self._client.on("connect", self._on_connect)
            self._client.on("disconnect", self._on_disconnect)
            self._client.on("connect_error", self._on_connect_error)
            self._client.on(S2CEvent.SESSION_CONFIRM, self._on_session_confirm)
            self._client.on(S2CEvent.BOT_UTTERED, self._on_bot_uttered)
            self._client.on(S2CEvent.TYPING, self._on_typing)

    @property
    def available(self) -> bool:
        return self._client is not None

    @property
    def connected(self) -> bool:
        return self._connected and self._client is not None

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_handle is not None

    def start(self) -> None:
        """Open the connection in the background."""
        if not self.available:
            if not self._warned:
                logger.warning("Socket.IO client not found. Install python-socketio or use the REST transport.")
                self._warned = True
            return
        self._stopped = False
        self._spawn(self._connect())

    async def stop(self) -> None:
        self._stopped = True
        self._cancel_reconnect()
        await self._cancel_tasks()
        self._connected = False
        if self._client is not None and self._client.connected:
            await self._client.disconnect()
        self._set_status(TransportStatus.IDLE)

    def send(self, envelope: OutboundEnvelope) -> None:
        if not self.connected:
            self._deliver(TextMessage(text=NOT_CONNECTED_TEXT))
            self.schedule_reconnect()
            return
        event, body = build_payload(envelope)
        self._spawn(self._emit(event, body))

    def schedule_reconnect(self) -> None:
        """Arm the reconnect timer unless one is already pending."""
        if self._reconnect_handle is not None or self._stopped or not self.available:
            return
        loop = asyncio.get_running_loop()
        self._reconnect_handle = loop.call_later(self._interval, self._fire_reconnect)

    def _fire_reconnect(self) -> None:
        self._reconnect_handle = None
        if self._stopped or self.connected:
            return
        logger.debug(f"Reconnecting to {self._url}")
        self._spawn(self._connect())

    def _cancel_reconnect(self) -> None:
        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

    async def _connect(self) -> None:
        if self.connected:
            return
        self._set_status(TransportStatus.CONNECTING)
        try:
            await self._client.connect(  # type: ignore[union-attr]
                self._url,
                auth={"token": self._token} if self._token else None,
                transports=self._transports,
                socketio_path=self._path,
            )
        except Exception as e:
            logger.warning(f"Socket.IO connect to {self._url} failed: {e}")
            self._connection_lost()

    async def _emit(self, event: str, body: dict[str, Any]) -> None:
        try:
            await self._client.emit(event, body)  # type: ignore[union-attr]
        except Exception as e:
            logger.error(f"Emit failed for {event}: {e}")

    def _connection_lost(self) -> None:
        self._connected = False
        if self._stopped:
            return
        self._set_status(TransportStatus.DISCONNECTED)
        self.schedule_reconnect()

    async def _on_connect(self) -> None:
        logger.info(f"Socket connected to {self._url}")
        await self._client.emit(  # type: ignore[union-attr]
            C2SEvent.SESSION_REQUEST, {"session_id": self._session.sender_id}
        )
        logger.debug(f"Session request sent for {self._session.sender_id}")
        # client.connected only flips once connect() returns
        self._connected = True
        self._set_status(TransportStatus.CONNECTED)

    async def _on_disconnect(self, *_args: Any) -> None:
        logger.info(f"Socket disconnected from {self._url}")
        self._connection_lost()

    async def _on_connect_error(self, *_args: Any) -> None:
        self._connection_lost()

    async def _on_session_confirm(self, *args: Any) -> None:
        logger.debug(f"Session confirmed: {args[0] if args else None}")

    async def _on_typing(self, *_args: Any) -> None:
        self._set_status(TransportStatus.TYPING)

    async def _on_bot_uttered(self, data: Any = None, *_args: Any) -> None:
        if self._status == TransportStatus.TYPING:
            self._set_status(TransportStatus.CONNECTED)
        self._deliver(normalize(data))
        self._touch_session()
