"""
REST transport — one POST to the Rasa REST webhook per outbound message.

Request:  {"sender": <sender id>, "message": <text>}
Response: a JSON array of bot message objects (possibly empty).
"""

import json
import logging
from typing import Any, Optional

import httpx

from rasa_webchat.errors import NetworkError
from rasa_webchat.models.config import ChatConfig
from rasa_webchat.models.envelope import OutboundEnvelope
from rasa_webchat.models.events import TransportStatus
from rasa_webchat.models.message import TextMessage
from rasa_webchat.models.session import Session
from rasa_webchat.normalizer import normalize
from rasa_webchat.sessions import SessionStore
from rasa_webchat.transport.base import Transport

logger = logging.getLogger(__name__)

USER_AGENT = "rasa-webchat/0.1.0"
FALLBACK_TEXT = "Error: Could not reach server."


def build_body(envelope: OutboundEnvelope) -> dict[str, Any]:
    body: dict[str, Any] = {"sender": envelope.sender_id, "message": envelope.text or ""}
    raw = envelope.raw
    if isinstance(raw, dict):
        body.update(raw)
        body["sender"] = envelope.sender_id
    elif raw is not None and envelope.text is None:
        body["message"] = raw if isinstance(raw, str) else json.dumps(raw)
    return body


class RestTransport(Transport):
    def __init__(
        self,
        config: ChatConfig,
        sessions: SessionStore,
        session: Session,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(sessions, session)
        self._endpoint = config.rest_endpoint
        self._token = config.jwt
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            timeout=config.request_timeout,
        )

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def start(self) -> None:
        """No persistent connection to open."""

    async def stop(self) -> None:
        await self._cancel_tasks()
        await self._client.aclose()

    def send(self, envelope: OutboundEnvelope) -> None:
        self._set_status(TransportStatus.TYPING)
        self._spawn(self._exchange(envelope))

    async def _post(self, body: dict[str, Any]) -> Any:
        try:
            resp = await self._client.post(self._endpoint, json=body, headers=self._headers())
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetworkError(f"Request to {self._endpoint} failed: {e}")
        if resp.status_code >= 400:
            raise NetworkError(
                f"HTTP {resp.status_code}: {resp.text[:200]}",
                details={"status_code": resp.status_code},
            )
        try:
            return resp.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from {self._endpoint}: {e}")

    async def _exchange(self, envelope: OutboundEnvelope) -> None:
        try:
            data = await self._post(build_body(envelope))
        except NetworkError as e:
            self._set_status(TransportStatus.IDLE)
            logger.error(f"Rasa REST error: {e}")
            self._deliver(TextMessage(text=FALLBACK_TEXT))
            self._touch_session()
            return

        self._set_status(TransportStatus.IDLE)
        if not isinstance(data, list):
            logger.warning(f"Ignoring non-list reply from {self._endpoint}: {type(data).__name__}")
            return
        for raw in data:
            self._deliver(normalize(raw))
        self._touch_session()
