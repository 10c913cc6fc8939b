"""
Session store — loads, expires and refreshes the conversation identity.

Storage faults never reach the caller: an unreadable or corrupt entry is
treated exactly like a missing one and a fresh session is created.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Callable, Optional

from pydantic import ValidationError

from rasa_webchat.errors import StorageError
from rasa_webchat.models.session import Session
from rasa_webchat.storage import KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)

SENDER_ALPHABET = string.ascii_lowercase + string.digits


def generate_sender_id() -> str:
    return "user_" + "".join(secrets.choice(SENDER_ALPHABET) for _ in range(8))


class SessionStore:
    def __init__(
        self,
        storage: Optional[KeyValueStore] = None,
        storage_key: str = "rasa_webchat",
        session_timeout: float = 60 * 60,
        user_id: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._storage = storage if storage is not None else MemoryStore()
        self._key = storage_key
        self._timeout_ms = int(session_timeout * 1000)
        self._user_id = user_id
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def load(self) -> Session:
        """Return the stored session, or a new persisted one if absent, corrupt or expired."""
        try:
            data = self._storage.get(self._key)
        except (StorageError, OSError) as e:
            logger.debug(f"Session storage unreadable, starting over: {e}")
            data = None
        if not data:
            return self._create()
        try:
            session = Session.model_validate_json(data)
        except ValidationError:
            return self._create()
        if session.age_ms(self._now_ms()) > self._timeout_ms:
            return self._create()
        return session

    def touch(self, session: Session) -> None:
        session.timestamp = self._now_ms()
        self._save(session)

    def reset(self) -> Session:
        """Drop the current identity and persist a fresh one."""
        return self._create()

    def _create(self) -> Session:
        session = Session(
            sender_id=self._user_id or generate_sender_id(),
            timestamp=self._now_ms(),
        )
        self._save(session)
        return session

    def _save(self, session: Session) -> None:
        try:
            self._storage.set(self._key, session.model_dump_json())
        except (StorageError, OSError) as e:
            logger.debug(f"Session not persisted: {e}")
