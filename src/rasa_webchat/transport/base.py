"""
Transport base — shared handler registry, status tracking and task bookkeeping.

send() never returns bot replies; they arrive through on_message handlers.
All I/O is scheduled on the running event loop so callers never block.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Coroutine

from rasa_webchat.models.envelope import OutboundEnvelope
from rasa_webchat.models.events import TransportStatus
from rasa_webchat.models.session import Session
from rasa_webchat.normalizer import NormalizedMessage
from rasa_webchat.sessions import SessionStore

logger = logging.getLogger(__name__)

MessageHandler = Callable[[NormalizedMessage], None]
StatusHandler = Callable[[TransportStatus], None]


def _add(handlers: list[Any], handler: Any) -> Callable[[], None]:
    handlers.append(handler)

    def remove() -> None:
        try:
            handlers.remove(handler)
        except ValueError:
            pass

    return remove


class Transport(ABC):
    def __init__(self, sessions: SessionStore, session: Session):
        self._sessions = sessions
        self._session = session
        self._status = TransportStatus.IDLE
        self._message_handlers: list[MessageHandler] = []
        self._status_handlers: list[StatusHandler] = []
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def status(self) -> TransportStatus:
        return self._status

    @property
    def session(self) -> Session:
        return self._session

    def on_message(self, handler: MessageHandler) -> Callable[[], None]:
        """Add a handler for normalized inbound messages. Returns a cleanup function."""
        return _add(self._message_handlers, handler)

    def on_status(self, handler: StatusHandler) -> Callable[[], None]:
        """Add a handler for status transitions. Returns a cleanup function."""
        return _add(self._status_handlers, handler)

    @abstractmethod
    def send(self, envelope: OutboundEnvelope) -> None: ...

    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    async def stop(self) -> None: ...

    async def drain(self) -> None:
        """Wait until every scheduled exchange has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _deliver(self, message: NormalizedMessage) -> None:
        for handler in list(self._message_handlers):
            handler(message)

    def _set_status(self, status: TransportStatus) -> None:
        if status == self._status:
            return
        self._status = status
        for handler in list(self._status_handlers):
            handler(status)

    def _touch_session(self) -> None:
        self._sessions.touch(self._session)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> "asyncio.Task[None]":
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _cancel_tasks(self) -> None:
        current = asyncio.current_task()
        pending = [t for t in self._tasks if t is not current and not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
