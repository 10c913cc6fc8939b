"""Shared fakes for transport tests."""

from typing import Any, Callable

import httpx
import pytest

from rasa_webchat.chat import ChatEvent


class FakeSocketClient:
    """In-process stand-in for socketio.AsyncClient."""

    def __init__(self, fail_connect: bool = False):
        self.fail_connect = fail_connect
        self.connected = False
        self.handlers: dict[str, Callable[..., Any]] = {}
        self.emitted: list[tuple[str, Any]] = []
        self.connect_calls: list[dict[str, Any]] = []

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self.handlers[event] = handler

    async def connect(self, url: str, **kwargs: Any) -> None:
        self.connect_calls.append({"url": url, **kwargs})
        if self.fail_connect:
            raise OSError("connection refused")
        # like python-socketio, `connected` is only set after the handler ran
        await self.handlers["connect"]()
        self.connected = True

    async def emit(self, event: str, data: Any = None) -> None:
        self.emitted.append((event, data))

    async def disconnect(self) -> None:
        self.connected = False
        await self.handlers["disconnect"]()

    async def server_disconnect(self) -> None:
        self.connected = False
        await self.handlers["disconnect"]("transport close")

    async def trigger(self, event: str, *args: Any) -> None:
        await self.handlers[event](*args)


def mock_http(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class Recorder:
    """Collects ChatEvents in order."""

    def __init__(self) -> None:
        self.events: list[ChatEvent] = []

    def __call__(self, event: ChatEvent) -> None:
        self.events.append(event)

    def of(self, type: str) -> list[Any]:
        return [e.data for e in self.events if e.type == type]


@pytest.fixture
def fake_socket() -> FakeSocketClient:
    return FakeSocketClient()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
