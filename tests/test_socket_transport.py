"""SocketTransport: handshake, event routing and the single reconnect timer."""

import asyncio
import logging
from typing import Any

import pytest

from conftest import FakeSocketClient
from rasa_webchat.models.config import ChatConfig
from rasa_webchat.models.envelope import OutboundEnvelope
from rasa_webchat.models.events import TransportStatus
from rasa_webchat.models.message import CompositeMessage, TextMessage
from rasa_webchat.sessions import SessionStore
from rasa_webchat.storage import MemoryStore
from rasa_webchat.transport import socketio as socket_module
from rasa_webchat.transport.socketio import NOT_CONNECTED_TEXT, SocketTransport, build_payload


def make_transport(client, interval: float = 0.05, jwt=None):
    config = ChatConfig(
        transport="socket",
        socket_url="http://bot.test",
        reconnect_interval=interval,
        jwt=jwt,
    )
    sessions = SessionStore(MemoryStore(), user_id="tester")
    transport = SocketTransport(config, sessions, sessions.load(), client=client)
    messages: list[Any] = []
    statuses: list[TransportStatus] = []
    transport.on_message(messages.append)
    transport.on_status(statuses.append)
    return transport, messages, statuses


def test_build_payload_picks_event_by_envelope_shape():
    assert build_payload(OutboundEnvelope(sender_id="s", text="hi")) == (
        "user_uttered", {"message": "hi", "sender": "s"},
    )
    assert build_payload(OutboundEnvelope(sender_id="s", raw={"intent": "buy"})) == (
        "user_message", {"message": None, "sender": "s", "intent": "buy"},
    )
    assert build_payload(OutboundEnvelope(sender_id="s", raw="/greet")) == (
        "user_message", {"message": "/greet", "sender": "s"},
    )
    # raw fields override when both text and payload are supplied
    assert build_payload(OutboundEnvelope(sender_id="s", text="hi", raw={"message": "/hi"})) == (
        "user_message", {"message": "/hi", "sender": "s"},
    )


@pytest.mark.asyncio
async def test_start_connects_and_sends_handshake(fake_socket):
    transport, _, statuses = make_transport(fake_socket, jwt="tok")
    transport.start()
    await transport.drain()

    assert fake_socket.connect_calls[0]["url"] == "http://bot.test"
    assert fake_socket.connect_calls[0]["auth"] == {"token": "tok"}
    assert fake_socket.connect_calls[0]["socketio_path"] == "socket.io"
    assert fake_socket.emitted == [("session_request", {"session_id": "tester"})]
    assert statuses == [TransportStatus.CONNECTING, TransportStatus.CONNECTED]
    assert transport.connected
    await transport.stop()


@pytest.mark.asyncio
async def test_send_when_connected_emits_user_uttered(fake_socket):
    transport, messages, _ = make_transport(fake_socket)
    transport.start()
    await transport.drain()

    transport.send(OutboundEnvelope(sender_id="tester", text="hello"))
    transport.send(OutboundEnvelope(sender_id="tester", raw={"payload": "/affirm"}))
    await transport.drain()
    assert fake_socket.emitted[1:] == [
        ("user_uttered", {"message": "hello", "sender": "tester"}),
        ("user_message", {"message": None, "sender": "tester", "payload": "/affirm"}),
    ]
    assert messages == []
    await transport.stop()


@pytest.mark.asyncio
async def test_typing_then_bot_message(fake_socket):
    transport, messages, statuses = make_transport(fake_socket)
    transport.start()
    await transport.drain()

    await fake_socket.trigger("typing")
    assert transport.status == TransportStatus.TYPING
    await fake_socket.trigger("bot_uttered", {"text": "hi", "attachment": {"payload": {"src": "http://x/y.png"}}})
    assert messages == [CompositeMessage(text="hi", image="http://x/y.png")]
    assert statuses[-2:] == [TransportStatus.TYPING, TransportStatus.CONNECTED]
    await transport.stop()


@pytest.mark.asyncio
async def test_send_while_disconnected_notifies_and_never_emits(fake_socket):
    transport, messages, _ = make_transport(fake_socket, interval=10)
    transport.send(OutboundEnvelope(sender_id="tester", text="hello"))

    assert fake_socket.emitted == []
    assert messages == [TextMessage(text=NOT_CONNECTED_TEXT)]
    assert transport.reconnect_pending
    await transport.stop()
    assert not transport.reconnect_pending


@pytest.mark.asyncio
async def test_schedule_reconnect_is_idempotent(fake_socket):
    transport, _, _ = make_transport(fake_socket, interval=0.05)
    transport.schedule_reconnect()
    first = transport._reconnect_handle
    transport.schedule_reconnect()
    transport.send(OutboundEnvelope(sender_id="tester", text="again"))
    assert transport._reconnect_handle is first

    await asyncio.sleep(0.1)
    await transport.drain()
    assert len(fake_socket.connect_calls) == 1
    assert transport.connected
    assert not transport.reconnect_pending
    await transport.stop()


@pytest.mark.asyncio
async def test_disconnect_schedules_one_reconnect(fake_socket):
    transport, _, statuses = make_transport(fake_socket, interval=0.05)
    transport.start()
    await transport.drain()

    await fake_socket.server_disconnect()
    await fake_socket.trigger("connect_error", {"message": "nope"})
    assert transport.status == TransportStatus.DISCONNECTED
    assert transport.reconnect_pending

    await asyncio.sleep(0.1)
    await transport.drain()
    assert len(fake_socket.connect_calls) == 2
    assert transport.status == TransportStatus.CONNECTED
    assert statuses.count(TransportStatus.DISCONNECTED) == 1
    await transport.stop()


@pytest.mark.asyncio
async def test_failed_connect_keeps_retrying():
    client = FakeSocketClient(fail_connect=True)
    transport, _, _ = make_transport(client, interval=0.02)
    transport.start()
    await asyncio.sleep(0.1)
    assert len(client.connect_calls) >= 2
    assert transport.status in (TransportStatus.DISCONNECTED, TransportStatus.CONNECTING)

    client.fail_connect = False
    await asyncio.sleep(0.05)
    await transport.drain()
    assert transport.status == TransportStatus.CONNECTED
    await transport.stop()


@pytest.mark.asyncio
async def test_stop_does_not_reconnect(fake_socket):
    transport, _, _ = make_transport(fake_socket, interval=0.02)
    transport.start()
    await transport.drain()
    await transport.stop()

    await asyncio.sleep(0.05)
    assert len(fake_socket.connect_calls) == 1
    assert not transport.reconnect_pending
    assert transport.status == TransportStatus.IDLE


@pytest.mark.asyncio
async def test_missing_client_library_stays_idle(monkeypatch, caplog):
    monkeypatch.setattr(socket_module, "socketio", None)
    transport, messages, statuses = make_transport(None)
    assert not transport.available

    with caplog.at_level(logging.WARNING):
        transport.start()
        transport.start()
    assert caplog.text.count("Socket.IO client not found") == 1

    transport.send(OutboundEnvelope(sender_id="tester", text="hello"))
    assert messages == [TextMessage(text=NOT_CONNECTED_TEXT)]
    assert not transport.reconnect_pending
    assert transport.status == TransportStatus.IDLE
    assert statuses == []
    await transport.stop()


@pytest.mark.asyncio
async def test_send_from_connected_status_handler_is_emitted(fake_socket):
    transport, messages, _ = make_transport(fake_socket, interval=10)

    def greet(status: TransportStatus) -> None:
        if status == TransportStatus.CONNECTED:
            assert not fake_socket.connected
            transport.send(OutboundEnvelope(sender_id="tester", text="/greet"))

    transport.on_status(greet)
    transport.start()
    await transport.drain()

    assert fake_socket.emitted == [
        ("session_request", {"session_id": "tester"}),
        ("user_uttered", {"message": "/greet", "sender": "tester"}),
    ]
    assert messages == []
    assert not transport.reconnect_pending
    await transport.stop()
