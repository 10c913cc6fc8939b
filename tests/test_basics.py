"""Basic unit tests for the rasa-webchat package."""

import pytest
from pydantic import ValidationError

from rasa_webchat import (
    ChatConfig,
    ChatEngine,
    WebChatError,
    StorageError,
    NetworkError,
    ConnectionError,
    ConfigurationError,
    C2SEvent,
    S2CEvent,
    EngineEvent,
    TransportStatus,
    __version__,
)


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert ChatEngine is not None
    assert ChatConfig is not None


def test_error_hierarchy():
    for cls in (StorageError, NetworkError, ConnectionError, ConfigurationError):
        assert issubclass(cls, WebChatError)


def test_error_attributes():
    err = WebChatError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    err_with_details = NetworkError("HTTP 502", details={"status_code": 502})
    assert err_with_details.code == "network_error"
    assert err_with_details.details == {"status_code": 502}


def test_event_constants():
    assert C2SEvent.SESSION_REQUEST == "session_request"
    assert C2SEvent.USER_UTTERED == "user_uttered"
    assert C2SEvent.USER_MESSAGE == "user_message"
    assert S2CEvent.BOT_UTTERED == "bot_uttered"
    assert EngineEvent.MESSAGE == "message"
    assert TransportStatus.TYPING.value == "typing"


def test_config_defaults_and_immutability():
    config = ChatConfig()
    assert config.transport == "rest"
    assert config.session_timeout == 3600
    assert config.reconnect_interval == 5.0
    assert config.storage_key == "rasa_webchat"
    with pytest.raises(ValidationError):
        config.jwt = "changed"


def test_config_rejects_unknown_transport():
    with pytest.raises(ValidationError):
        ChatConfig(transport="carrier-pigeon")
