"""
Webchat error types — one class per fault category of the client.
"""

from typing import Any, Optional


class WebChatError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class StorageError(WebChatError):
    def __init__(self, message: str, code: str = "storage_error"):
        super().__init__(code, message)


class NetworkError(WebChatError):
    def __init__(self, message: str, code: str = "network_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class ConnectionError(WebChatError):
    def __init__(self, message: str):
        super().__init__("connection_error", message)


class ConfigurationError(WebChatError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("configuration_error", message, details)
