"""Exception hierarchy shared by the REST and websocket clients."""

from __future__ import annotations


class XPWebError(Exception):
    """Base error for all xpweb failures."""


class TransportError(XPWebError):
    """Raised when dialing, writing to, or reading from the transport fails."""


class TransportClosed(TransportError):
    """Raised when the peer closed or reset the connection."""


class NotConnected(TransportError):
    """Raised when a frame is sent without an open connection."""


class DecodeError(XPWebError):
    """Base error for inbound frames that cannot be decoded."""


class MalformedMessage(DecodeError):
    """Raised when a frame is not a JSON object or fails validation."""


class UnknownMessageType(DecodeError):
    """Raised when a frame carries a type tag with no known decoder."""

    def __init__(self, message_type: str) -> None:
        super().__init__(f"unknown message type: {message_type}")
        self.message_type = message_type


class UnknownEntity(XPWebError):
    """Raised when a command or dataref name is not present in the cache."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"no {kind} exists with name {name}")
        self.kind = kind
        self.name = name


class RestRequestError(XPWebError):
    """Raised for REST failures that never produced a usable response."""


class ApiError(XPWebError):
    """Error response returned by the REST API."""

    def __init__(self, status_code: int, error_code: str, error_message: str) -> None:
        super().__init__(error_message or f"REST request failed with status {status_code}")
        self.status_code = status_code
        self.error_code = error_code
        self.error_message = error_message


__all__ = [
    "XPWebError",
    "TransportError",
    "TransportClosed",
    "NotConnected",
    "DecodeError",
    "MalformedMessage",
    "UnknownMessageType",
    "UnknownEntity",
    "RestRequestError",
    "ApiError",
]
