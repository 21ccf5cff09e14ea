"""Transport implementations for the push-message connection."""

from .base import BaseTransport, Frame
from .dummy import DummyTransport
from .websocket import WebSocketTransport

__all__ = ["BaseTransport", "DummyTransport", "Frame", "WebSocketTransport"]
