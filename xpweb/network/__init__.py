"""Websocket stack (transport/connection/client) for simulator push messages."""

from xpweb.network.client import WsClient, populate_commands, populate_datarefs
from xpweb.network.codec import decode_message
from xpweb.network.connection import ConnectionManager, ConnectionState
from xpweb.network.ledger import RequestLedger
from xpweb.network.request import WsRequest
from xpweb.network.transport.base import BaseTransport
from xpweb.network.transport.dummy import DummyTransport
from xpweb.network.transport.websocket import WebSocketTransport

__all__ = [
    "WsClient",
    "WsRequest",
    "ConnectionManager",
    "ConnectionState",
    "RequestLedger",
    "BaseTransport",
    "DummyTransport",
    "WebSocketTransport",
    "decode_message",
    "populate_commands",
    "populate_datarefs",
]
