"""Client library for the X-Plane 12 web API (REST and websocket)."""

from xpweb.cache import EntityCache
from xpweb.client import XPClient
from xpweb.config import ClientSettings, configure_logging, get_settings
from xpweb.errors import (
    ApiError,
    DecodeError,
    MalformedMessage,
    NotConnected,
    RestRequestError,
    TransportClosed,
    TransportError,
    UnknownEntity,
    UnknownMessageType,
    XPWebError,
)
from xpweb.models import (
    Capabilities,
    Command,
    CommandActivation,
    CommandStatus,
    CommandUpdateMessage,
    Dataref,
    DatarefAssignment,
    DatarefRef,
    DatarefUpdateMessage,
    DatarefValue,
    ResultMessage,
    ValueType,
)
from xpweb.network import ConnectionState, WsClient, WsRequest
from xpweb.rest import RestClient

__all__ = [
    "XPClient",
    "RestClient",
    "WsClient",
    "WsRequest",
    "ConnectionState",
    "EntityCache",
    "ClientSettings",
    "configure_logging",
    "get_settings",
    "Capabilities",
    "Command",
    "CommandActivation",
    "CommandStatus",
    "CommandUpdateMessage",
    "Dataref",
    "DatarefAssignment",
    "DatarefRef",
    "DatarefUpdateMessage",
    "DatarefValue",
    "ResultMessage",
    "ValueType",
    "XPWebError",
    "TransportError",
    "TransportClosed",
    "NotConnected",
    "DecodeError",
    "MalformedMessage",
    "UnknownMessageType",
    "UnknownEntity",
    "ApiError",
    "RestRequestError",
]
