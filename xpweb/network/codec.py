"""Decoding of inbound websocket frames into typed push messages.

Decoding happens in two phases: the ``type`` tag is read first, then the
whole frame is validated against the model registered for that tag. The
codec never consults the entity caches; enrichment is done by the client
after a frame decodes.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Type, Union

from pydantic import BaseModel, ValidationError

from xpweb.errors import MalformedMessage, UnknownMessageType
from xpweb.models import (
    CommandUpdateMessage,
    DatarefUpdateMessage,
    MessageType,
    PushMessage,
    ResultMessage,
)

RawFrame = Union[str, bytes, bytearray, Dict[str, Any]]

DECODERS: Dict[str, Type[BaseModel]] = {
    MessageType.RESULT.value: ResultMessage,
    MessageType.DATAREF_UPDATE.value: DatarefUpdateMessage,
    MessageType.COMMAND_UPDATE.value: CommandUpdateMessage,
}


def load_frame(raw: RawFrame) -> Dict[str, Any]:
    """Parse a raw frame into a JSON object."""

    if isinstance(raw, dict):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedMessage("frame is not valid UTF-8") from exc
    try:
        obj = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedMessage(f"frame is not valid JSON: {exc}") from exc
    if not isinstance(obj, dict):
        raise MalformedMessage("frame is not a JSON object")
    return obj


def peek_type(obj: Dict[str, Any]) -> str:
    """Return the frame's type tag."""

    if "type" not in obj:
        raise MalformedMessage("frame does not contain a type key")
    message_type = obj["type"]
    if not isinstance(message_type, str):
        raise MalformedMessage("frame type value is not a string")
    return message_type


def decode_message(raw: RawFrame) -> PushMessage:
    """Decode one inbound frame into its message variant."""

    obj = load_frame(raw)
    message_type = peek_type(obj)
    model = DECODERS.get(message_type)
    if model is None:
        raise UnknownMessageType(message_type)
    try:
        return model.model_validate(obj)  # type: ignore[return-value]
    except ValidationError as exc:
        raise MalformedMessage(f"invalid {message_type} frame: {exc}") from exc


def encode_frame(frame: Dict[str, Any]) -> str:
    return json.dumps(frame, separators=(",", ":"))


__all__ = ["DECODERS", "RawFrame", "decode_message", "encode_frame", "load_frame", "peek_type"]
