"""Websocket frame models: request entries and inbound push messages."""

from __future__ import annotations

import enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, StrictBool, field_validator

from .entities import Command, DatarefValue


class MessageType(str, enum.Enum):
    """Type tags used on the websocket."""

    RESULT = "result"
    DATAREF_SUBSCRIBE = "dataref_subscribe_values"
    DATAREF_UPDATE = "dataref_update_values"
    DATAREF_UNSUBSCRIBE = "dataref_unsubscribe_values"
    DATAREF_SET = "dataref_set_values"
    COMMAND_SUBSCRIBE = "command_subscribe_is_active"
    COMMAND_UNSUBSCRIBE = "command_unsubscribe_is_active"
    COMMAND_UPDATE = "command_update_is_active"
    COMMAND_SET_IS_ACTIVE = "command_set_is_active"


# Outbound request entries


class CommandActivation(BaseModel):
    """Entry of a command_set_is_active request.

    Without a duration the command stays in the requested state indefinitely.
    A duration of zero is an instant toggle; a positive duration holds the
    command for that many seconds before reverting.
    """

    id: int = Field(ge=0)
    is_active: bool
    duration: Optional[float] = None

    def with_duration(self, duration: float) -> CommandActivation:
        self.duration = duration
        return self

    def to_param(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class DatarefRef(BaseModel):
    """Entry of a dataref subscribe/unsubscribe request."""

    id: int = Field(ge=0)
    index: Union[int, List[int], None] = None

    def with_index(self, index: int | List[int]) -> DatarefRef:
        self.index = list(index) if isinstance(index, (list, tuple)) else index
        return self

    def to_param(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class DatarefAssignment(BaseModel):
    """Entry of a dataref_set_values request."""

    id: int = Field(ge=0)
    value: Any
    index: Optional[int] = None

    def with_index(self, index: int) -> DatarefAssignment:
        self.index = index
        return self

    def to_param(self) -> dict[str, Any]:
        param: dict[str, Any] = {"id": self.id, "value": self.value}
        if self.index is not None:
            param["index"] = self.index
        return param


# Inbound push messages


MAX_ENTITY_ID = 2**64 - 1


def _parse_entity_id(key: Any) -> int:
    if isinstance(key, int) and not isinstance(key, bool):
        entity_id = key
    elif isinstance(key, str) and key.isascii() and key.isdecimal():
        entity_id = int(key)
    else:
        raise ValueError(f"entity id key {key!r} is not a decimal integer")
    if not 0 <= entity_id <= MAX_ENTITY_ID:
        raise ValueError(f"entity id key {key!r} is out of range")
    return entity_id


class ResultMessage(BaseModel):
    """Outcome of a previously sent request.

    ``request`` is attached from the request ledger; it stays ``None`` when
    the request was evicted before its result arrived.
    """

    type: Literal["result"] = "result"
    req_id: int = Field(ge=0)
    success: bool
    error_code: str = ""
    error_message: str = ""
    request: Any = Field(default=None, exclude=True)

    @field_validator("error_code", "error_message", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class CommandStatus(BaseModel):
    """Active state of one command in a command_update_is_active message."""

    is_active: StrictBool
    command: Optional[Command] = None


class DatarefUpdateMessage(BaseModel):
    """dataref_update_values push message, keyed by dataref id."""

    type: Literal["dataref_update_values"] = "dataref_update_values"
    data: Dict[int, DatarefValue] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def _decode_data(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {_parse_entity_id(key): DatarefValue(value=raw) for key, raw in value.items()}


class CommandUpdateMessage(BaseModel):
    """command_update_is_active push message, keyed by command id."""

    type: Literal["command_update_is_active"] = "command_update_is_active"
    data: Dict[int, CommandStatus] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def _decode_data(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {_parse_entity_id(key): {"is_active": raw} for key, raw in value.items()}


PushMessage = Union[ResultMessage, DatarefUpdateMessage, CommandUpdateMessage]

__all__ = [
    "MessageType",
    "CommandActivation",
    "DatarefRef",
    "DatarefAssignment",
    "ResultMessage",
    "CommandStatus",
    "DatarefUpdateMessage",
    "CommandUpdateMessage",
    "PushMessage",
]
