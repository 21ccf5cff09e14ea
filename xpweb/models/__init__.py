from .entities import ApiVersions, Capabilities, Command, Dataref, DatarefValue, SimulatorVersion, ValueType
from .messages import (
    CommandActivation,
    CommandStatus,
    CommandUpdateMessage,
    DatarefAssignment,
    DatarefRef,
    DatarefUpdateMessage,
    MessageType,
    PushMessage,
    ResultMessage,
)

__all__ = [
    "ApiVersions",
    "Capabilities",
    "SimulatorVersion",
    "Command",
    "Dataref",
    "DatarefValue",
    "ValueType",
    "CommandActivation",
    "CommandStatus",
    "CommandUpdateMessage",
    "DatarefAssignment",
    "DatarefRef",
    "DatarefUpdateMessage",
    "MessageType",
    "PushMessage",
    "ResultMessage",
]
