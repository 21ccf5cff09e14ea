"""Outbound websocket requests.

A request is created through :meth:`WsClient.new_request`, which stamps the
next request id, and is then given a type and params by one builder method::

    await ws.new_request().command_set_is_active(
        ws.command("sim/electrical/battery_1_on", True).with_duration(0),
    ).send()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Union

from xpweb.models import CommandActivation, DatarefAssignment, DatarefRef, MessageType

if TYPE_CHECKING:
    from xpweb.network.client import WsClient

ALL = "all"

CommandKey = Union[str, int]


@dataclass
class WsRequest:
    """A single request frame: ``{"req_id", "type", "params"}``."""

    req_id: int
    type: Optional[str] = None
    params: Any = None
    client: Optional[WsClient] = field(default=None, repr=False, compare=False)

    def command_set_is_active(self, *commands: CommandActivation) -> WsRequest:
        self.type = MessageType.COMMAND_SET_IS_ACTIVE.value
        self.params = {"commands": [command.to_param() for command in commands]}
        return self

    def command_subscribe(self, *commands: CommandKey) -> WsRequest:
        """Subscribe to active-state updates; names resolve through the command cache."""

        self.type = MessageType.COMMAND_SUBSCRIBE.value
        self.params = {"commands": [{"id": self._command_id(command)} for command in commands]}
        return self

    def command_unsubscribe(self, *commands: CommandKey) -> WsRequest:
        self.type = MessageType.COMMAND_UNSUBSCRIBE.value
        self.params = {"commands": [{"id": self._command_id(command)} for command in commands]}
        return self

    def command_unsubscribe_all(self) -> WsRequest:
        self.type = MessageType.COMMAND_UNSUBSCRIBE.value
        self.params = {"commands": ALL}
        return self

    def dataref_subscribe(self, *datarefs: DatarefRef) -> WsRequest:
        self.type = MessageType.DATAREF_SUBSCRIBE.value
        self.params = {"datarefs": [dataref.to_param() for dataref in datarefs]}
        return self

    def dataref_unsubscribe(self, *datarefs: DatarefRef) -> WsRequest:
        self.type = MessageType.DATAREF_UNSUBSCRIBE.value
        self.params = {"datarefs": [dataref.to_param() for dataref in datarefs]}
        return self

    def dataref_unsubscribe_all(self) -> WsRequest:
        self.type = MessageType.DATAREF_UNSUBSCRIBE.value
        self.params = {"datarefs": ALL}
        return self

    def dataref_set(self, *values: DatarefAssignment) -> WsRequest:
        self.type = MessageType.DATAREF_SET.value
        self.params = {"datarefs": [value.to_param() for value in values]}
        return self

    def to_frame(self) -> dict[str, Any]:
        return {"req_id": self.req_id, "type": self.type, "params": self.params}

    async def send(self) -> None:
        """Record the request in the client's ledger and write it to the connection."""

        if self.client is None:
            raise RuntimeError("Request is not bound to a client")
        await self.client.send(self)

    def _command_id(self, command: CommandKey) -> int:
        if isinstance(command, int):
            return command
        if self.client is None:
            raise RuntimeError("Command names can only be resolved on a client-bound request")
        return self.client.commands.id_for(command)
