"""Websocket client facade: request dispatch and push-message routing."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Iterator, Optional, TypeVar, Union

from xpweb.cache import EntityCache
from xpweb.config import ClientSettings
from xpweb.errors import DecodeError
from xpweb.models import (
    Command,
    CommandActivation,
    CommandUpdateMessage,
    Dataref,
    DatarefAssignment,
    DatarefRef,
    DatarefUpdateMessage,
    PushMessage,
    ResultMessage,
)
from xpweb.network.codec import decode_message, encode_frame
from xpweb.network.connection import ConnectionManager, ConnectionState, TransportFactory
from xpweb.network.ledger import RequestLedger
from xpweb.network.request import WsRequest
from xpweb.network.transport.base import Frame

LOGGER = logging.getLogger(__name__)

M = TypeVar("M")
Handler = Callable[[M], Union[Awaitable[None], None]]
ResultHandler = Handler[ResultMessage]
DatarefUpdateHandler = Handler[DatarefUpdateMessage]
CommandUpdateHandler = Handler[CommandUpdateMessage]


def populate_datarefs(message: DatarefUpdateMessage, datarefs: EntityCache[Dataref]) -> None:
    """Attach cached datarefs to each value; unknown ids keep ``dataref=None``."""

    for dataref_id, value in message.data.items():
        dataref = datarefs.lookup_by_id(dataref_id)
        value.dataref = dataref
        value.value_type = dataref.value_type if dataref else None


def populate_commands(message: CommandUpdateMessage, commands: EntityCache[Command]) -> None:
    """Attach cached commands to each status; unknown ids keep ``command=None``."""

    for command_id, status in message.data.items():
        status.command = commands.lookup_by_id(command_id)


@dataclass
class WsClient:
    """Sends requests over the managed connection and routes push messages.

    Handlers may be plain or async callables. They run on the read loop, so
    long blocking work inside a handler delays every later message.
    """

    settings: ClientSettings
    transport_factory: TransportFactory
    commands: EntityCache[Command] = field(default_factory=lambda: EntityCache("command"))
    datarefs: EntityCache[Dataref] = field(default_factory=lambda: EntityCache("dataref"))
    on_result: Optional[ResultHandler] = None
    on_dataref_update: Optional[DatarefUpdateHandler] = None
    on_command_update: Optional[CommandUpdateHandler] = None

    ledger: RequestLedger = field(init=False, repr=False)
    connection: ConnectionManager = field(init=False, repr=False)
    _message_counter: Iterator[int] = field(default_factory=lambda: count(1), init=False, repr=False)

    def __post_init__(self) -> None:
        self.ledger = RequestLedger(self.settings.request_ledger_max)
        self.connection = ConnectionManager(
            self.settings,
            self.transport_factory,
            on_frame=self._handle_frame,
        )

    @property
    def connected(self) -> bool:
        return self.connection.connected

    @property
    def state(self) -> ConnectionState:
        return self.connection.state

    async def connect(self) -> None:
        await self.connection.connect()

    async def close(self) -> None:
        await self.connection.close()

    def new_request(self) -> WsRequest:
        """Return an empty request stamped with the next request id."""

        return WsRequest(req_id=next(self._message_counter), client=self)

    async def send(self, request: WsRequest) -> None:
        """Record ``request`` in the ledger and write it to the connection.

        The ledger entry is kept when the write fails; it ages out through
        the ledger's capacity bound.
        """

        self.ledger.add(request)
        await self.connection.send(encode_frame(request.to_frame()))

    # Entry helpers resolving names through the caches; unknown names map to id 0
    # and the simulator reports the failure in the request's result.

    def command(self, name: str, is_active: bool) -> CommandActivation:
        return CommandActivation(id=self.commands.id_for(name), is_active=is_active)

    def dataref(self, name: str) -> DatarefRef:
        return DatarefRef(id=self.datarefs.id_for(name))

    def dataref_value(self, name: str, value: Any) -> DatarefAssignment:
        return DatarefAssignment(id=self.datarefs.id_for(name), value=value)

    async def _handle_frame(self, frame: Frame) -> None:
        try:
            message = decode_message(frame)
        except DecodeError as exc:
            LOGGER.warning("Failed to decode incoming message: %s", exc)
            return
        await self._dispatch(message)

    async def _dispatch(self, message: PushMessage) -> None:
        if isinstance(message, ResultMessage):
            self.ledger.apply_to_result(message)
            if not message.success:
                LOGGER.debug(
                    "Request %s failed: %s %s",
                    message.req_id,
                    message.error_code,
                    message.error_message,
                )
            await self._invoke(self.on_result, message)
        elif isinstance(message, DatarefUpdateMessage):
            populate_datarefs(message, self.datarefs)
            await self._invoke(self.on_dataref_update, message)
        elif isinstance(message, CommandUpdateMessage):
            populate_commands(message, self.commands)
            await self._invoke(self.on_command_update, message)

    @staticmethod
    async def _invoke(handler: Optional[Handler[Any]], message: Any) -> None:
        if handler is None:
            LOGGER.debug("No handler registered for %s", message.type)
            return
        result = handler(message)
        if inspect.isawaitable(result):
            await result
