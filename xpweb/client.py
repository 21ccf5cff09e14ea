"""Top-level client wiring the REST and websocket halves around shared caches."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Type

from xpweb.cache import EntityCache
from xpweb.config import ClientSettings, get_settings
from xpweb.models import Command, Dataref
from xpweb.network.client import WsClient
from xpweb.network.connection import TransportFactory
from xpweb.network.transport.base import BaseTransport
from xpweb.network.transport.dummy import DummyTransport
from xpweb.network.transport.websocket import WebSocketTransport
from xpweb.rest.client import RestClient

LOGGER = logging.getLogger(__name__)


class XPClient:
    """Simulator web API client.

    ``rest`` covers request/response calls, ``ws`` the push-message
    connection. Both read the same command and dataref caches, so loading
    them once serves name lookups on either side::

        client = XPClient()
        client.load_commands()
        client.ws.on_command_update = print
        await client.ws.connect()
        await client.ws.new_request().command_subscribe("sim/operation/pause_toggle").send()
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        *,
        transport_factory: Optional[TransportFactory] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.commands: EntityCache[Command] = EntityCache("command")
        self.datarefs: EntityCache[Dataref] = EntityCache("dataref")
        if transport_factory is None:
            resolved_cls: Type[BaseTransport]
            resolved_cls = WebSocketTransport if self.settings.transport == "websocket" else DummyTransport
            LOGGER.debug("Using %s for push messages", resolved_cls.__name__)
            transport_factory = lambda s: resolved_cls(s)  # noqa: E731
        self.rest = RestClient.from_settings(self.settings, commands=self.commands, datarefs=self.datarefs)
        self.ws = WsClient(
            settings=self.settings,
            transport_factory=transport_factory,
            commands=self.commands,
            datarefs=self.datarefs,
        )

    def load_commands(self) -> None:
        self.rest.load_commands()

    def load_datarefs(self) -> None:
        self.rest.load_datarefs()

    async def reload_caches(self) -> None:
        """Reload both caches off the event loop, e.g. after a simulator restart."""

        await asyncio.gather(
            asyncio.to_thread(self.rest.load_commands),
            asyncio.to_thread(self.rest.load_datarefs),
        )

    def get_command_id(self, name: str) -> int:
        return self.commands.id_for(name)

    def get_dataref_id(self, name: str) -> int:
        return self.datarefs.id_for(name)

    async def close(self) -> None:
        await self.ws.close()
