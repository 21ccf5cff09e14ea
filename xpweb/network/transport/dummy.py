"""In-memory transport for offline use and tests."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional, Union

from xpweb.errors import NotConnected, TransportClosed
from xpweb.network.transport.base import BaseTransport, Frame

LOGGER = logging.getLogger(__name__)


class DummyTransport(BaseTransport):
    """Transport whose inbound frames are fed by the caller.

    ``feed`` queues a frame for ``receive``; ``fail`` queues an exception that
    ``receive`` raises instead, e.g. ``TransportClosed`` to simulate a reset.
    Outbound frames are kept in ``sent``.
    """

    def __init__(self, settings=None) -> None:
        self._settings = settings
        self._inbound: asyncio.Queue[Union[Frame, BaseException]] = asyncio.Queue()
        self.sent: list[str] = []
        self.url: Optional[str] = None
        self.origin: Optional[str] = None
        self.connected = False
        self.close_calls = 0

    async def connect(self, url: str, origin: str) -> None:
        LOGGER.debug("Dummy transport connect(%s, origin=%s)", url, origin)
        self.url = url
        self.origin = origin
        self.connected = True

    async def send(self, frame: str) -> None:
        if not self.connected:
            raise NotConnected("Dummy transport not connected")
        LOGGER.debug("Dummy transport send(): %s", frame)
        self.sent.append(frame)

    async def receive(self) -> Frame:
        if not self.connected:
            raise NotConnected("Dummy transport not connected")
        item = await self._inbound.get()
        if isinstance(item, BaseException):
            if isinstance(item, TransportClosed):
                self.connected = False
            raise item
        return item

    async def close(self) -> None:
        LOGGER.debug("Dummy transport close()")
        self.close_calls += 1
        self.connected = False

    def feed(self, frame: Union[Frame, dict[str, Any]]) -> None:
        if isinstance(frame, dict):
            frame = json.dumps(frame)
        self._inbound.put_nowait(frame)

    def fail(self, exc: BaseException) -> None:
        self._inbound.put_nowait(exc)

    def sent_frames(self) -> list[dict[str, Any]]:
        return [json.loads(frame) for frame in self.sent]
