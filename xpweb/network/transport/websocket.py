"""WebSocket transport implementation."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import websockets
from websockets.asyncio.client import ClientConnection
from websockets.exceptions import ConnectionClosed, WebSocketException

from xpweb.config import ClientSettings
from xpweb.errors import NotConnected, TransportClosed, TransportError
from xpweb.network.transport.base import BaseTransport, Frame

LOGGER = logging.getLogger(__name__)

_RESET_ERRORS = (ConnectionResetError, ConnectionAbortedError, BrokenPipeError)


class WebSocketTransport(BaseTransport):
    """WebSocket-based push-message transport."""

    def __init__(self, settings: ClientSettings) -> None:
        self._settings = settings
        self._ws: Optional[ClientConnection] = None

    async def connect(self, url: str, origin: str) -> None:
        LOGGER.info("Connecting to simulator WebSocket at %s", url)
        try:
            self._ws = await websockets.connect(
                url,
                origin=origin,
                open_timeout=self._settings.ws_open_timeout_seconds,
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            raise TransportError(f"failed to dial {url}: {exc}") from exc

    async def send(self, frame: str) -> None:
        if not self._ws:
            raise NotConnected("WebSocket transport not connected")
        LOGGER.debug("WebSocket send: %s", frame)
        try:
            await self._ws.send(frame)
        except (ConnectionClosed, *_RESET_ERRORS) as exc:
            raise TransportClosed(str(exc)) from exc
        except (OSError, WebSocketException) as exc:
            raise TransportError(str(exc)) from exc

    async def receive(self) -> Frame:
        if not self._ws:
            raise NotConnected("WebSocket transport not connected")
        try:
            raw = await self._ws.recv()
        except (ConnectionClosed, *_RESET_ERRORS) as exc:
            raise TransportClosed(str(exc)) from exc
        except (OSError, WebSocketException) as exc:
            raise TransportError(str(exc)) from exc
        LOGGER.debug("WebSocket receive: %s", raw)
        return raw

    async def close(self) -> None:
        if self._ws:
            LOGGER.info("Closing WebSocket transport")
            ws, self._ws = self._ws, None
            try:
                await ws.close()
            except (OSError, WebSocketException):
                LOGGER.debug("Suppress WebSocket close error", exc_info=True)
