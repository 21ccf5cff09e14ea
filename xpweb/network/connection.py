"""Connection manager that owns the push-message transport lifecycle."""

from __future__ import annotations

import asyncio
import contextlib
import enum
import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

from xpweb.config import ClientSettings
from xpweb.errors import NotConnected, TransportClosed, TransportError
from xpweb.network.transport.base import BaseTransport, Frame

LOGGER = logging.getLogger(__name__)

FrameHandler = Callable[[Frame], Union[Awaitable[None], None]]
TransportFactory = Callable[[ClientSettings], BaseTransport]


class ConnectionState(enum.Enum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    RECONNECTING = "RECONNECTING"
    CLOSED = "CLOSED"


class ConnectionManager:
    """Keeps one transport open and feeds its inbound frames to a handler.

    ``connect`` dials once and reports failure to the caller. Once a live
    connection drops, a single background task redials at a fixed interval
    until it succeeds or ``close`` is called.
    """

    def __init__(
        self,
        settings: ClientSettings,
        transport_factory: TransportFactory,
        *,
        on_frame: Optional[FrameHandler] = None,
        on_disconnect: Optional[Callable[[Exception], Awaitable[None]]] = None,
        on_reconnect: Optional[Callable[[int], Awaitable[None]]] = None,
        reconnect_interval: float | None = None,
    ) -> None:
        self._settings = settings
        self._transport_factory = transport_factory
        self._url = settings.resolved_ws_url()
        self._origin = settings.rest_origin()
        self._on_frame = on_frame
        self._on_disconnect = on_disconnect
        self._on_reconnect = on_reconnect
        self._reconnect_interval = float(
            reconnect_interval if reconnect_interval is not None else settings.reconnect_interval_seconds
        )
        self._read_error_backoff = float(settings.read_error_backoff_seconds)
        self._transport: Optional[BaseTransport] = None
        self._read_task: Optional[asyncio.Task[None]] = None
        self._reconnect_task: Optional[asyncio.Task[None]] = None
        self._connect_lock = asyncio.Lock()
        self._state = ConnectionState.DISCONNECTED

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._transport is not None

    @property
    def reconnecting(self) -> bool:
        return self._reconnect_task is not None and not self._reconnect_task.done()

    @property
    def url(self) -> str:
        return self._url

    async def connect(self) -> None:
        """Open a fresh transport, replacing any open one, and start reading."""

        if asyncio.current_task() is not self._reconnect_task:
            await self._cancel_reconnect()
        async with self._connect_lock:
            await self._teardown()
            self._state = ConnectionState.CONNECTING
            try:
                transport = self._transport_factory(self._settings)
                await transport.connect(self._url, self._origin)
            except TransportError:
                self._state = ConnectionState.DISCONNECTED
                raise
            except Exception as exc:  # noqa: BLE001
                self._state = ConnectionState.DISCONNECTED
                raise TransportError(f"failed to dial {self._url}: {exc}") from exc
            self._transport = transport
            self._state = ConnectionState.CONNECTED
            self._read_task = asyncio.create_task(self._read_loop(transport), name="xpweb-read")
        LOGGER.info("Connected to %s", self._url)

    async def close(self) -> None:
        """Stop reconnecting, close the transport and wait for the read loop to exit."""

        self._state = ConnectionState.CLOSED
        await self._cancel_reconnect()
        async with self._connect_lock:
            await self._teardown()
        self._state = ConnectionState.CLOSED

    async def send(self, frame: str) -> None:
        transport = self._transport
        if transport is None:
            raise NotConnected("no open connection")
        try:
            await transport.send(frame)
        except TransportError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise TransportError(str(exc)) from exc

    async def _teardown(self) -> None:
        read_task, self._read_task = self._read_task, None
        transport, self._transport = self._transport, None
        if read_task and read_task is not asyncio.current_task() and not read_task.done():
            read_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await read_task
        if transport:
            await self._close_quietly(transport)

    async def _cancel_reconnect(self) -> None:
        task, self._reconnect_task = self._reconnect_task, None
        if task and task is not asyncio.current_task() and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    @staticmethod
    async def _close_quietly(transport: BaseTransport) -> None:
        try:
            await transport.close()
        except Exception:  # noqa: BLE001
            LOGGER.debug("Suppress transport close error", exc_info=True)

    async def _read_loop(self, transport: BaseTransport) -> None:
        while self._transport is transport:
            try:
                frame = await transport.receive()
            except asyncio.CancelledError:
                raise
            except (TransportClosed, NotConnected) as exc:
                if self._transport is transport:
                    await self._handle_connection_lost(transport, exc)
                return
            except TransportError as exc:
                LOGGER.warning("Failed to read message: %s", exc)
                await asyncio.sleep(self._read_error_backoff)
                continue
            await self._handle_frame(frame)

    async def _handle_frame(self, frame: Frame) -> None:
        if self._on_frame is None:
            return
        try:
            result = self._on_frame(frame)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:  # noqa: BLE001
            LOGGER.exception("Failed to process inbound frame")

    async def _handle_connection_lost(self, transport: BaseTransport, exc: Exception) -> None:
        LOGGER.warning("Connection to %s lost: %s", self._url, exc)
        self._transport = None
        if self._read_task is asyncio.current_task():
            self._read_task = None
        await self._close_quietly(transport)
        if self._on_disconnect:
            try:
                await self._on_disconnect(exc)
            except Exception:  # noqa: BLE001
                LOGGER.debug("Suppress disconnect callback error", exc_info=True)
        self._start_reconnect()

    def _start_reconnect(self) -> None:
        if self._state is ConnectionState.CLOSED or self.reconnecting:
            return
        self._state = ConnectionState.RECONNECTING
        self._reconnect_task = asyncio.create_task(self._reconnect_loop(), name="xpweb-reconnect")

    async def _reconnect_loop(self) -> None:
        attempt = 0
        while self._state is not ConnectionState.CLOSED:
            attempt += 1
            try:
                await self.connect()
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                if self._state is ConnectionState.CLOSED:
                    return
                self._state = ConnectionState.RECONNECTING
                LOGGER.warning(
                    "Failed to re-establish connection (attempt %s): %s; retrying in %.2fs",
                    attempt,
                    exc,
                    self._reconnect_interval,
                )
                await asyncio.sleep(self._reconnect_interval)
                continue
            LOGGER.info("Connection re-established after %s attempt(s)", attempt)
            if self._reconnect_task is asyncio.current_task():
                self._reconnect_task = None
            if self._on_reconnect:
                try:
                    await self._on_reconnect(attempt)
                except Exception:  # noqa: BLE001
                    LOGGER.debug("Suppress reconnect callback error", exc_info=True)
            return
