"""Transport abstraction for the push-message connection."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Union

Frame = Union[str, bytes]


class BaseTransport(ABC):
    """Duplex message channel used by the connection manager.

    Implementations raise :class:`xpweb.errors.TransportClosed` when the peer
    closed or reset the connection and :class:`xpweb.errors.TransportError`
    for any other IO failure.
    """

    @abstractmethod
    async def connect(self, url: str, origin: str) -> None:
        ...

    @abstractmethod
    async def send(self, frame: str) -> None:
        ...

    @abstractmethod
    async def receive(self) -> Frame:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...
