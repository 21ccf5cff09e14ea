"""Bounded store of outstanding websocket requests awaiting a result."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Dict, Optional

from xpweb.models import ResultMessage

if TYPE_CHECKING:
    from xpweb.network.request import WsRequest

LOGGER = logging.getLogger(__name__)

DEFAULT_LEDGER_MAX = 1000


class RequestLedger:
    """Maps request ids to the request that produced them.

    The capacity is a memory bound, not a delivery guarantee: when it is
    exceeded the lowest ids are dropped, and a late result for a dropped id
    reaches handlers without its request attached.
    """

    def __init__(self, max_entries: int = DEFAULT_LEDGER_MAX) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._requests: Dict[int, WsRequest] = {}
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def add(self, request: WsRequest) -> None:
        with self._lock:
            self._requests[request.req_id] = request
            overflow = len(self._requests) - self._max_entries
            if overflow <= 0:
                return
            evicted = sorted(self._requests)[:overflow]
            for req_id in evicted:
                del self._requests[req_id]
        LOGGER.debug("Request ledger full; evicted %s oldest request(s) up to id=%s", overflow, evicted[-1])

    def get(self, req_id: int) -> Optional[WsRequest]:
        with self._lock:
            return self._requests.get(req_id)

    def remove(self, req_id: int) -> None:
        with self._lock:
            self._requests.pop(req_id, None)

    def pop(self, req_id: int) -> Optional[WsRequest]:
        with self._lock:
            return self._requests.pop(req_id, None)

    def apply_to_result(self, result: ResultMessage) -> None:
        """Move the matching request out of the ledger and onto ``result``."""

        request = self.pop(result.req_id)
        if request is not None:
            result.request = request

    def clear(self) -> None:
        with self._lock:
            self._requests.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._requests)

    def __contains__(self, req_id: object) -> bool:
        with self._lock:
            return req_id in self._requests
