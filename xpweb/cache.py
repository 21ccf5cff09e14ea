"""Id/name lookup cache for simulator entities."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Generic, Iterable, Mapping, Optional, Protocol, TypeVar

LOGGER = logging.getLogger(__name__)

NOT_FOUND_ID = 0


class Entity(Protocol):
    @property
    def id(self) -> int: ...

    @property
    def name(self) -> str: ...


E = TypeVar("E", bound=Entity)


@dataclass(frozen=True)
class _Snapshot(Generic[E]):
    by_id: Mapping[int, E] = field(default_factory=lambda: MappingProxyType({}))
    by_name: Mapping[str, E] = field(default_factory=lambda: MappingProxyType({}))
    loaded: bool = False


class EntityCache(Generic[E]):
    """Bidirectional id/name lookup for one entity kind.

    Both maps live in one immutable snapshot. ``reload`` builds the new
    snapshot without holding the lock and publishes it in a single
    assignment, so a reader sees either the whole old set or the whole new
    one.
    """

    def __init__(self, kind: str) -> None:
        self._kind = kind
        self._snapshot: _Snapshot[E] = _Snapshot()
        self._lock = threading.Lock()

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def loaded(self) -> bool:
        return self._current().loaded

    def reload(self, entities: Iterable[E]) -> None:
        """Replace the cached entities wholesale."""

        by_id: dict[int, E] = {}
        by_name: dict[str, E] = {}
        for entity in entities:
            by_id[entity.id] = entity
            by_name[entity.name] = entity
        snapshot = _Snapshot(
            by_id=MappingProxyType(by_id),
            by_name=MappingProxyType(by_name),
            loaded=True,
        )
        with self._lock:
            self._snapshot = snapshot
        LOGGER.debug("Reloaded %s cache with %s entries", self._kind, len(by_id))

    def lookup_by_id(self, entity_id: int) -> Optional[E]:
        return self._current().by_id.get(entity_id)

    def lookup_by_name(self, name: str) -> Optional[E]:
        return self._current().by_name.get(name)

    def id_for(self, name: str) -> int:
        """Return the id for ``name`` or 0 when it is not cached."""

        entity = self.lookup_by_name(name)
        if entity is None:
            return NOT_FOUND_ID
        return entity.id

    def snapshot(self) -> tuple[Mapping[int, E], Mapping[str, E]]:
        """Return the current (by_id, by_name) maps as one consistent pair."""

        current = self._current()
        return current.by_id, current.by_name

    def _current(self) -> _Snapshot[E]:
        with self._lock:
            return self._snapshot

    def __len__(self) -> int:
        return len(self._current().by_id)

    def __contains__(self, name: object) -> bool:
        return name in self._current().by_name
