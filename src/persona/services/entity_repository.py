"""Cache-store coordination for durable entities.

Reads are read-through (``entity:<id>`` then the store, repopulating on miss,
no negative caching). Writes go to the store first and then overwrite the
cache snapshot with a fresh TTL. A cache that cannot be read degrades to the
store; a cache that cannot be written fails the operation.
"""

from __future__ import annotations

import json
import logging

from pydantic import TypeAdapter

from persona.core.exceptions import CacheError, NotFoundError
from persona.core.protocols import ICacheBackend, IEntityStore
from persona.models.entity import Entity, EntityStatus
from persona.models.query import EntityQuery, SortField, SortOrder

logger = logging.getLogger(__name__)

ENTITY_KEY = "entity:{}"
PENDING_LIST_KEY = "entities:pending"
DEFAULT_TTL = 1800

_entity_list = TypeAdapter(list[Entity])


def entity_key(entity_id: str) -> str:
    return ENTITY_KEY.format(entity_id)


class CachedEntityRepository:
    """Durable store fronted by a write-through, read-through cache."""

    def __init__(self, store: IEntityStore, cache: ICacheBackend, ttl: int = DEFAULT_TTL) -> None:
        self._store = store
        self._cache = cache
        self._ttl = ttl

    # ---- cache helpers ----

    def _read_cached(self, key: str) -> str | None:
        try:
            return self._cache.get(key)
        except CacheError:
            logger.warning("Cache read failed for %s, falling back to store", key, exc_info=True)
            return None

    def _write_snapshot(self, entity: Entity) -> None:
        self._cache.setex(entity_key(entity.id), self._ttl, entity.model_dump_json(by_alias=True))

    # ---- reads ----

    def get(self, entity_id: str) -> Entity:
        cached = self._read_cached(entity_key(entity_id))
        if cached is not None:
            return Entity.model_validate_json(cached)

        entity = self._store.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"Entity {entity_id!r} not found")
        try:
            self._write_snapshot(entity)
        except CacheError:
            logger.warning("Could not repopulate cache for entity %s", entity_id, exc_info=True)
        return entity

    def get_fresh(self, entity_id: str) -> Entity:
        """Bypass the cache; used before state transitions."""
        entity = self._store.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"Entity {entity_id!r} not found")
        return entity

    def exists_with_identification_number(self, identification_number: str) -> bool:
        return self._store.find_by_identification_number(identification_number) is not None

    def find(self, query: EntityQuery) -> tuple[list[Entity], int]:
        return self._store.find(query)

    def count_by_status(self) -> dict[str, int]:
        return self._store.count_by_status()

    def pending_queue(self) -> list[Entity]:
        """All PENDING entities, newest first, served from ``entities:pending``."""
        cached = self._read_cached(PENDING_LIST_KEY)
        if cached is not None:
            return _entity_list.validate_json(cached)

        query = EntityQuery(status=EntityStatus.PENDING, sort_by=SortField.CREATED_AT,
                            sort_order=SortOrder.DESC, limit=100)
        pending: list[Entity] = []
        while True:
            page, total = self._store.find(query)
            pending.extend(page)
            if len(pending) >= total or not page:
                break
            query = query.model_copy(update={"page": query.page + 1})
        try:
            self._write_pending(pending)
        except CacheError:
            logger.warning("Could not repopulate cache for the pending queue", exc_info=True)
        return pending

    def _write_pending(self, pending: list[Entity]) -> None:
        payload = json.dumps([e.model_dump(mode="json", by_alias=True) for e in pending])
        self._cache.setex(PENDING_LIST_KEY, self._ttl, payload)

    # ---- writes ----

    def create(self, entity: Entity) -> Entity:
        self._store.insert(entity)
        self._write_snapshot(entity)
        cached = self._read_cached(PENDING_LIST_KEY)
        if cached is not None:
            self._write_pending([entity, *_entity_list.validate_json(cached)])
        logger.info("Created entity %s (%s)", entity.id, entity.identification_number)
        return entity

    def save(self, entity: Entity, previous_status: EntityStatus | None = None) -> Entity:
        self._store.update(entity)
        self._write_snapshot(entity)
        # Any change to a pending entity makes the denormalized list stale.
        if EntityStatus.PENDING in (previous_status, entity.status):
            self._cache.delete(PENDING_LIST_KEY)
        return entity

    def remove(self, entity_id: str) -> None:
        if not self._store.delete(entity_id):
            raise NotFoundError(f"Entity {entity_id!r} not found")
        self._cache.delete(entity_key(entity_id))
        self._cache.delete(PENDING_LIST_KEY)
        logger.info("Deleted entity %s", entity_id)
