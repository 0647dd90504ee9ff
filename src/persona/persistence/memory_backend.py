"""In-memory backends for unit tests and local runs."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable

from persona.core.exceptions import DuplicateIdentifierError, NotFoundError, NotificationError
from persona.models.entity import Entity
from persona.models.notification import NotificationKind
from persona.models.query import EntityQuery


class MemoryCacheBackend:
    """Dict-backed ICacheBackend for unit tests. Honors TTLs against ``clock``."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._store: dict[str, tuple[str, float]] = {}

    def get(self, key: str) -> str | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._store[key]
            return None
        return value

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._store[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def ttl(self, key: str) -> int:
        if self.get(key) is None:
            return -2
        return int(self._store[key][1] - self._clock())

    def ping(self) -> bool:
        return True


class MemoryEntityStore:
    """Dict-backed IEntityStore with the same uniqueness rules as DynamoDB."""

    def __init__(self) -> None:
        self._entities: dict[str, str] = {}
        self._lock = threading.Lock()

    def _load(self, raw: str) -> Entity:
        return Entity.model_validate_json(raw)

    def _all(self) -> list[Entity]:
        return [self._load(raw) for raw in self._entities.values()]

    def _check_unique(self, entity: Entity) -> None:
        for other in self._all():
            if other.id == entity.id:
                continue
            if other.identification_number == entity.identification_number:
                raise DuplicateIdentifierError("identificationNumber", entity.identification_number)
            if other.inquiry_id == entity.inquiry_id:
                raise DuplicateIdentifierError("inquiryId", entity.inquiry_id)

    def insert(self, entity: Entity) -> Entity:
        with self._lock:
            if entity.id in self._entities:
                raise DuplicateIdentifierError("id", entity.id)
            self._check_unique(entity)
            self._entities[entity.id] = entity.model_dump_json()
        return entity

    def find_by_id(self, entity_id: str) -> Entity | None:
        raw = self._entities.get(entity_id)
        return self._load(raw) if raw is not None else None

    def find_by_identification_number(self, identification_number: str) -> Entity | None:
        for entity in self._all():
            if entity.identification_number == identification_number:
                return entity
        return None

    def find(self, query: EntityQuery) -> tuple[list[Entity], int]:
        matched = query.order([e for e in self._all() if query.matches(e)])
        return matched[query.skip:query.skip + query.limit], len(matched)

    def update(self, entity: Entity) -> Entity:
        with self._lock:
            if entity.id not in self._entities:
                raise NotFoundError(f"Entity {entity.id!r} not found")
            self._check_unique(entity)
            self._entities[entity.id] = entity.model_dump_json()
        return entity

    def delete(self, entity_id: str) -> bool:
        with self._lock:
            return self._entities.pop(entity_id, None) is not None

    def count_by_status(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for entity in self._all():
            counts[entity.status.value] = counts.get(entity.status.value, 0) + 1
        return counts


class MemoryDocumentStore:
    """Dict-backed IDocumentStore for unit tests."""

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        self._files[key] = data
        self.content_types[key] = content_type
        return key

    def get(self, key: str) -> bytes:
        try:
            return self._files[key]
        except KeyError:
            raise NotFoundError(f"File {key!r} not found") from None

    def delete(self, key: str) -> None:
        self._files.pop(key, None)
        self.content_types.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._files)


class MemoryNotifier:
    """Recording INotifier; ``fail=True`` makes every delivery raise."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[NotificationKind, str, dict[str, Any]]] = []
        self.attempts = 0

    def notify(self, kind: NotificationKind, recipient: str, details: dict[str, Any]) -> None:
        self.attempts += 1
        if self.fail:
            raise NotificationError(f"Delivery of {kind} notification to {recipient} failed")
        self.sent.append((kind, recipient, details))
