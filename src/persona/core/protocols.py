"""Protocol interfaces for the collaborators the workflow engines depend on.

Engines receive these through their constructors; production wiring lives in
``persona.persistence.create_persistence`` and tests use the memory backends.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from persona.models.entity import Entity
from persona.models.notification import NotificationKind
from persona.models.query import EntityQuery


# ---------------------------------------------------------------------------
# Persistence: Cache Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible cache interface."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# Persistence: Durable Entity Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IEntityStore(Protocol):
    """Durable store for finalized entities.

    ``insert`` and ``update`` enforce uniqueness of identificationNumber and
    inquiryId and raise ``DuplicateIdentifierError`` on conflict.
    """

    def insert(self, entity: Entity) -> Entity: ...

    def find_by_id(self, entity_id: str) -> Entity | None: ...

    def find_by_identification_number(self, identification_number: str) -> Entity | None: ...

    def find(self, query: EntityQuery) -> tuple[list[Entity], int]: ...

    def update(self, entity: Entity) -> Entity: ...

    def delete(self, entity_id: str) -> bool: ...

    def count_by_status(self) -> dict[str, int]: ...


# ---------------------------------------------------------------------------
# Persistence: Document Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IDocumentStore(Protocol):
    """S3-compatible binary storage for uploaded files."""

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str: ...

    def get(self, key: str) -> bytes: ...

    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

@runtime_checkable
class INotifier(Protocol):
    """Delivers approval outcomes to the entity's contact email."""

    def notify(self, kind: NotificationKind, recipient: str, details: dict[str, Any]) -> None: ...
