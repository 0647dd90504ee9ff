"""Shared unit-test fixtures: in-memory backends wired into the engines."""

from __future__ import annotations

from typing import Any

import pytest

from persona.core.config import WorkflowConfig
from persona.models.entity import Entity, EntityStatus
from persona.services.container import build_services
from tests.fakes import (
    FakeClock,
    MemoryCacheBackend,
    MemoryDocumentStore,
    MemoryEntityStore,
    MemoryNotifier,
)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return MemoryCacheBackend(clock=clock)


@pytest.fixture
def store():
    return MemoryEntityStore()


@pytest.fixture
def documents():
    return MemoryDocumentStore()


@pytest.fixture
def notifier():
    return MemoryNotifier()


@pytest.fixture
def services(store, cache, documents, notifier):
    return build_services(
        store=store,
        cache=cache,
        documents=documents,
        notifier=notifier,
        workflow=WorkflowConfig(max_file_size=1024, max_documents_per_upload=3),
    )


def entity_fields(**overrides: Any) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "id": "e-1",
        "name": "Ada Lovelace",
        "identification_number": "ID-10001",
        "inquiry_id": "INQ-1-abc",
        "email": "ada@example.com",
        "phone": "555-0100",
        "address": {
            "street": "12 Analytical Way",
            "city": "London",
            "state": "Greater London",
            "country": "UK",
            "postal_code": "NW1",
        },
        "status": EntityStatus.PENDING,
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def make_entity():
    """Factory building a valid ``Entity``; keyword overrides replace fields."""

    def _make(**overrides: Any) -> Entity:
        return Entity.model_validate(entity_fields(**overrides))

    return _make
