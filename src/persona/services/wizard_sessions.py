"""Cache-only storage for in-progress wizard records (``temp_entity:<tempId>``)."""

from __future__ import annotations

from persona.core.exceptions import SessionExpiredError
from persona.core.protocols import ICacheBackend
from persona.models.wizard import InProgressEntity

TEMP_ENTITY_KEY = "temp_entity:{}"
DEFAULT_TTL = 1800


def temp_entity_key(temp_id: str) -> str:
    return TEMP_ENTITY_KEY.format(temp_id)


class WizardSessionStore:
    """Every save rewrites the whole record and restarts its TTL."""

    def __init__(self, cache: ICacheBackend, ttl: int = DEFAULT_TTL) -> None:
        self._cache = cache
        self._ttl = ttl

    def load(self, temp_id: str) -> InProgressEntity:
        raw = self._cache.get(temp_entity_key(temp_id))
        if raw is None:
            raise SessionExpiredError(temp_id)
        return InProgressEntity.model_validate_json(raw)

    def save(self, temp_id: str, record: InProgressEntity) -> None:
        self._cache.setex(temp_entity_key(temp_id), self._ttl, record.model_dump_json(by_alias=True))

    def discard(self, temp_id: str) -> None:
        self._cache.delete(temp_entity_key(temp_id))
