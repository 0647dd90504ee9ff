"""Post-commit notification events."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from persona.core.ids import utcnow


class NotificationKind(StrEnum):
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationEvent(BaseModel):
    """An approval outcome waiting to be delivered to the entity's email."""

    kind: NotificationKind
    recipient: str
    entity_id: str
    details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
