"""Listing, pagination and statistics models."""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Optional

from pydantic import Field

from persona.models.base import PersonaModel
from persona.models.entity import Entity, EntityStatus


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


class SortField(StrEnum):
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    NAME = "name"
    EMAIL = "email"
    STATUS = "status"
    IDENTIFICATION_NUMBER = "identificationNumber"
    INQUIRY_ID = "inquiryId"
    APPROVAL_DATE = "approvalDate"
    REJECTION_DATE = "rejectionDate"


# SortField -> Entity attribute
SORTABLE_FIELDS: dict[SortField, str] = {
    SortField.CREATED_AT: "created_at",
    SortField.UPDATED_AT: "updated_at",
    SortField.NAME: "name",
    SortField.EMAIL: "email",
    SortField.STATUS: "status",
    SortField.IDENTIFICATION_NUMBER: "identification_number",
    SortField.INQUIRY_ID: "inquiry_id",
    SortField.APPROVAL_DATE: "approval_date",
    SortField.REJECTION_DATE: "rejection_date",
}

SEARCHABLE_FIELDS = ("name", "email", "identification_number", "inquiry_id")


class EntityQuery(PersonaModel):
    """Filter, sort and page parameters for listing entities."""

    status: Optional[EntityStatus] = None
    search: Optional[str] = None
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def sort_attribute(self) -> str:
        return SORTABLE_FIELDS[self.sort_by]

    def matches(self, entity: Entity) -> bool:
        if self.status is not None and entity.status != self.status:
            return False
        if self.search:
            needle = self.search.lower()
            return any(
                needle in (getattr(entity, attr) or "").lower() for attr in SEARCHABLE_FIELDS
            )
        return True

    def order(self, entities: list[Entity]) -> list[Entity]:
        """Sort by the requested field; missing values sort lowest, ties by id."""
        attr = self.sort_attribute
        by_id = sorted(entities, key=lambda e: e.id)
        return sorted(
            by_id,
            key=lambda e: (getattr(e, attr) is not None, getattr(e, attr) or ""),
            reverse=self.sort_order is SortOrder.DESC,
        )


class Pagination(PersonaModel):
    total_docs: int
    limit: int
    total_pages: int
    page: int
    has_prev_page: bool
    has_next_page: bool
    prev_page: Optional[int] = None
    next_page: Optional[int] = None

    @classmethod
    def build(cls, total_docs: int, page: int, limit: int) -> Pagination:
        total_pages = math.ceil(total_docs / limit)
        has_prev = page > 1
        has_next = page < total_pages
        return cls(
            total_docs=total_docs,
            limit=limit,
            total_pages=total_pages,
            page=page,
            has_prev_page=has_prev,
            has_next_page=has_next,
            prev_page=page - 1 if has_prev else None,
            next_page=page + 1 if has_next else None,
        )


class EntityPage(PersonaModel):
    entities: list[Entity]
    pagination: Pagination


class EntityStats(PersonaModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    under_review: int = 0

    @classmethod
    def from_counts(cls, counts: dict[str, int]) -> EntityStats:
        return cls(
            total=sum(counts.values()),
            pending=counts.get(EntityStatus.PENDING, 0),
            approved=counts.get(EntityStatus.APPROVED, 0),
            rejected=counts.get(EntityStatus.REJECTED, 0),
            under_review=counts.get(EntityStatus.UNDER_REVIEW, 0),
        )
