"""Approval workflow and general entity management.

Status graph::

    PENDING <-> UNDER_REVIEW --approve--> APPROVED   (terminal)
                             --reject---> REJECTED   (terminal)

APPROVED and REJECTED have no edges out and none between them. Notifications
are published to the outbox only after the new status is persisted.
"""

from __future__ import annotations

import logging
from typing import Any

import pydantic

from persona.core.exceptions import (
    AlreadyApprovedError,
    AlreadyRejectedError,
    InvalidStateError,
    InvalidTransitionError,
    MissingReasonError,
    StorageError,
    ValidationError,
)
from persona.core.ids import new_entity_id, new_inquiry_id, utcnow
from persona.core.protocols import IDocumentStore
from persona.models.entity import Entity, EntityCreate, EntityStatus, EntityUpdate
from persona.models.notification import NotificationEvent, NotificationKind
from persona.models.query import EntityPage, EntityQuery, EntityStats, Pagination
from persona.notifications.outbox import NotificationOutbox
from persona.services.entity_repository import CachedEntityRepository

logger = logging.getLogger(__name__)


class ApprovalWorkflowEngine:
    def __init__(
        self,
        *,
        repository: CachedEntityRepository,
        outbox: NotificationOutbox,
        documents: IDocumentStore | None = None,
    ) -> None:
        self._repository = repository
        self._outbox = outbox
        self._documents = documents

    # ---- create / read ----

    def create(self, data: EntityCreate, actor_id: str | None) -> Entity:
        """Create an entity directly (outside the wizard). Always starts PENDING."""
        now = utcnow()
        fields = data.model_dump(exclude_none=True)
        fields.update(
            id=new_entity_id(),
            inquiry_id=data.inquiry_id or new_inquiry_id(),
            status=EntityStatus.PENDING,
            created_by=actor_id,
            created_at=now,
            updated_at=now,
        )
        return self._repository.create(Entity.model_validate(fields))

    def get(self, entity_id: str) -> Entity:
        return self._repository.get(entity_id)

    def list(self, query: EntityQuery) -> EntityPage:
        entities, total = self._repository.find(query)
        return EntityPage(entities=entities, pagination=Pagination.build(total, query.page, query.limit))

    def stats(self) -> EntityStats:
        return EntityStats.from_counts(self._repository.count_by_status())

    def pending_queue(self) -> list[Entity]:
        return self._repository.pending_queue()

    # ---- edits ----

    def update(self, entity_id: str, changes: EntityUpdate) -> Entity:
        entity = self._repository.get_fresh(entity_id)
        if entity.is_terminal:
            raise InvalidStateError(entity_id, entity.status, "update")

        patch: dict[str, Any] = changes.model_dump(exclude_unset=True)
        target = patch.get("status")
        if target is not None and EntityStatus(target).is_terminal:
            raise InvalidTransitionError(entity_id, entity.status, target)

        merged = entity.model_dump()
        address_patch = patch.pop("address", None)
        if address_patch:
            merged["address"] = {**merged["address"], **{k: v for k, v in address_patch.items() if v is not None}}
        merged.update(patch)
        merged["updated_at"] = utcnow()
        try:
            updated = Entity.model_validate(merged)
        except pydantic.ValidationError as exc:
            raise ValidationError(f"Invalid update for entity {entity_id}: {exc}") from exc

        self._repository.save(updated, previous_status=entity.status)
        logger.info("Updated entity %s (%s)", entity_id, ", ".join(sorted(patch)) or "no fields")
        return updated

    def delete(self, entity_id: str) -> None:
        entity = self._repository.get_fresh(entity_id)
        self._repository.remove(entity_id)
        self._purge_files(entity)

    def _purge_files(self, entity: Entity) -> None:
        if self._documents is None:
            return
        files = list(entity.documents)
        if entity.profile_photo is not None:
            files.append(entity.profile_photo)
        for doc in files:
            try:
                self._documents.delete(doc.path)
            except StorageError:
                logger.warning("Could not remove stored file %s of deleted entity %s",
                               doc.path, entity.id, exc_info=True)

    # ---- approval decisions ----

    def approve(self, entity_id: str, actor_id: str, approval_notes: str | None = None) -> Entity:
        if approval_notes is not None:
            approval_notes = approval_notes.strip() or None
        if approval_notes is not None and len(approval_notes) > 500:
            raise ValidationError("Approval notes must be at most 500 characters")

        entity = self._repository.get_fresh(entity_id)
        if entity.status is EntityStatus.APPROVED:
            raise AlreadyApprovedError(entity_id)
        if entity.status is EntityStatus.REJECTED:
            raise InvalidTransitionError(entity_id, entity.status, EntityStatus.APPROVED)

        now = utcnow()
        approved = entity.model_copy(update={
            "status": EntityStatus.APPROVED,
            "approved_by": actor_id,
            "approval_date": now,
            "approval_notes": approval_notes,
            "updated_at": now,
        })
        self._repository.save(approved, previous_status=entity.status)
        logger.info("Entity %s approved by %s", entity_id, actor_id)

        self._outbox.publish(NotificationEvent(
            kind=NotificationKind.APPROVED,
            recipient=approved.email,
            entity_id=entity_id,
            details={"entityName": approved.name, "approvalNotes": approval_notes},
        ))
        return approved

    def reject(self, entity_id: str, actor_id: str, rejection_reason: str | None) -> Entity:
        if not rejection_reason or not rejection_reason.strip():
            raise MissingReasonError()
        rejection_reason = rejection_reason.strip()
        if len(rejection_reason) > 500:
            raise ValidationError("Rejection reason must be at most 500 characters")

        entity = self._repository.get_fresh(entity_id)
        if entity.status is EntityStatus.REJECTED:
            raise AlreadyRejectedError(entity_id)
        if entity.status is EntityStatus.APPROVED:
            raise InvalidTransitionError(entity_id, entity.status, EntityStatus.REJECTED)

        now = utcnow()
        rejected = entity.model_copy(update={
            "status": EntityStatus.REJECTED,
            "rejected_by": actor_id,
            "rejection_date": now,
            "rejection_reason": rejection_reason,
            "updated_at": now,
        })
        self._repository.save(rejected, previous_status=entity.status)
        logger.info("Entity %s rejected by %s", entity_id, actor_id)

        self._outbox.publish(NotificationEvent(
            kind=NotificationKind.REJECTED,
            recipient=rejected.email,
            entity_id=entity_id,
            details={"entityName": rejected.name, "rejectionReason": rejection_reason},
        ))
        return rejected
