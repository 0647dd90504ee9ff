"""Six-step entity creation wizard.

Steps 1-5 accumulate fields in a cache-only ``InProgressEntity``; step 6 turns
it into a durable PENDING entity and drops the temporary record. Steps are not
forced into sequence: any step may run once the record exists. ``step`` is
the step that ran last and ``completed_steps`` records every call in order.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import pydantic

from persona.core.exceptions import DuplicateIdentifierError, ValidationError
from persona.core.ids import new_entity_id, new_inquiry_id, new_temp_entity_id, utcnow
from persona.models.entity import Entity, EntityStatus
from persona.models.wizard import (
    TOTAL_STEPS,
    AddressInfoStep,
    BasicInfoStep,
    ContactInfoStep,
    DocumentsStep,
    FinalizeResult,
    FinalizeStep,
    InProgressEntity,
    ProfilePhotoStep,
    ProgressInfo,
    StepResult,
    WizardStep,
)
from persona.services.entity_repository import CachedEntityRepository
from persona.services.wizard_sessions import WizardSessionStore

logger = logging.getLogger(__name__)


def _describe_missing(exc: pydantic.ValidationError) -> str:
    fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
    return ", ".join(fields)


class StepWorkflowEngine:
    """Drives the wizard state machine: 1..5 -> finalize -> durable entity."""

    def __init__(
        self,
        *,
        sessions: WizardSessionStore,
        repository: CachedEntityRepository,
        id_factory: Callable[[], str] = new_temp_entity_id,
    ) -> None:
        self._sessions = sessions
        self._repository = repository
        self._id_factory = id_factory

    def _result(self, temp_id: str, record: InProgressEntity, step: WizardStep) -> StepResult:
        return StepResult(
            temp_entity_id=temp_id,
            step=step.number,
            next_step=step.number + 1,
            completed_steps=record.completed_steps,
            entity_data=record.entity_data(),
        )

    def _advance(self, temp_id: str, step: WizardStep, changes: dict[str, Any]) -> StepResult:
        record = self._sessions.load(temp_id)
        updated = record.model_copy(update={
            **changes,
            "step": step.number,
            "completed_steps": [*record.completed_steps, step],
        })
        self._sessions.save(temp_id, updated)
        logger.info("Wizard %s completed step %d (%s)", temp_id, step.number, step)
        return self._result(temp_id, updated, step)

    # ---- steps ----

    def begin(self, payload: BasicInfoStep, actor_id: str | None = None) -> StepResult:
        """Step 1: reserve a temp id for a new identification number."""
        if self._repository.exists_with_identification_number(payload.identification_number):
            raise DuplicateIdentifierError("identificationNumber", payload.identification_number)

        temp_id = self._id_factory()
        record = InProgressEntity(
            name=payload.name,
            identification_number=payload.identification_number,
            created_by=actor_id,
            started_at=utcnow(),
            step=1,
            completed_steps=[WizardStep.BASIC_INFO],
        )
        self._sessions.save(temp_id, record)
        logger.info("Wizard %s started for %s", temp_id, payload.identification_number)
        return self._result(temp_id, record, WizardStep.BASIC_INFO)

    def contact(self, temp_id: str, payload: ContactInfoStep) -> StepResult:
        return self._advance(temp_id, WizardStep.CONTACT_INFO, {
            "email": payload.email,
            "phone": payload.phone,
            "date_of_birth": payload.date_of_birth,
        })

    def address(self, temp_id: str, payload: AddressInfoStep) -> StepResult:
        return self._advance(temp_id, WizardStep.ADDRESS_INFO, {"address": payload.address})

    def photo(self, temp_id: str, payload: ProfilePhotoStep) -> StepResult:
        return self._advance(temp_id, WizardStep.PROFILE_PHOTO, {"profile_photo": payload.profile_photo_data})

    def documents(self, temp_id: str, payload: DocumentsStep) -> StepResult:
        return self._advance(temp_id, WizardStep.DOCUMENTS, {"documents": list(payload.documents)})

    def finalize(self, temp_id: str, payload: FinalizeStep | None = None) -> FinalizeResult:
        """Step 6: persist the accumulated record and drop the temp entry."""
        record = self._sessions.load(temp_id)

        data = record.entity_fields()
        if payload is not None and payload.additional_data:
            data["additional_data"] = payload.additional_data
        now = utcnow()
        data.update(
            id=new_entity_id(),
            status=EntityStatus.PENDING,
            inquiry_id=data.get("inquiry_id") or new_inquiry_id(),
            created_at=now,
            updated_at=now,
        )
        try:
            entity = Entity.model_validate(data)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                f"Wizard {temp_id} is missing or has invalid fields: {_describe_missing(exc)}"
            ) from exc

        self._repository.create(entity)
        self._sessions.discard(temp_id)
        logger.info("Wizard %s finalized as entity %s", temp_id, entity.id)
        return FinalizeResult(entity=entity)

    # ---- queries ----

    def progress(self, temp_id: str) -> ProgressInfo:
        record = self._sessions.load(temp_id)
        return ProgressInfo(
            temp_entity_id=temp_id,
            current_step=record.step,
            total_steps=TOTAL_STEPS,
            completed_steps=record.completed_steps,
            progress_percent=round(100 * len(record.completed_steps) / TOTAL_STEPS),
            next_step=record.step + 1 if record.step < TOTAL_STEPS else None,
            entity_data=record.entity_data(),
        )

    def cancel(self, temp_id: str) -> None:
        """Drop the temp record; a missing record is not an error."""
        self._sessions.discard(temp_id)
        logger.info("Wizard %s cancelled", temp_id)
