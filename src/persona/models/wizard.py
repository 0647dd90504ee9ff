"""Step-by-step creation wizard: per-step payloads and the in-progress record."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import Any, Optional

from pydantic import EmailStr, Field

from persona.models.base import PersonaModel
from persona.models.entity import Address, Document, Entity

TOTAL_STEPS = 6


class WizardStep(StrEnum):
    BASIC_INFO = "basic_info"
    CONTACT_INFO = "contact_info"
    ADDRESS_INFO = "address_info"
    PROFILE_PHOTO = "profile_photo"
    DOCUMENTS = "documents"
    FINAL_SUBMISSION = "final_submission"

    @property
    def number(self) -> int:
        return list(WizardStep).index(self) + 1


SUBMITTED_STEPS = [step.value for step in WizardStep]


# ---------------------------------------------------------------------------
# Step payloads
# ---------------------------------------------------------------------------

class BasicInfoStep(PersonaModel):
    name: str = Field(min_length=2, max_length=100)
    identification_number: str = Field(min_length=5, max_length=50, pattern=r"^[A-Za-z0-9-]+$")


class ContactInfoStep(PersonaModel):
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=20)
    date_of_birth: Optional[date] = None


class AddressInfoStep(PersonaModel):
    address: Address


class ProfilePhotoStep(PersonaModel):
    profile_photo_data: Document


class DocumentsStep(PersonaModel):
    documents: list[Document] = Field(default_factory=list)


class FinalizeStep(PersonaModel):
    additional_data: Optional[dict[str, Any]] = None


# ---------------------------------------------------------------------------
# In-progress record (cache only)
# ---------------------------------------------------------------------------

WORKFLOW_FIELDS = frozenset({"step", "completed_steps"})


class InProgressEntity(PersonaModel):
    """A partial entity under construction, plus wizard bookkeeping."""

    name: Optional[str] = None
    identification_number: Optional[str] = None
    inquiry_id: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[Address] = None
    profile_photo: Optional[Document] = None
    documents: Optional[list[Document]] = None
    additional_data: Optional[dict[str, Any]] = None
    created_by: Optional[str] = None
    started_at: Optional[datetime] = None

    step: int = Field(default=1, ge=1, le=TOTAL_STEPS)
    completed_steps: list[WizardStep] = Field(default_factory=list)

    def entity_data(self) -> dict[str, Any]:
        """camelCase snapshot of the entity fields, wizard bookkeeping stripped."""
        return self.to_json_dict(exclude=set(WORKFLOW_FIELDS | {"started_at"}))

    def entity_fields(self) -> dict[str, Any]:
        """Python-mode field values for building the durable ``Entity``."""
        return self.model_dump(exclude=set(WORKFLOW_FIELDS | {"started_at"}), exclude_none=True)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class StepResult(PersonaModel):
    temp_entity_id: str
    step: int
    next_step: Optional[int]
    completed_steps: list[WizardStep]
    entity_data: dict[str, Any]


class ProgressInfo(PersonaModel):
    temp_entity_id: str
    current_step: int
    total_steps: int = TOTAL_STEPS
    completed_steps: list[WizardStep]
    progress_percent: int
    next_step: Optional[int]
    entity_data: dict[str, Any]


class FinalizeResult(PersonaModel):
    entity: Entity
    submitted_steps: list[str] = Field(default_factory=lambda: list(SUBMITTED_STEPS))
