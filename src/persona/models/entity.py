"""Durable entity, address and document models."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import Any, Optional

from pydantic import EmailStr, Field, SerializerFunctionWrapHandler, field_validator, model_serializer

from persona.core.ids import utcnow
from persona.models.base import PersonaModel


class EntityStatus(StrEnum):
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({EntityStatus.APPROVED, EntityStatus.REJECTED})


class DocumentType(StrEnum):
    PDF = "PDF"
    IMAGE = "IMAGE"
    CSV = "CSV"
    OTHER = "OTHER"

    @classmethod
    def from_mime_type(cls, mime_type: str) -> DocumentType:
        mime_type = mime_type.lower()
        if mime_type.startswith("image/"):
            return cls.IMAGE
        if mime_type == "application/pdf":
            return cls.PDF
        if any(marker in mime_type for marker in ("csv", "excel", "spreadsheet")):
            return cls.CSV
        return cls.OTHER


class Address(PersonaModel):
    """Postal address; every part is required once the entity is durable."""

    street: str = Field(min_length=1, max_length=200)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    country: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(min_length=1, max_length=20)


class AddressUpdate(PersonaModel):
    street: Optional[str] = Field(default=None, min_length=1, max_length=200)
    city: Optional[str] = Field(default=None, min_length=1, max_length=100)
    state: Optional[str] = Field(default=None, min_length=1, max_length=100)
    country: Optional[str] = Field(default=None, min_length=1, max_length=100)
    postal_code: Optional[str] = Field(default=None, min_length=1, max_length=20)


class Document(PersonaModel):
    """Metadata for a stored file; the bytes live in the document store under ``path``."""

    type: DocumentType
    filename: str
    original_name: str
    mime_type: str
    size: int = Field(ge=0)
    path: str
    uploaded_at: datetime = Field(default_factory=utcnow)


class Entity(PersonaModel):
    """A finalized entity held in the durable store."""

    id: str
    name: str = Field(min_length=1, max_length=100)
    identification_number: str = Field(min_length=1, max_length=50)
    inquiry_id: str = Field(min_length=1, max_length=50)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=20)
    date_of_birth: Optional[date] = None
    address: Address
    profile_photo: Optional[Document] = None
    documents: list[Document] = Field(default_factory=list)

    status: EntityStatus = EntityStatus.PENDING
    approved_by: Optional[str] = None
    rejected_by: Optional[str] = None
    approval_date: Optional[datetime] = None
    rejection_date: Optional[datetime] = None
    approval_notes: Optional[str] = Field(default=None, max_length=500)
    rejection_reason: Optional[str] = Field(default=None, max_length=500)

    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    additional_data: Optional[dict[str, Any]] = None

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.lower()

    @model_serializer(mode="wrap")
    def _omit_unset_optionals(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        """Optional fields without a value are left out of every dump."""
        return {k: v for k, v in handler(self).items() if v is not None}

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def full_address(self) -> str:
        a = self.address
        return f"{a.street}, {a.city}, {a.state}, {a.country} {a.postal_code}"

    def find_file(self, filename: str) -> Optional[Document]:
        """Return the document or profile photo stored under ``filename``."""
        for doc in self.documents:
            if doc.filename == filename:
                return doc
        if self.profile_photo is not None and self.profile_photo.filename == filename:
            return self.profile_photo
        return None


class EntityCreate(PersonaModel):
    """Payload for direct (non-wizard) entity creation."""

    name: str = Field(min_length=2, max_length=100)
    identification_number: str = Field(min_length=5, max_length=50, pattern=r"^[A-Za-z0-9-]+$")
    inquiry_id: Optional[str] = Field(default=None, max_length=50)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=20)
    date_of_birth: Optional[date] = None
    address: Address
    profile_photo: Optional[Document] = None
    documents: list[Document] = Field(default_factory=list)
    additional_data: Optional[dict[str, Any]] = None


class EntityUpdate(PersonaModel):
    """General field edit. Only fields explicitly sent are applied."""

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    identification_number: Optional[str] = Field(
        default=None, min_length=5, max_length=50, pattern=r"^[A-Za-z0-9-]+$"
    )
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    date_of_birth: Optional[date] = None
    address: Optional[AddressUpdate] = None
    status: Optional[EntityStatus] = None
    additional_data: Optional[dict[str, Any]] = None
