"""Response envelopes and request bodies specific to the HTTP layer."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from persona.models.base import PersonaModel


class ApiResponse(BaseModel):
    success: bool = True
    message: str = ""
    data: Any = None


class ErrorResponse(BaseModel):
    success: bool = False
    kind: str
    message: str
    details: Any = None


class ApproveRequest(PersonaModel):
    approval_notes: Optional[str] = Field(default=None, max_length=500)


class RejectRequest(PersonaModel):
    rejection_reason: Optional[str] = None
