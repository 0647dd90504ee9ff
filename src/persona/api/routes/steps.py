"""Step-by-step entity creation wizard."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from persona.api.dependencies import get_optional_actor_id, get_steps
from persona.api.schemas import ApiResponse
from persona.models.wizard import (
    AddressInfoStep,
    BasicInfoStep,
    ContactInfoStep,
    DocumentsStep,
    FinalizeStep,
    ProfilePhotoStep,
)
from persona.services.step_workflow import StepWorkflowEngine

router = APIRouter(prefix="/step-entities", tags=["step-entities"])


@router.post("/step1", status_code=201)
def step_basic_info(
    body: BasicInfoStep,
    actor_id: str | None = Depends(get_optional_actor_id),
    steps: StepWorkflowEngine = Depends(get_steps),
) -> ApiResponse:
    result = steps.begin(body, actor_id)
    return ApiResponse(message="Step 1 completed - Basic information saved", data=result)


@router.post("/{temp_entity_id}/step2")
def step_contact_info(
    temp_entity_id: str, body: ContactInfoStep, steps: StepWorkflowEngine = Depends(get_steps),
) -> ApiResponse:
    result = steps.contact(temp_entity_id, body)
    return ApiResponse(message="Step 2 completed - Contact information saved", data=result)


@router.post("/{temp_entity_id}/step3")
def step_address_info(
    temp_entity_id: str, body: AddressInfoStep, steps: StepWorkflowEngine = Depends(get_steps),
) -> ApiResponse:
    result = steps.address(temp_entity_id, body)
    return ApiResponse(message="Step 3 completed - Address information saved", data=result)


@router.post("/{temp_entity_id}/step4")
def step_profile_photo(
    temp_entity_id: str, body: ProfilePhotoStep, steps: StepWorkflowEngine = Depends(get_steps),
) -> ApiResponse:
    result = steps.photo(temp_entity_id, body)
    return ApiResponse(message="Step 4 completed - Profile photo saved", data=result)


@router.post("/{temp_entity_id}/step5")
def step_documents(
    temp_entity_id: str, body: DocumentsStep | None = None, steps: StepWorkflowEngine = Depends(get_steps),
) -> ApiResponse:
    result = steps.documents(temp_entity_id, body or DocumentsStep())
    return ApiResponse(message="Step 5 completed - Documents saved", data=result)


@router.post("/{temp_entity_id}/step6", status_code=201)
def step_finalize(
    temp_entity_id: str, body: FinalizeStep | None = None, steps: StepWorkflowEngine = Depends(get_steps),
) -> ApiResponse:
    result = steps.finalize(temp_entity_id, body)
    return ApiResponse(message="Entity created successfully! All steps completed.", data=result)


@router.get("/{temp_entity_id}/progress")
def step_progress(temp_entity_id: str, steps: StepWorkflowEngine = Depends(get_steps)) -> ApiResponse:
    return ApiResponse(data=steps.progress(temp_entity_id))


@router.delete("/{temp_entity_id}/cancel")
def step_cancel(temp_entity_id: str, steps: StepWorkflowEngine = Depends(get_steps)) -> ApiResponse:
    steps.cancel(temp_entity_id)
    return ApiResponse(message="Entity creation process cancelled and temporary data removed")
