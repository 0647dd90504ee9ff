"""FastAPI dependencies resolving engines from ``app.state.services``."""

from __future__ import annotations

from fastapi import Header, Request

from persona.services.approval_workflow import ApprovalWorkflowEngine
from persona.services.attachments import AttachmentService
from persona.services.container import ServiceContainer
from persona.services.step_workflow import StepWorkflowEngine


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_steps(request: Request) -> StepWorkflowEngine:
    return get_services(request).steps


def get_approvals(request: Request) -> ApprovalWorkflowEngine:
    return get_services(request).approvals


def get_attachments(request: Request) -> AttachmentService:
    return get_services(request).attachments


def get_actor_id(x_actor_id: str = Header(..., min_length=1)) -> str:
    """Opaque id of the acting user, supplied by the upstream auth layer."""
    return x_actor_id


def get_optional_actor_id(x_actor_id: str | None = Header(default=None)) -> str | None:
    return x_actor_id
