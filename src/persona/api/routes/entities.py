"""Entity CRUD, listing, statistics and approval decisions."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request

from persona.api.dependencies import get_actor_id, get_approvals, get_services
from persona.api.schemas import ApiResponse, ApproveRequest, RejectRequest
from persona.models.entity import EntityCreate, EntityStatus, EntityUpdate
from persona.models.query import EntityQuery, SortField, SortOrder
from persona.services.approval_workflow import ApprovalWorkflowEngine

router = APIRouter(tags=["entities"])


def _drain_later(request: Request, background_tasks: BackgroundTasks) -> None:
    background_tasks.add_task(get_services(request).outbox.drain)


@router.post("/entities", status_code=201)
def create_entity(
    body: EntityCreate,
    actor_id: str = Depends(get_actor_id),
    approvals: ApprovalWorkflowEngine = Depends(get_approvals),
) -> ApiResponse:
    entity = approvals.create(body, actor_id)
    return ApiResponse(message="Entity created successfully", data={"entity": entity})


@router.get("/entities")
def list_entities(
    status: Optional[EntityStatus] = None,
    search: Optional[str] = None,
    sort_by: SortField = Query(default=SortField.CREATED_AT, alias="sortBy"),
    sort_order: SortOrder = Query(default=SortOrder.DESC, alias="sortOrder"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    approvals: ApprovalWorkflowEngine = Depends(get_approvals),
) -> ApiResponse:
    query = EntityQuery(status=status, search=search, sort_by=sort_by,
                        sort_order=sort_order, page=page, limit=limit)
    return ApiResponse(data=approvals.list(query))


@router.get("/entities/stats")
def entity_stats(approvals: ApprovalWorkflowEngine = Depends(get_approvals)) -> ApiResponse:
    return ApiResponse(data={"stats": approvals.stats()})


@router.get("/approvals/pending")
def pending_queue(approvals: ApprovalWorkflowEngine = Depends(get_approvals)) -> ApiResponse:
    entities = approvals.pending_queue()
    return ApiResponse(data={"entities": entities, "count": len(entities)})


@router.get("/entities/{entity_id}")
def get_entity(entity_id: str, approvals: ApprovalWorkflowEngine = Depends(get_approvals)) -> ApiResponse:
    return ApiResponse(data={"entity": approvals.get(entity_id)})


@router.put("/entities/{entity_id}")
def update_entity(
    entity_id: str,
    body: EntityUpdate,
    approvals: ApprovalWorkflowEngine = Depends(get_approvals),
) -> ApiResponse:
    entity = approvals.update(entity_id, body)
    return ApiResponse(message="Entity updated successfully", data={"entity": entity})


@router.delete("/entities/{entity_id}")
def delete_entity(entity_id: str, approvals: ApprovalWorkflowEngine = Depends(get_approvals)) -> ApiResponse:
    approvals.delete(entity_id)
    return ApiResponse(message="Entity deleted successfully")


@router.post("/entities/{entity_id}/approve")
def approve_entity(
    entity_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    body: ApproveRequest | None = None,
    actor_id: str = Depends(get_actor_id),
    approvals: ApprovalWorkflowEngine = Depends(get_approvals),
) -> ApiResponse:
    notes = body.approval_notes if body is not None else None
    entity = approvals.approve(entity_id, actor_id, notes)
    _drain_later(request, background_tasks)
    return ApiResponse(message="Entity approved successfully", data={"entity": entity})


@router.post("/entities/{entity_id}/reject")
def reject_entity(
    entity_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    body: RejectRequest | None = None,
    actor_id: str = Depends(get_actor_id),
    approvals: ApprovalWorkflowEngine = Depends(get_approvals),
) -> ApiResponse:
    reason = body.rejection_reason if body is not None else None
    entity = approvals.reject(entity_id, actor_id, reason)
    _drain_later(request, background_tasks)
    return ApiResponse(message="Entity rejected successfully", data={"entity": entity})
