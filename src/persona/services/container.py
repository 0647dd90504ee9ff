"""Explicit dependency wiring for the workflow engines."""

from __future__ import annotations

from dataclasses import dataclass

from persona.core.config import AppSettings, WorkflowConfig
from persona.core.protocols import ICacheBackend, IDocumentStore, IEntityStore, INotifier
from persona.notifications import create_notifier
from persona.notifications.outbox import NotificationOutbox
from persona.persistence import create_persistence
from persona.services.approval_workflow import ApprovalWorkflowEngine
from persona.services.attachments import AttachmentService
from persona.services.entity_repository import CachedEntityRepository
from persona.services.step_workflow import StepWorkflowEngine
from persona.services.wizard_sessions import WizardSessionStore


@dataclass
class ServiceContainer:
    cache: ICacheBackend
    store: IEntityStore
    documents: IDocumentStore
    outbox: NotificationOutbox
    repository: CachedEntityRepository
    steps: StepWorkflowEngine
    approvals: ApprovalWorkflowEngine
    attachments: AttachmentService


def build_services(
    *,
    store: IEntityStore,
    cache: ICacheBackend,
    documents: IDocumentStore,
    notifier: INotifier,
    workflow: WorkflowConfig | None = None,
) -> ServiceContainer:
    """Assemble engines around the given collaborators."""
    if workflow is None:
        workflow = WorkflowConfig()
    repository = CachedEntityRepository(store, cache, ttl=workflow.entity_cache_ttl)
    outbox = NotificationOutbox(notifier)
    return ServiceContainer(
        cache=cache,
        store=store,
        documents=documents,
        outbox=outbox,
        repository=repository,
        steps=StepWorkflowEngine(
            sessions=WizardSessionStore(cache, ttl=workflow.temp_entity_ttl),
            repository=repository,
        ),
        approvals=ApprovalWorkflowEngine(repository=repository, outbox=outbox, documents=documents),
        attachments=AttachmentService(
            repository=repository,
            storage=documents,
            max_file_size=workflow.max_file_size,
            max_batch=workflow.max_documents_per_upload,
        ),
    )


def build_production_services(settings: AppSettings) -> ServiceContainer:
    store, cache, documents = create_persistence(settings)
    return build_services(
        store=store,
        cache=cache,
        documents=documents,
        notifier=create_notifier(settings.notifications),
        workflow=settings.workflow,
    )
