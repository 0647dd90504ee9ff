"""Profile photo and supporting document attachments for durable entities."""

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass

from persona.core.exceptions import InvalidStateError, NotFoundError, StorageError, ValidationError
from persona.core.ids import now_millis, utcnow
from persona.core.protocols import IDocumentStore
from persona.models.base import PersonaModel
from persona.models.entity import Document, DocumentType, Entity
from persona.services.entity_repository import CachedEntityRepository

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
    "text/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
})

PHOTO_FIELD = "profilePhoto"
DOCUMENT_FIELD = "documents"
PHOTO_FOLDER = "photos"
DOCUMENT_FOLDER = "documents"


@dataclass(frozen=True)
class FileUpload:
    original_name: str
    mime_type: str
    data: bytes


class EntityFiles(PersonaModel):
    profile_photo: Document | None = None
    documents: list[Document]


def _stored_filename(field: str, original_name: str) -> str:
    extension = os.path.splitext(original_name)[1]
    return f"{field}-{now_millis()}-{secrets.randbelow(10**9)}{extension}"


class AttachmentService:
    def __init__(
        self,
        *,
        repository: CachedEntityRepository,
        storage: IDocumentStore,
        max_file_size: int = 10 * 1024 * 1024,
        max_batch: int = 10,
    ) -> None:
        self._repository = repository
        self._storage = storage
        self._max_file_size = max_file_size
        self._max_batch = max_batch

    def _editable(self, entity_id: str, action: str) -> Entity:
        entity = self._repository.get_fresh(entity_id)
        if entity.is_terminal:
            raise InvalidStateError(entity_id, entity.status, action)
        return entity

    def _check(self, upload: FileUpload) -> None:
        if upload.mime_type.lower() not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                f"Invalid file type {upload.mime_type!r} for {upload.original_name!r}. "
                "Only images, PDFs, and CSV files are allowed."
            )
        if len(upload.data) > self._max_file_size:
            raise ValidationError(
                f"File {upload.original_name!r} exceeds the {self._max_file_size} byte limit"
            )

    def _store(self, upload: FileUpload, field: str, folder: str) -> Document:
        filename = _stored_filename(field, upload.original_name)
        path = self._storage.put(f"{folder}/{filename}", upload.data, upload.mime_type)
        return Document(
            type=DocumentType.from_mime_type(upload.mime_type),
            filename=filename,
            original_name=upload.original_name,
            mime_type=upload.mime_type,
            size=len(upload.data),
            path=path,
            uploaded_at=utcnow(),
        )

    def _discard(self, docs: list[Document]) -> None:
        for doc in docs:
            try:
                self._storage.delete(doc.path)
            except StorageError:
                logger.warning("Could not remove stored file %s", doc.path, exc_info=True)

    def upload_profile_photo(self, entity_id: str, upload: FileUpload) -> Document:
        """Attach (or replace) the entity's profile photo."""
        entity = self._editable(entity_id, "change files of")
        self._check(upload)
        if not upload.mime_type.lower().startswith("image/"):
            raise ValidationError("Profile photo must be an image")

        photo = self._store(upload, PHOTO_FIELD, PHOTO_FOLDER)
        previous = entity.profile_photo
        updated = entity.model_copy(update={"profile_photo": photo, "updated_at": utcnow()})
        try:
            self._repository.save(updated, previous_status=entity.status)
        except Exception:
            self._discard([photo])
            raise
        if previous is not None:
            self._discard([previous])
        logger.info("Profile photo %s attached to entity %s", photo.filename, entity_id)
        return photo

    def upload_documents(self, entity_id: str, uploads: list[FileUpload]) -> list[Document]:
        """Append a batch of supporting documents."""
        if not uploads:
            raise ValidationError("No files uploaded")
        if len(uploads) > self._max_batch:
            raise ValidationError(f"At most {self._max_batch} documents can be uploaded at once")
        entity = self._editable(entity_id, "change files of")
        for upload in uploads:
            self._check(upload)

        stored: list[Document] = []
        try:
            for upload in uploads:
                stored.append(self._store(upload, DOCUMENT_FIELD, DOCUMENT_FOLDER))
            updated = entity.model_copy(update={
                "documents": [*entity.documents, *stored],
                "updated_at": utcnow(),
            })
            self._repository.save(updated, previous_status=entity.status)
        except Exception:
            self._discard(stored)
            raise
        logger.info("%d document(s) attached to entity %s", len(stored), entity_id)
        return stored

    def list_files(self, entity_id: str) -> EntityFiles:
        entity = self._repository.get(entity_id)
        return EntityFiles(profile_photo=entity.profile_photo, documents=entity.documents)

    def get_file(self, entity_id: str, filename: str) -> tuple[Document, bytes]:
        entity = self._repository.get(entity_id)
        doc = entity.find_file(filename)
        if doc is None:
            raise NotFoundError(f"File {filename!r} not found for entity {entity_id!r}")
        return doc, self._storage.get(doc.path)

    def delete_file(self, entity_id: str, filename: str) -> None:
        entity = self._editable(entity_id, "change files of")
        doc = entity.find_file(filename)
        if doc is None:
            raise NotFoundError(f"File {filename!r} not found for entity {entity_id!r}")

        if entity.profile_photo is not None and entity.profile_photo.filename == filename:
            update = {"profile_photo": None}
        else:
            update = {"documents": [d for d in entity.documents if d.filename != filename]}
        updated = entity.model_copy(update={**update, "updated_at": utcnow()})
        self._repository.save(updated, previous_status=entity.status)
        self._discard([doc])
        logger.info("File %s removed from entity %s", filename, entity_id)
