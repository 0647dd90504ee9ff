"""Unit tests for profile photo and document attachments."""

from __future__ import annotations

import pytest

from persona.core.exceptions import InvalidStateError, NotFoundError, StorageError, ValidationError
from persona.models.entity import DocumentType, EntityStatus
from persona.services.attachments import AttachmentService, FileUpload
from tests.fakes import MemoryDocumentStore

PNG = FileUpload(original_name="me.png", mime_type="image/png", data=b"\x89PNG\r\n")
PDF = FileUpload(original_name="passport.pdf", mime_type="application/pdf", data=b"%PDF-1.4")
CSV = FileUpload(original_name="history.csv", mime_type="text/csv", data=b"a,b\n1,2\n")


@pytest.fixture
def attachments(services):
    return services.attachments


@pytest.fixture
def entity(services, make_entity):
    return services.repository.create(make_entity())


class TestProfilePhoto:
    def test_upload_attaches_photo(self, attachments, entity, services, documents):
        photo = attachments.upload_profile_photo(entity.id, PNG)
        assert photo.type is DocumentType.IMAGE
        assert photo.filename.startswith("profilePhoto-")
        assert photo.filename.endswith(".png")
        assert photo.original_name == "me.png"
        assert photo.size == len(PNG.data)
        assert documents.get(photo.path) == PNG.data
        assert services.repository.get(entity.id).profile_photo == photo

    def test_replacing_photo_removes_old_bytes(self, attachments, entity, documents):
        first = attachments.upload_profile_photo(entity.id, PNG)
        second = attachments.upload_profile_photo(entity.id, PNG)
        assert documents.keys() == [second.path]
        assert first.path != second.path

    def test_photo_must_be_image(self, attachments, entity, documents):
        with pytest.raises(ValidationError):
            attachments.upload_profile_photo(entity.id, PDF)
        assert documents.keys() == []

    def test_file_too_large(self, attachments, entity):
        big = FileUpload(original_name="big.png", mime_type="image/png", data=b"x" * 1025)
        with pytest.raises(ValidationError):
            attachments.upload_profile_photo(entity.id, big)


class TestDocuments:
    def test_upload_batch(self, attachments, entity, services):
        stored = attachments.upload_documents(entity.id, [PDF, CSV])
        assert [d.type for d in stored] == [DocumentType.PDF, DocumentType.CSV]
        assert [d.original_name for d in services.repository.get(entity.id).documents] == [
            "passport.pdf", "history.csv",
        ]

    def test_appends_to_existing(self, attachments, entity):
        attachments.upload_documents(entity.id, [PDF])
        attachments.upload_documents(entity.id, [CSV])
        assert len(attachments.list_files(entity.id).documents) == 2

    def test_empty_batch(self, attachments, entity):
        with pytest.raises(ValidationError):
            attachments.upload_documents(entity.id, [])

    def test_batch_limit(self, attachments, entity):
        with pytest.raises(ValidationError):
            attachments.upload_documents(entity.id, [PDF] * 4)

    def test_disallowed_type_stores_nothing(self, attachments, entity, documents):
        zip_file = FileUpload(original_name="a.zip", mime_type="application/zip", data=b"PK")
        with pytest.raises(ValidationError):
            attachments.upload_documents(entity.id, [PDF, zip_file])
        assert documents.keys() == []

    def test_unknown_entity(self, attachments):
        with pytest.raises(NotFoundError):
            attachments.upload_documents("ghost", [PDF])


class TestReadAndDelete:
    def test_list_files(self, attachments, entity):
        photo = attachments.upload_profile_photo(entity.id, PNG)
        attachments.upload_documents(entity.id, [PDF])
        files = attachments.list_files(entity.id)
        assert files.profile_photo == photo
        assert len(files.documents) == 1

    def test_get_file(self, attachments, entity):
        doc = attachments.upload_documents(entity.id, [CSV])[0]
        found, data = attachments.get_file(entity.id, doc.filename)
        assert found == doc
        assert data == CSV.data

    def test_get_unknown_file(self, attachments, entity):
        with pytest.raises(NotFoundError):
            attachments.get_file(entity.id, "nope.pdf")

    def test_delete_document(self, attachments, entity, documents):
        doc = attachments.upload_documents(entity.id, [PDF])[0]
        attachments.delete_file(entity.id, doc.filename)
        assert attachments.list_files(entity.id).documents == []
        assert documents.keys() == []

    def test_delete_photo(self, attachments, entity):
        photo = attachments.upload_profile_photo(entity.id, PNG)
        attachments.delete_file(entity.id, photo.filename)
        assert attachments.list_files(entity.id).profile_photo is None


def test_terminal_entity_files_are_frozen(attachments, services, make_entity):
    entity = services.repository.create(make_entity(status=EntityStatus.APPROVED))
    with pytest.raises(InvalidStateError):
        attachments.upload_documents(entity.id, [PDF])


class _UndeletableStore(MemoryDocumentStore):
    def delete(self, key: str) -> None:
        raise StorageError(f"S3 delete failed for {key!r}")


def test_delete_file_survives_storage_failure(services, make_entity):
    storage = _UndeletableStore()
    attachments = AttachmentService(repository=services.repository, storage=storage)
    entity = services.repository.create(make_entity())
    doc = attachments.upload_documents(entity.id, [PDF])[0]

    attachments.delete_file(entity.id, doc.filename)

    assert attachments.list_files(entity.id).documents == []
    assert storage.keys() == [doc.path]
