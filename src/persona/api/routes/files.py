"""Profile photo and document uploads for durable entities."""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from persona.api.dependencies import get_attachments
from persona.api.schemas import ApiResponse
from persona.services.attachments import AttachmentService, FileUpload

router = APIRouter(prefix="/files", tags=["files"])


def _content_disposition(name: str) -> str:
    """``inline`` disposition with an ASCII fallback plus the RFC 5987 UTF-8 name."""
    fallback = "".join(c if c.isascii() and c.isprintable() and c not in '"\\' else "_" for c in name)
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(name, safe='')}"


def _to_upload(file: UploadFile) -> FileUpload:
    return FileUpload(
        original_name=file.filename or "upload",
        mime_type=file.content_type or "application/octet-stream",
        data=file.file.read(),
    )


@router.post("/profile-photo/{entity_id}")
def upload_profile_photo(
    entity_id: str,
    profile_photo: UploadFile = File(..., alias="profilePhoto"),
    attachments: AttachmentService = Depends(get_attachments),
) -> ApiResponse:
    photo = attachments.upload_profile_photo(entity_id, _to_upload(profile_photo))
    return ApiResponse(message="Profile photo uploaded successfully", data={"file": photo})


@router.post("/documents/{entity_id}")
def upload_documents(
    entity_id: str,
    documents: list[UploadFile] = File(...),
    attachments: AttachmentService = Depends(get_attachments),
) -> ApiResponse:
    stored = attachments.upload_documents(entity_id, [_to_upload(f) for f in documents])
    return ApiResponse(message=f"{len(stored)} document(s) uploaded successfully", data={"files": stored})


@router.get("/{entity_id}")
def list_files(entity_id: str, attachments: AttachmentService = Depends(get_attachments)) -> ApiResponse:
    return ApiResponse(data={"files": attachments.list_files(entity_id)})


@router.get("/{entity_id}/{filename}")
def get_file(entity_id: str, filename: str, attachments: AttachmentService = Depends(get_attachments)):
    doc, data = attachments.get_file(entity_id, filename)
    return Response(
        content=data,
        media_type=doc.mime_type,
        headers={"Content-Disposition": _content_disposition(doc.original_name)},
    )


@router.delete("/{entity_id}/{filename}")
def delete_file(entity_id: str, filename: str, attachments: AttachmentService = Depends(get_attachments)) -> ApiResponse:
    attachments.delete_file(entity_id, filename)
    return ApiResponse(message="File deleted successfully")
