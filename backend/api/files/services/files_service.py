"""Files service — upload, listing, download, deletion and metadata."""

import logging
import os
import uuid
from pathlib import Path
from typing import Iterator

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.files.dto.file import FileMetadataResponse, FileResponse
from api.files.orm.file_model import FileModel
from api.files.repositories import files_repository
from api.files.services import storage_service
from api.users.dto.user import CurrentUser
from config import Settings
from errors import NotFoundError, PersistenceError, StorageError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def validate_upload(upload: UploadFile | None, settings: Settings) -> str:
    """Reject missing, oversized or disallowed uploads; return the extension."""
    if upload is None or not upload.filename:
        raise ValidationError("No file uploaded")

    if upload.size is not None and upload.size > settings.max_upload_bytes:
        raise ValidationError("File size is too large")

    # Extension only; the content itself is not inspected.
    ext = os.path.splitext(upload.filename)[1].lower()
    allowed = {e.lower() for e in settings.allowed_extensions}
    if ext not in allowed:
        raise ValidationError("Invalid file type")

    return ext


def upload_file(
    session: Session,
    user: CurrentUser,
    upload: UploadFile | None,
    settings: Settings,
) -> FileResponse:
    """Write the upload to disk under a fresh storage name, then record it."""
    ext = validate_upload(upload, settings)

    generated = str(uuid.uuid4())
    storage_name = f"{generated}{ext}"
    upload_dir = settings.upload_path

    size = storage_service.write_object(
        upload_dir, storage_name, upload.file, settings.max_upload_bytes
    )

    try:
        record = files_repository.create(
            session,
            user_id=user.id,
            original_name=upload.filename,
            storage_name=storage_name,
            content_type=upload.content_type or DEFAULT_CONTENT_TYPE,
            size=size,
            generate_uuid=generated,
        )
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to save file record for %s", storage_name, exc_info=True)
        # Undo the disk write so the object does not outlive its missing record.
        try:
            storage_service.remove_object(upload_dir, storage_name)
        except StorageError:
            logger.error("Orphaned file object left at %s", storage_name)
        raise PersistenceError("Failed to save file record") from e

    logger.info("User %d uploaded file %d (%d bytes)", user.id, record.id, size)
    return FileResponse.model_validate(record)


def list_files(session: Session, user: CurrentUser) -> list[FileResponse]:
    try:
        models = files_repository.list_by_user(session, user.id)
    except SQLAlchemyError as e:
        logger.error("Failed to fetch files for user %d", user.id, exc_info=True)
        raise PersistenceError("Failed to fetch files") from e
    return [FileResponse.model_validate(m) for m in models]


def _get_owned_file(session: Session, user: CurrentUser, file_id: int, upload_dir: Path) -> FileModel:
    try:
        model = files_repository.get_owned(session, file_id, user.id)
    except SQLAlchemyError as e:
        logger.error("Failed to look up file %d", file_id, exc_info=True)
        raise PersistenceError("Failed to fetch file") from e

    if model is None:
        raise NotFoundError("File not found")

    if not storage_service.object_exists(upload_dir, model.storage_name):
        logger.warning("File %d has a record but no object on disk", model.id)
        raise NotFoundError("File not found on disk")

    return model


def open_download(
    session: Session, user: CurrentUser, file_id: int, settings: Settings
) -> tuple[FileResponse, int, Iterator[bytes]]:
    """Return the file's record, its size on disk and an iterator over its bytes."""
    model = _get_owned_file(session, user, file_id, settings.upload_path)
    size = storage_service.object_size(settings.upload_path, model.storage_name)
    chunks = storage_service.iter_object(settings.upload_path, model.storage_name)
    return FileResponse.model_validate(model), size, chunks


def delete_file(session: Session, user: CurrentUser, file_id: int, settings: Settings) -> None:
    """Remove the object from disk, then its record."""
    model = _get_owned_file(session, user, file_id, settings.upload_path)

    storage_service.remove_object(settings.upload_path, model.storage_name)

    try:
        files_repository.delete(session, model)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to delete file record %d", file_id, exc_info=True)
        raise PersistenceError("Failed to delete file record") from e

    logger.info("User %d deleted file %d", user.id, file_id)


def get_metadata(
    session: Session, user: CurrentUser, file_id: int, settings: Settings
) -> FileMetadataResponse:
    model = _get_owned_file(session, user, file_id, settings.upload_path)
    return FileMetadataResponse(
        id=model.id,
        name=model.original_name,
        size=model.size,
        type=model.content_type,
        created_at=model.created_at,
        download_url=f"/files/{model.id}",
    )
