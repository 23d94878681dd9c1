"""Files controller — API routes for a user's own files."""

from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from auth import require_user
from api.auth.dto.auth import MessageResponse
from api.files.dto.file import FileListResponse, FileMetadataResponse, UploadResponse
from api.files.services import files_service
from api.users.dto.user import CurrentUser
from config import Settings, get_app_settings
from database import get_db

router = APIRouter(prefix="/files", tags=["Files"])


def _content_disposition(filename: str) -> str:
    quoted = quote(filename, safe="")
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


@router.post("", response_model=UploadResponse)
def upload_file(
    file: UploadFile | None = File(None),
    user: CurrentUser = Depends(require_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    record = files_service.upload_file(db, user, file, settings)
    return UploadResponse(message="File uploaded successfully", file=record)


@router.get("", response_model=FileListResponse)
def list_files(
    user: CurrentUser = Depends(require_user),
    db: Session = Depends(get_db),
):
    return FileListResponse(files=files_service.list_files(db, user))


@router.get("/{file_id}")
def download_file(
    file_id: int,
    user: CurrentUser = Depends(require_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Stream a file back under its original name."""
    record, size, chunks = files_service.open_download(db, user, file_id, settings)
    return StreamingResponse(
        chunks,
        media_type=record.content_type,
        headers={
            "Content-Disposition": _content_disposition(record.original_name),
            "Content-Length": str(size),
        },
    )


@router.delete("/{file_id}", response_model=MessageResponse)
def delete_file(
    file_id: int,
    user: CurrentUser = Depends(require_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    files_service.delete_file(db, user, file_id, settings)
    return MessageResponse(message="File deleted successfully")


@router.get("/{file_id}/metadata", response_model=FileMetadataResponse)
def get_file_metadata(
    file_id: int,
    user: CurrentUser = Depends(require_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return files_service.get_metadata(db, user, file_id, settings)
