"""File Data Transfer Objects."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class FileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    original_name: str
    storage_name: str
    content_type: str
    size: int
    user_id: int
    generate_uuid: str
    created_at: datetime | None = None


class UploadResponse(BaseModel):
    message: str
    file: FileResponse


class FileListResponse(BaseModel):
    files: list[FileResponse]


class FileMetadataResponse(BaseModel):
    id: int
    name: str
    size: int
    type: str
    created_at: datetime | None = None
    download_url: str
