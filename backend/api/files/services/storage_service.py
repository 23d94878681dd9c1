"""Storage service — file objects in the local upload directory."""

import logging
from pathlib import Path
from typing import BinaryIO, Iterator

from errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB


def object_path(upload_dir: Path, storage_name: str) -> Path:
    return upload_dir / storage_name


def object_exists(upload_dir: Path, storage_name: str) -> bool:
    return object_path(upload_dir, storage_name).is_file()


def write_object(upload_dir: Path, storage_name: str, src: BinaryIO, max_size: int) -> int:
    """Stream ``src`` to disk in chunks and return the number of bytes written.

    A partially written object is removed before any error propagates.
    """
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("Failed to create uploads directory %s", upload_dir, exc_info=True)
        raise StorageError("Failed to create uploads directory") from e

    path = object_path(upload_dir, storage_name)
    size = 0
    try:
        with open(path, "xb") as dst:
            while chunk := src.read(CHUNK_SIZE):
                size += len(chunk)
                if size > max_size:
                    raise ValidationError("File size is too large")
                dst.write(chunk)
    except ValidationError:
        path.unlink(missing_ok=True)
        raise
    except FileExistsError as e:
        logger.error("Storage name collision for %s", path)
        raise StorageError("Failed to save file") from e
    except OSError as e:
        path.unlink(missing_ok=True)
        logger.error("Failed to save file %s", path, exc_info=True)
        raise StorageError("Failed to save file") from e

    return size


def object_size(upload_dir: Path, storage_name: str) -> int:
    return object_path(upload_dir, storage_name).stat().st_size


def iter_object(upload_dir: Path, storage_name: str) -> Iterator[bytes]:
    with open(object_path(upload_dir, storage_name), "rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            yield chunk


def remove_object(upload_dir: Path, storage_name: str) -> None:
    path = object_path(upload_dir, storage_name)
    try:
        path.unlink()
    except OSError as e:
        logger.error("Failed to delete file %s", path, exc_info=True)
        raise StorageError("Failed to delete file") from e
