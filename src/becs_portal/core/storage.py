"""Local filesystem storage for uploaded task files and templates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from uuid import uuid4

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from ..errors import NotFoundError, PayloadTooLargeError, ValidationError
from .config import Settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


@dataclass(slots=True)
class StoredFile:
    """Metadata describing a file persisted by :class:`FileStorage`."""

    key: str
    original_name: str
    size: int
    content_type: str | None


@dataclass(slots=True)
class FileDownload:
    """Location and presentation details of a stored file."""

    path: Path
    filename: str
    content_type: str | None


class FileStorage:
    """Persist uploads beneath ``root`` using opaque, namespaced keys."""

    def __init__(self, root: Path, max_bytes: int) -> None:
        self._root = root
        self._max_bytes = max_bytes

    @classmethod
    def from_settings(cls, settings: Settings) -> "FileStorage":
        return cls(Path(settings.upload_dir), settings.max_upload_size_bytes)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    async def save(self, upload: UploadFile | None, *, namespace: str) -> StoredFile:
        """Stream ``upload`` to disk, enforcing presence and the size limit.

        Nothing is left on disk when the upload is rejected.
        """

        if upload is None or not upload.filename:
            raise ValidationError("A file must be provided.", fields={"file": "A file must be provided."})

        declared = upload.size
        if declared is not None and declared > self._max_bytes:
            raise PayloadTooLargeError(self._max_bytes)

        original_name = PurePosixPath(upload.filename.replace("\\", "/")).name or "upload"
        suffix = PurePosixPath(original_name).suffix.lower()
        key = f"{namespace}/{uuid4().hex}{suffix}"
        target = self._path_for(key)
        await run_in_threadpool(target.parent.mkdir, parents=True, exist_ok=True)

        written = 0
        try:
            with target.open("wb") as handle:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self._max_bytes:
                        raise PayloadTooLargeError(self._max_bytes)
                    await run_in_threadpool(handle.write, chunk)
        except Exception:
            target.unlink(missing_ok=True)
            raise

        if written == 0:
            target.unlink(missing_ok=True)
            raise ValidationError("Uploaded file is empty.", fields={"file": "Uploaded file is empty."})

        logger.info(
            "Stored uploaded file",
            extra={"storage_key": key, "size": written, "upload_name": original_name},
        )
        return StoredFile(
            key=key,
            original_name=original_name,
            size=written,
            content_type=upload.content_type,
        )

    def resolve(self, key: str) -> Path:
        """Return the on-disk path for ``key``; 404 when the file is gone."""

        path = self._path_for(key)
        if not path.is_file():
            raise NotFoundError("Stored file could not be found.")
        return path

    def delete(self, key: str | None) -> None:
        if not key:
            return
        path = self._path_for(key)
        path.unlink(missing_ok=True)

    def _path_for(self, key: str) -> Path:
        relative = PurePosixPath(key)
        if relative.is_absolute() or ".." in relative.parts:
            raise NotFoundError("Stored file could not be found.")
        return self._root.joinpath(*relative.parts)


__all__ = ["FileDownload", "FileStorage", "StoredFile"]
