"""
Base Example Site — Temporary Upload Storage
==============================================

What:  Spools an uploaded file to a temporary path on disk, enforces the
       size limit, and guarantees the temp file is removed afterwards.
Why:   The Base API client uploads from a file path. The temp file is
       scoped to an async context manager so EVERY exit path releases it.
How:   Streams the multipart upload in chunks with aiofiles into
       <upload_dir>/<uuid><ext>, counting bytes as it goes.
Who:   Entered by the dispatcher for routes that declare an upload field.

Lifecycle of an uploaded file:
    1. Dispatcher reads the multipart form → starlette UploadFile
    2. spooled(upload) validates presence, streams to disk, checks size
    3. The route operation hands UploadedFile.path to the Base API client
    4. Context exit (success, failure, or exception) → cleanup_file()
"""

import logging
import os
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional

import aiofiles
from starlette.datastructures import UploadFile

from basesite.config import settings
from basesite.exceptions import FormDecodeError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class UploadedFile:
    """A request-scoped handle on a spooled upload."""
    path: str
    content_type: str
    filename: str
    size: int


class UploadService:
    """
    Manages the temp-file lifecycle of uploads.

    Why a single upload directory (not tempfile.mkstemp in /tmp):
        The directory is configurable so deployments can point it at a
        volume with enough space; UUID names keep concurrent uploads apart.
    """

    def __init__(self, upload_dir: Optional[str] = None, max_file_size: Optional[int] = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir).resolve()
        self.max_file_size = max_file_size or settings.max_file_size

    def _temp_path(self, filename: str) -> Path:
        # Keep the extension only; no user input reaches the directory part
        extension = Path(filename).suffix.lower()[:16]
        return self.upload_dir / f"{uuid.uuid4()}{extension}"

    async def store(self, upload: UploadFile, field: str) -> UploadedFile:
        """
        Stream an upload to disk.

        Raises:
            FormDecodeError if the upload is missing, empty, or too large.
            A partially written file is removed before raising.
        """
        if not isinstance(upload, UploadFile) or not upload.filename:
            raise FormDecodeError(message="Please choose a file to upload.", field=field)

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path = self._temp_path(upload.filename)
        size = 0

        try:
            async with aiofiles.open(path, "wb") as f:
                while chunk := await upload.read(CHUNK_SIZE):
                    size += len(chunk)
                    if size > self.max_file_size:
                        raise FormDecodeError(
                            message=(
                                f"File is too large. The maximum size is "
                                f"{self.max_file_size:,} bytes."
                            ),
                            field=field,
                            context={"max_file_size": self.max_file_size},
                        )
                    await f.write(chunk)
        except BaseException:
            await self.cleanup_file(str(path))
            raise
        finally:
            await upload.close()

        if size == 0:
            await self.cleanup_file(str(path))
            raise FormDecodeError(message="The uploaded file is empty.", field=field)

        logger.info("Upload spooled: %s (%d bytes)", path.name, size)
        return UploadedFile(
            path=str(path),
            content_type=upload.content_type or "application/octet-stream",
            filename=upload.filename,
            size=size,
        )

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a temp file if it still exists.

        Best-effort: failures are logged, never raised, so cleanup can't mask
        the outcome of the request that owned the file.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.debug("Removed temp upload: %s", path.name)
        except OSError as e:
            logger.warning("Failed to remove temp upload %s: %s", file_path, str(e))

    @asynccontextmanager
    async def spooled(self, upload: UploadFile, field: str) -> AsyncIterator[UploadedFile]:
        """Scoped acquisition: the temp file is deleted on every exit path."""
        uploaded = await self.store(upload, field)
        try:
            yield uploaded
        finally:
            await self.cleanup_file(uploaded.path)


# ── Singleton Instance ────────────────────────────────────────────────────
upload_service = UploadService()
