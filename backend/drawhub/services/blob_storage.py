"""
Blob Storage - uploaded bytes on local disk

Blobs are written under ``UPLOAD_DIR/<project_id>/`` with a collision-free
random name; the database row keeps the logical (versioned) name. The
per-file size limit is enforced while streaming so an oversized upload
never stays on disk.
"""

import mimetypes
import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import aiofiles
import aiofiles.os

from drawhub.core.config import settings
from drawhub.core.exceptions import FileTooLargeError
from drawhub.core.logging_config import logger

CHUNK_SIZE = 1024 * 1024  # 1MB


class AsyncReadable(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


@dataclass
class StoredBlob:
    path: str
    size: int
    mime_type: str


def guess_mime_type(filename: str, declared: Optional[str] = None) -> str:
    if declared and declared != "application/octet-stream":
        return declared
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or declared or "application/octet-stream"


class BlobStorage:
    """Local filesystem store for uploaded files"""

    def __init__(self, root: Optional[Path] = None, max_size: Optional[int] = None):
        self.root = Path(root) if root is not None else settings.UPLOAD_DIR
        self.max_size = max_size if max_size is not None else settings.MAX_UPLOAD_SIZE

    def _new_path(self, project_id: str, extension: str) -> Path:
        directory = self.root / str(project_id)
        directory.mkdir(parents=True, exist_ok=True)
        return directory / f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{extension.lower()}"

    async def save(
        self,
        project_id: str,
        filename: str,
        source: AsyncReadable,
        content_type: Optional[str] = None,
    ) -> StoredBlob:
        """
        Stream ``source`` to disk.

        Raises FileTooLargeError (and removes the partial file) as soon as
        more than ``max_size`` bytes have been read.
        """
        path = self._new_path(project_id, os.path.splitext(filename)[1])
        size = 0
        try:
            async with aiofiles.open(path, "wb") as out:
                while True:
                    chunk = await source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_size:
                        raise FileTooLargeError(filename, self.max_size)
                    await out.write(chunk)
        except Exception:
            await self.remove(str(path))
            raise

        logger.debug(f"Stored {filename} ({size} bytes) at {path}")
        return StoredBlob(path=str(path), size=size, mime_type=guess_mime_type(filename, content_type))

    async def remove(self, path: str) -> bool:
        try:
            await aiofiles.os.remove(path)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete blob {path}: {e}")
            return False
