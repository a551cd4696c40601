"""
QuickAI Backend - Upload Spooling Service
==========================================

What:  Writes multipart image uploads to a spool directory so the asset host
       can read them from a path, then removes them.
How:   Size check, UUID filename, async write with aiofiles, best-effort cleanup.
Who:   Called by ActionService for background and object removal.

Lifecycle of an uploaded image:
    1. Route reads the UploadFile into memory
    2. validate_size() rejects empty or oversized files
    3. store_upload() writes <upload_root>/<uuid><ext>
    4. Cloudinary reads the file from that path
    5. cleanup_file() deletes it, whether the upload succeeded or not

Security:
    The stored filename is a UUID; only the (lowercased) extension of the
    client's filename is kept, and only when it is a known image extension.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles

from quickai.config import settings
from quickai.exceptions import QuickAIError

logger = logging.getLogger(__name__)

# Extensions kept on spooled files; anything else is stored without one
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp"}


class UploadTooLargeError(QuickAIError):
    """Raised by validate_size for files over the configured ceiling."""


class FileService:
    """Spool directory management for uploads bound for Cloudinary."""

    def __init__(self, upload_root: Optional[str] = None):
        """
        Args:
            upload_root: Override the spool directory (used in tests).
                         If None, uses settings.upload_root.
        """
        self.upload_root = Path(upload_root or settings.upload_root).resolve()
        self.upload_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with upload_root=%s", self.upload_root)

    def validate_size(self, content: bytes, max_size: Optional[int] = None) -> None:
        """
        Reject files over `max_size` bytes (default settings.max_upload_size).

        Raises:
            UploadTooLargeError with a human-readable size limit message
        """
        limit = max_size or settings.max_upload_size
        if len(content) > limit:
            limit_mb = limit / (1024 * 1024)
            raise UploadTooLargeError(
                message=f"File size exceeds {limit_mb:.0f}MB limit.",
                context={"size": len(content), "limit": limit},
            )

    def _storage_path(self, filename: Optional[str]) -> Path:
        ext = Path(filename or "").suffix.lower()
        if ext not in IMAGE_EXTENSIONS:
            ext = ""
        return self.upload_root / f"{uuid.uuid4()}{ext}"

    async def store_upload(self, content: bytes, filename: Optional[str] = None) -> str:
        """
        Write upload bytes to the spool directory.

        Returns:
            Absolute path of the stored file.

        Raises:
            OSError: disk full, permission denied, etc. (propagates to the
            action pipeline, which reports it as an upstream failure)
        """
        path = self._storage_path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(path, "wb") as f:
            await f.write(content)

        logger.debug("Spooled upload %s (%d bytes)", path.name, len(content))
        return str(path)

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a spooled file if it exists.

        Cleanup failures are logged and not raised; the action result does
        not depend on them.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.debug("Cleaned up spooled file: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))


file_service = FileService()
