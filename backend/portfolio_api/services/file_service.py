"""
Portfolio API — Image Upload Service
=====================================

What:  Validates, stores and cleans up project images.
Why:   Keeps every file-system operation behind one interface with the
       checks applied in one place.
How:   Checks the declared content type and the size, then writes the bytes
       asynchronously under <storage_root>/projects/ with a timestamped name.
Who:   Called by ProjectService when a project is created.
When:  Before the project document is inserted; nothing is persisted for a
       rejected upload.

Storage layout:
    uploads/
    └── projects/
        ├── 1718035200123-landing-page.png
        └── 1718035290457-dashboard.jpg

    Served back at /uploads/projects/<name> by routes/uploads.py.

Naming:
    <epoch milliseconds>-<original name reduced to [A-Za-z0-9._-]>
    Collisions are avoided by timestamp granularity only; two uploads of the
    same name within one millisecond would overwrite each other.
"""

import logging
import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from portfolio_api.config import settings
from portfolio_api.exceptions import FileStorageError, UploadRejectedError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
}

UPLOAD_FIELD = "img"
PROJECT_IMAGE_DIR = "projects"
PUBLIC_PREFIX = "/uploads"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class ImageUpload:
    """An uploaded file as received from the multipart form, already read into memory."""
    filename: str
    content_type: Optional[str]
    content: bytes
    declared_size: Optional[int] = None


class FileService:
    """
    Manages the upload lifecycle of project images.

    Lifecycle of an uploaded file:
        1. Route reads the multipart `img` part → ImageUpload
        2. validate() checks content type, then size (declared and actual)
        3. store_image() writes the bytes and returns (absolute path, public path)
        4. If the database insert fails afterwards, cleanup_file() removes it
    """

    def __init__(self, storage_root: Optional[str] = None, max_file_size: Optional[int] = None):
        """
        Args:
            storage_root:  Override the storage path (used in tests).
            max_file_size: Override the byte ceiling (used in tests).
        """
        self._storage_root = storage_root
        self._max_file_size = max_file_size

    @property
    def storage_root(self) -> Path:
        return Path(self._storage_root or settings.storage_root).resolve()

    @property
    def max_file_size(self) -> int:
        return self._max_file_size or settings.max_file_size

    def validate_content_type(self, content_type: Optional[str]) -> str:
        """
        Check the declared content type against the allow-list.

        Returns: The normalized content type.
        Raises:  UploadRejectedError for anything other than JPEG, PNG or GIF.
        """
        normalized = (content_type or "").split(";")[0].strip().lower()
        if normalized not in ALLOWED_CONTENT_TYPES:
            raise UploadRejectedError(
                message=(
                    f"File type '{normalized or 'unknown'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}"
                ),
                context={"content_type": normalized, "allowed": sorted(ALLOWED_CONTENT_TYPES)},
            )
        return normalized

    def validate_size(self, declared_size: Optional[int], actual_size: int) -> None:
        """
        Check the file against the byte ceiling.

        Both the size the client declared and the bytes actually received are
        checked; either one over the limit rejects the upload.
        """
        limit = self.max_file_size
        max_mb = limit / (1024 * 1024)

        if actual_size == 0:
            raise UploadRejectedError(message="Uploaded image is empty.")

        size = max(declared_size or 0, actual_size)
        if size > limit:
            raise UploadRejectedError(
                message=f"File too large: {size / (1024 * 1024):.1f}MB exceeds the {max_mb:.0f}MB limit.",
                context={"max_size": limit, "actual_size": actual_size, "declared_size": declared_size},
            )

    def validate(self, upload: ImageUpload) -> None:
        """Run every check; the cheap content-type check goes first."""
        self.validate_content_type(upload.content_type)
        self.validate_size(upload.declared_size, len(upload.content))

    @staticmethod
    def safe_name(filename: str) -> str:
        """Strip directories and unsafe characters from a client-supplied name."""
        name = Path(filename.replace("\\", "/")).name
        name = _UNSAFE_CHARS.sub("-", name).strip("-.")
        return name or "image"

    def _generate_storage_path(self, filename: str) -> Tuple[Path, str]:
        """
        Build <storage_root>/projects/<epoch-ms>-<name>.

        Returns: Tuple of (absolute_path, public_path).
        """
        unique_name = f"{int(time.time() * 1000)}-{self.safe_name(filename)}"
        relative_path = f"{PROJECT_IMAGE_DIR}/{unique_name}"
        absolute_path = self.storage_root / relative_path
        return absolute_path, f"{PUBLIC_PREFIX}/{relative_path}"

    async def store_image(self, upload: ImageUpload) -> Tuple[str, str]:
        """
        Write the image to disk.

        Returns: Tuple of (absolute_path, public_path).
        Raises:  FileStorageError if the directory or file cannot be written.
        """
        absolute_path, public_path = self._generate_storage_path(upload.filename)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(upload.content)
        except OSError as e:
            logger.error("Failed to store image at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("Image stored: %s (%d bytes)", public_path, len(upload.content))
        return str(absolute_path), public_path

    async def validate_and_store(self, upload: ImageUpload) -> Tuple[str, str]:
        """Validate the upload, then store it. Returns (absolute_path, public_path)."""
        self.validate(upload)
        return await self.store_image(upload)

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a stored image after a failed record creation.

        Best effort: a missing file is ignored and other failures are logged,
        never raised, so the original error reaches the client.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up image: %s", path.name)
            else:
                logger.debug("Cleanup: image already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up image %s: %s", file_path, str(e))

    def resolve_public_file(self, relative_path: str) -> Optional[Path]:
        """
        Map a path under /uploads back to a file inside the storage root.

        Returns None when the path escapes the storage root.
        """
        root = self.storage_root
        full_path = (root / relative_path).resolve()
        if full_path != root and root not in full_path.parents:
            return None
        return full_path


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
