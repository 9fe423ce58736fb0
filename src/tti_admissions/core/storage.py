"""
Document Storage

Storage for candidate documents uploaded with an admission. Only the
local filesystem backend is provided; object storage can be added behind
the same interface.
"""

import hashlib
import logging
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

import aiofiles

from tti_admissions.core.config import settings

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".pdf", ".webp"})


class InvalidDocumentError(ValueError):
    """Raised when an uploaded document has a disallowed type or size."""


def calculate_checksum(content: bytes) -> str:
    """Calculate SHA256 checksum of file content."""
    return hashlib.sha256(content).hexdigest()


def validate_document(filename: str, size: int, max_bytes: int | None = None) -> str:
    """
    Check an upload's extension and size.

    Returns:
        The normalized (lower case) extension

    Raises:
        InvalidDocumentError: If the extension is not allowed, or the file is
            empty or too large
    """
    max_bytes = max_bytes if max_bytes is not None else settings.max_document_bytes
    ext = Path(filename or "").suffix.lower()

    if ext not in ALLOWED_EXTENSIONS:
        raise InvalidDocumentError(
            f"File type '{ext or filename}' is not allowed. "
            f"Allowed: {', '.join(sorted(e.lstrip('.') for e in ALLOWED_EXTENSIONS))}"
        )
    if size <= 0:
        raise InvalidDocumentError(f"File '{filename}' is empty")
    if size > max_bytes:
        raise InvalidDocumentError(
            f"File '{filename}' exceeds the maximum size of {max_bytes // (1024 * 1024)} MB"
        )
    return ext


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod
    async def save(
        self, file_content: bytes, filename: str, subdir: str | None = None
    ) -> tuple[str, str]:
        """
        Save file content and return (file_path, checksum).

        Args:
            file_content: File content as bytes
            filename: Original filename
            subdir: Optional subdirectory

        Returns:
            Tuple of (relative_file_path, checksum)
        """

    @abstractmethod
    async def delete(self, file_path: str) -> None:
        """Delete a file previously returned by save()."""

    @abstractmethod
    async def exists(self, file_path: str) -> bool:
        """Check if a file previously returned by save() exists."""


class LocalStorageBackend(StorageBackend):
    """Local filesystem storage backend."""

    def __init__(self, base_path: str | Path, max_bytes: int | None = None):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.max_bytes = max_bytes

    def _resolve_path(self, file_path: str | Path) -> Path:
        path = (self.base_path / file_path).resolve()
        # Never read or write outside the storage root
        if not path.is_relative_to(self.base_path.resolve()):
            raise InvalidDocumentError(f"Invalid storage path: {file_path}")
        return path

    async def save(
        self, file_content: bytes, filename: str, subdir: str | None = None
    ) -> tuple[str, str]:
        """
        Validate and save a document under a generated name.

        The original filename is only used for its extension.

        Raises:
            InvalidDocumentError: If the document is rejected by validate_document()
        """
        ext = validate_document(filename, len(file_content), self.max_bytes)
        checksum = calculate_checksum(file_content)

        file_dir = self.base_path / subdir if subdir else self.base_path
        file_dir.mkdir(parents=True, exist_ok=True)
        file_path = file_dir / f"{uuid.uuid4()}{ext}"

        async with aiofiles.open(file_path, "wb") as f:
            await f.write(file_content)

        relative_path = file_path.relative_to(self.base_path)
        logger.debug(f"Stored document {relative_path} ({len(file_content)} bytes)")
        return str(relative_path), checksum

    async def delete(self, file_path: str) -> None:
        if await self.exists(file_path):
            os.remove(self._resolve_path(file_path))

    async def exists(self, file_path: str) -> bool:
        return self._resolve_path(file_path).is_file()


_storage: StorageBackend | None = None


def get_storage() -> StorageBackend:
    """FastAPI dependency returning the configured storage backend."""
    global _storage
    if _storage is None:
        _storage = LocalStorageBackend(settings.storage_path, settings.max_document_bytes)
    return _storage
