"""Storage collaborator for uploaded verification documents."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Protocol

from onthebell.core.errors import ExternalDependencyError, ValidationError
from onthebell.core.settings import settings

logger = logging.getLogger(__name__)


class DocumentStorage(Protocol):
    """Interface the verification lifecycle needs from file storage."""

    def delete(self, reference: str) -> None:
        """Delete the stored object; raise ExternalDependencyError on failure."""


class LocalDocumentStorage:
    """Stores documents on the local filesystem below ``root``.

    References are paths relative to ``root``; anything resolving outside of
    it is rejected.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, reference: str) -> Path:
        path = (self.root / reference).resolve()
        if not path.is_relative_to(self.root):
            raise ValidationError("Document reference escapes the upload directory")
        return path

    def save(self, reference: str, content: bytes) -> str:
        path = self._resolve(reference)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as exc:
            raise ExternalDependencyError(f"Failed to store document: {exc}") from exc
        return reference

    def exists(self, reference: str) -> bool:
        return self._resolve(reference).is_file()

    def delete(self, reference: str) -> None:
        path = self._resolve(reference)
        try:
            path.unlink()
        except OSError as exc:
            raise ExternalDependencyError(f"Failed to delete document: {exc}") from exc
        logger.info("Deleted stored document %s", reference)


def validate_document_reference(reference: str) -> str:
    """Reject references that are absolute or climb out of the upload root."""
    posix = PurePosixPath(reference)
    windows = PureWindowsPath(reference)
    if (
        not reference.strip()
        or posix.is_absolute()
        or windows.is_absolute()
        or windows.drive
        or ".." in posix.parts
        or ".." in windows.parts
    ):
        raise ValidationError("Invalid proof document reference")
    return reference


def get_document_storage() -> DocumentStorage:
    """Return a document storage rooted at the configured upload directory."""
    return LocalDocumentStorage(settings.upload_dir)
