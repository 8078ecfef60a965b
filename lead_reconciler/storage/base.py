"""Interfaces for the blob and record stores the catalogue talks to."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Protocol, Sequence, Union

RecordId = Union[int, str]


class BlobStore(Protocol):
    """Stores uploaded files under slash-separated paths."""

    def upload(self, path: str, data: bytes) -> str:  # pragma: no cover - runtime protocol
        """Store ``data`` and return the stored path. Raises :class:`UploadError`."""

    def download(self, path: str) -> bytes:  # pragma: no cover - runtime protocol
        """Return the stored bytes. Raises :class:`DownloadError`."""

    def remove(self, paths: Sequence[str]) -> None:  # pragma: no cover - runtime protocol
        """Delete every path in ``paths``. Raises :class:`StorageError`."""


class RecordStore(Protocol):
    """Persists flat lead rows. Failures raise :class:`PersistenceError`."""

    def insert(self, row: Mapping[str, Any]) -> Dict[str, Any]:  # pragma: no cover - runtime protocol
        """Persist ``row`` and return it with store-assigned fields."""

    def list(self, order_by: str = "created_at", descending: bool = True) -> List[Dict[str, Any]]:  # pragma: no cover
        """Return every stored row."""

    def update(self, record_id: RecordId, fields: Mapping[str, Any]) -> Dict[str, Any]:  # pragma: no cover
        """Apply a partial update and return the stored row."""

    def delete(self, record_id: RecordId) -> None:  # pragma: no cover - runtime protocol
        """Remove the row."""


def lead_folder(affiliate_id: str, user_id: str | None = None) -> str:
    """Folder holding every file uploaded for one affiliate."""

    folder = f"lead{affiliate_id}"
    if user_id:
        return f"{user_id}/{folder}"
    return folder


__all__ = ["BlobStore", "RecordStore", "RecordId", "lead_folder"]
