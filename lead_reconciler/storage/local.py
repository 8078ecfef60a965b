"""Filesystem backed stores for running the toolkit without a hosted backend."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Union

from ..errors import DownloadError, PersistenceError, StorageError, UploadError
from .base import RecordId
from .memory import utc_now, sort_rows

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]


class LocalBlobStore:
    """Stores blobs as files below a root directory."""

    def __init__(self, root: PathLike = "lead-store/files") -> None:
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if not target.is_relative_to(self.root.resolve()):
            raise StorageError(f"Path '{path}' escapes the storage root", path=path)
        return target

    def upload(self, path: str, data: bytes) -> str:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise UploadError(f"Could not write '{path}': {exc}", path=path) from exc
        LOGGER.debug("Stored %s bytes at %s", len(data), target)
        return path

    def download(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            return target.read_bytes()
        except OSError as exc:
            raise DownloadError(f"Could not read '{path}': {exc}", path=path) from exc

    def remove(self, paths: Sequence[str]) -> None:
        for path in paths:
            target = self._resolve(path)
            try:
                target.unlink(missing_ok=True)
            except OSError as exc:
                raise StorageError(f"Could not remove '{path}': {exc}", path=path) from exc


class LocalRecordStore:
    """Keeps lead rows in a single JSON document."""

    def __init__(self, path: PathLike = "lead-store/records.json") -> None:
        self.path = Path(path)

    def _load(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Could not read record file '{self.path}': {exc}") from exc

    def _save(self, rows: List[Dict[str, Any]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(rows, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Could not write record file '{self.path}': {exc}") from exc

    def insert(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        rows = self._load()
        stored = dict(row)
        stored.setdefault("id", max((int(existing.get("id") or 0) for existing in rows), default=0) + 1)
        stored.setdefault("created_at", utc_now())
        rows.append(stored)
        self._save(rows)
        return stored

    def list(self, order_by: str = "created_at", descending: bool = True) -> List[Dict[str, Any]]:
        return sort_rows(self._load(), order_by, descending)

    def update(self, record_id: RecordId, fields: Mapping[str, Any]) -> Dict[str, Any]:
        rows = self._load()
        row = _find(rows, record_id)
        row.update(fields)
        self._save(rows)
        return dict(row)

    def delete(self, record_id: RecordId) -> None:
        rows = self._load()
        rows.remove(_find(rows, record_id))
        self._save(rows)


def _find(rows: List[Dict[str, Any]], record_id: RecordId) -> Dict[str, Any]:
    for row in rows:
        if str(row.get("id")) == str(record_id):
            return row
    raise PersistenceError(f"Lead record {record_id} does not exist")


__all__ = ["LocalBlobStore", "LocalRecordStore"]
