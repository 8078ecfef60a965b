"""In-process stores used for dry runs and tests."""
from __future__ import annotations

import itertools
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Sequence

from ..errors import DownloadError, PersistenceError
from .base import RecordId


class InMemoryBlobStore:
    """Dictionary backed blob store."""

    def __init__(self) -> None:
        self.blobs: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def upload(self, path: str, data: bytes) -> str:
        with self._lock:
            self.blobs[path] = bytes(data)
        return path

    def download(self, path: str) -> bytes:
        try:
            return self.blobs[path]
        except KeyError as exc:
            raise DownloadError(f"Object '{path}' was not found", path=path) from exc

    def remove(self, paths: Sequence[str]) -> None:
        with self._lock:
            for path in paths:
                self.blobs.pop(path, None)


class InMemoryRecordStore:
    """List backed record store assigning sequential integer ids."""

    def __init__(self, rows: Sequence[Mapping[str, Any]] = ()) -> None:
        self.rows: List[Dict[str, Any]] = []
        self._ids = itertools.count(1)
        for row in rows:
            self.insert(row)

    def insert(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        stored = dict(row)
        stored.setdefault("id", next(self._ids))
        stored.setdefault("created_at", utc_now())
        self.rows.append(stored)
        return dict(stored)

    def list(self, order_by: str = "created_at", descending: bool = True) -> List[Dict[str, Any]]:
        return sort_rows(self.rows, order_by, descending)

    def update(self, record_id: RecordId, fields: Mapping[str, Any]) -> Dict[str, Any]:
        row = self._find(record_id)
        row.update(fields)
        return dict(row)

    def delete(self, record_id: RecordId) -> None:
        row = self._find(record_id)
        self.rows.remove(row)

    def _find(self, record_id: RecordId) -> Dict[str, Any]:
        for row in self.rows:
            if str(row.get("id")) == str(record_id):
                return row
        raise PersistenceError(f"Lead record {record_id} does not exist")


def sort_rows(rows: Sequence[Mapping[str, Any]], order_by: str, descending: bool) -> List[Dict[str, Any]]:
    # Insertion position breaks ties between equal sort keys.
    indexed = list(enumerate(rows))
    indexed.sort(key=lambda item: (str(item[1].get(order_by) or ""), item[0]), reverse=descending)
    return [dict(row) for _, row in indexed]


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


__all__ = ["InMemoryBlobStore", "InMemoryRecordStore", "sort_rows"]
