"""
Supabase backed stores.

Uploaded lead files live in a Storage bucket (``lead-files`` by default) and
catalogue rows live in a Postgres table (``leads`` by default). Both stores
accept an existing client so several stores can share one connection.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import httpx
from dotenv import load_dotenv
from postgrest.exceptions import APIError
from storage3.utils import StorageException
from supabase import Client, create_client

from ..config import ConfigurationError
from ..errors import DownloadError, PersistenceError, StorageError, UploadError
from .base import RecordId

LOGGER = logging.getLogger(__name__)

DEFAULT_BUCKET = "lead-files"
DEFAULT_TABLE = "leads"
CACHE_CONTROL_SECONDS = "3600"

_STORAGE_ERRORS = (StorageException, httpx.HTTPError)
_TABLE_ERRORS = (APIError, httpx.HTTPError)


@dataclass
class SupabaseSettings:
    """Supabase connection configuration."""

    url: str
    key: str  # anon key for per-user access, service role key for batch jobs

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "SupabaseSettings":
        """Load credentials from ``SUPABASE_URL`` and ``SUPABASE_KEY``."""

        if env_file is not None:
            load_dotenv(env_file)
        url = os.getenv("SUPABASE_URL")
        key = os.getenv("SUPABASE_KEY")

        if not url or not key:
            raise ConfigurationError(
                "Missing Supabase credentials. Set SUPABASE_URL and SUPABASE_KEY environment variables."
            )
        return cls(url=url, key=key)


_clients: Dict[tuple, Client] = {}


def get_client(settings: Optional[SupabaseSettings] = None) -> Client:
    """Return a cached client for ``settings`` (environment credentials by default)."""

    if settings is None:
        settings = SupabaseSettings.from_env()
    cache_key = (settings.url, settings.key)
    if cache_key not in _clients:
        _clients[cache_key] = create_client(settings.url, settings.key)
    return _clients[cache_key]


class SupabaseBlobStore:
    """Blob store writing to a Supabase Storage bucket."""

    def __init__(
        self,
        bucket: str = DEFAULT_BUCKET,
        *,
        client: Optional[Client] = None,
        url: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        self.bucket = bucket
        self.client = client or get_client(SupabaseSettings(url, key) if url and key else None)

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def upload(self, path: str, data: bytes) -> str:
        try:
            response = self._bucket().upload(
                path=path,
                file=data,
                file_options={"cache-control": CACHE_CONTROL_SECONDS, "upsert": "true"},
            )
        except _STORAGE_ERRORS as exc:
            raise UploadError(f"Upload of '{path}' failed: {exc}", path=path) from exc
        stored_path = getattr(response, "path", None) or path
        LOGGER.debug("Uploaded %s bytes to %s/%s", len(data), self.bucket, stored_path)
        return stored_path

    def download(self, path: str) -> bytes:
        try:
            return self._bucket().download(path)
        except _STORAGE_ERRORS as exc:
            raise DownloadError(f"Download of '{path}' failed: {exc}", path=path) from exc

    def remove(self, paths: Sequence[str]) -> None:
        if not paths:
            return
        try:
            self._bucket().remove(list(paths))
        except _STORAGE_ERRORS as exc:
            raise StorageError(f"Removing {len(paths)} file(s) failed: {exc}") from exc


class SupabaseRecordStore:
    """Record store backed by a Supabase table."""

    def __init__(
        self,
        table: str = DEFAULT_TABLE,
        *,
        client: Optional[Client] = None,
        url: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        self.table = table
        self.client = client or get_client(SupabaseSettings(url, key) if url and key else None)

    def _table(self):
        return self.client.table(self.table)

    def insert(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            result = self._table().insert(dict(row)).execute()
        except _TABLE_ERRORS as exc:
            raise PersistenceError(f"Saving lead record failed: {exc}") from exc
        return result.data[0] if result.data else dict(row)

    def list(self, order_by: str = "created_at", descending: bool = True) -> List[Dict[str, Any]]:
        try:
            result = self._table().select("*").order(order_by, desc=descending).execute()
        except _TABLE_ERRORS as exc:
            raise PersistenceError(f"Loading lead records failed: {exc}") from exc
        return list(result.data or [])

    def update(self, record_id: RecordId, fields: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            result = self._table().update(dict(fields)).eq("id", record_id).execute()
        except _TABLE_ERRORS as exc:
            raise PersistenceError(f"Updating lead record {record_id} failed: {exc}") from exc
        if not result.data:
            raise PersistenceError(f"Lead record {record_id} does not exist")
        return result.data[0]

    def delete(self, record_id: RecordId) -> None:
        try:
            self._table().delete().eq("id", record_id).execute()
        except _TABLE_ERRORS as exc:
            raise PersistenceError(f"Deleting lead record {record_id} failed: {exc}") from exc


__all__ = [
    "DEFAULT_BUCKET",
    "DEFAULT_TABLE",
    "SupabaseBlobStore",
    "SupabaseRecordStore",
    "SupabaseSettings",
    "get_client",
]
