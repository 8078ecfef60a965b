from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError
from storage3.utils import StorageException

from lead_reconciler.config import ConfigurationError
from lead_reconciler.errors import DownloadError, PersistenceError, StorageError, UploadError
from lead_reconciler.storage.supabase import SupabaseBlobStore, SupabaseRecordStore, SupabaseSettings


class FakeBucket:
    def __init__(self, fail: bool = False) -> None:
        self.objects = {}
        self.uploads = []
        self.fail = fail

    def upload(self, path, file, file_options=None):
        if self.fail:
            raise StorageException({"message": "Bucket not found"})
        self.uploads.append((path, file_options))
        self.objects[path] = file
        return SimpleNamespace(path=path, full_path=f"lead-files/{path}")

    def download(self, path):
        if path not in self.objects:
            raise StorageException({"message": "Object not found"})
        return self.objects[path]

    def remove(self, paths):
        if self.fail:
            raise StorageException({"message": "Bucket not found"})
        for path in paths:
            self.objects.pop(path, None)
        return [{"name": path} for path in paths]


class FakeStorage:
    def __init__(self, bucket: FakeBucket) -> None:
        self.bucket = bucket
        self.requested = []

    def from_(self, name):
        self.requested.append(name)
        return self.bucket


class FakeQuery:
    """Chainable stand-in for the postgrest request builder."""

    def __init__(self, table: "FakeTable", action: str, payload=None) -> None:
        self.table = table
        self.action = action
        self.payload = payload
        self.filters = {}
        self.ordering = None

    def eq(self, column, value):
        self.filters[column] = value
        return self

    def order(self, column, desc=False):
        self.ordering = (column, desc)
        return self

    def execute(self):
        if self.table.fail:
            raise APIError({"message": "permission denied", "code": "42501"})
        rows = self.table.rows
        if self.action == "insert":
            row = dict(self.payload, id=len(rows) + 1)
            rows.append(row)
            return SimpleNamespace(data=[row])
        if self.action == "select":
            column, desc = self.ordering
            return SimpleNamespace(data=sorted(rows, key=lambda row: row[column], reverse=desc))
        matched = [row for row in rows if all(row.get(key) == value for key, value in self.filters.items())]
        if self.action == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=matched)
        for row in matched:
            rows.remove(row)
        return SimpleNamespace(data=matched)


class FakeTable:
    def __init__(self, fail: bool = False) -> None:
        self.rows = []
        self.fail = fail

    def insert(self, payload):
        return FakeQuery(self, "insert", payload)

    def select(self, columns):
        return FakeQuery(self, "select")

    def update(self, payload):
        return FakeQuery(self, "update", payload)

    def delete(self):
        return FakeQuery(self, "delete")


class FakeClient:
    def __init__(self, fail: bool = False) -> None:
        self.storage = FakeStorage(FakeBucket(fail=fail))
        self.tables = {}
        self.fail = fail

    def table(self, name):
        return self.tables.setdefault(name, FakeTable(fail=self.fail))


def test_blob_store_uses_bucket_with_upsert():
    client = FakeClient()
    store = SupabaseBlobStore(client=client)

    assert store.upload("lead16/leads.csv", b"data") == "lead16/leads.csv"
    assert store.download("lead16/leads.csv") == b"data"
    path, options = client.storage.bucket.uploads[0]
    assert options == {"cache-control": "3600", "upsert": "true"}
    assert client.storage.requested[0] == "lead-files"

    store.remove(["lead16/leads.csv"])
    with pytest.raises(DownloadError):
        store.download("lead16/leads.csv")


def test_blob_store_translates_errors():
    store = SupabaseBlobStore("other-bucket", client=FakeClient(fail=True))

    with pytest.raises(UploadError) as excinfo:
        store.upload("lead16/leads.csv", b"data")
    assert excinfo.value.path == "lead16/leads.csv"
    with pytest.raises(StorageError):
        store.remove(["lead16/leads.csv"])
    store.remove([])


def test_record_store_round_trip():
    client = FakeClient()
    store = SupabaseRecordStore(client=client)

    first = store.insert({"filename": "a.csv", "created_at": "2025-01-01"})
    store.insert({"filename": "b.csv", "created_at": "2025-01-02"})

    assert first["id"] == 1
    assert [row["filename"] for row in store.list()] == ["b.csv", "a.csv"]
    assert store.update(1, {"main_phone_column": "Phone"})["main_phone_column"] == "Phone"
    store.delete(2)
    assert [row["id"] for row in client.table("leads").rows] == [1]

    with pytest.raises(PersistenceError):
        store.update(42, {"main_phone_column": "Phone"})


def test_record_store_translates_api_errors():
    store = SupabaseRecordStore("leads", client=FakeClient(fail=True))

    with pytest.raises(PersistenceError):
        store.insert({"filename": "a.csv"})
    with pytest.raises(PersistenceError):
        store.list()
    with pytest.raises(PersistenceError):
        store.delete(1)


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "anon-key")

    settings = SupabaseSettings.from_env()

    assert settings.url == "https://example.supabase.co"
    assert settings.key == "anon-key"


def test_settings_require_credentials(monkeypatch, tmp_path):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_KEY", raising=False)

    with pytest.raises(ConfigurationError):
        SupabaseSettings.from_env(tmp_path / "missing.env")
