"""Blob and record store interfaces with local and hosted backends."""

from .base import BlobStore, RecordStore, lead_folder
from .local import LocalBlobStore, LocalRecordStore
from .memory import InMemoryBlobStore, InMemoryRecordStore

__all__ = [
    "BlobStore",
    "RecordStore",
    "lead_folder",
    "LocalBlobStore",
    "LocalRecordStore",
    "InMemoryBlobStore",
    "InMemoryRecordStore",
]
