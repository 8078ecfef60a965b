"""Exception hierarchy shared by ingestion, reconciliation, and storage code."""
from __future__ import annotations

from typing import Optional, Sequence


class LeadFileError(Exception):
    """Base class for every failure surfaced to users of the toolkit."""

    kind = "error"


class ClassificationError(LeadFileError):
    """Raised when a filename cannot be assigned a role in an upload batch."""

    kind = "classification"

    def __init__(self, message: str, filename: Optional[str] = None) -> None:
        super().__init__(message)
        self.filename = filename


class MissingFilesError(ClassificationError):
    """Raised when a batch lacks the main or the dialables file."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required files: {', '.join(self.missing)}")


class ParseError(LeadFileError):
    """Raised when a file does not contain the rows a parser needs."""

    kind = "parse"


class ColumnNotFoundError(LeadFileError):
    """Raised when a named column is absent from a file header."""

    kind = "column_not_found"

    def __init__(self, column: Optional[str], available: Sequence[str] = ()) -> None:
        self.column = column
        self.available = list(available)
        if column:
            message = f"Column '{column}' was not found in the file header"
        else:
            message = "No phone column has been selected for this file"
        super().__init__(message)


class StorageError(LeadFileError):
    """Raised when the blob store rejects a call."""

    kind = "storage"

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class UploadError(StorageError):
    kind = "upload"


class DownloadError(StorageError):
    kind = "download"


class PersistenceError(LeadFileError):
    """Raised when the record store rejects an insert, update, or delete."""

    kind = "persistence"


__all__ = [
    "LeadFileError",
    "ClassificationError",
    "MissingFilesError",
    "ParseError",
    "ColumnNotFoundError",
    "StorageError",
    "UploadError",
    "DownloadError",
    "PersistenceError",
]
