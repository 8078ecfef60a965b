"""Data models shared by the ingestion engine, the catalogue, and the stores."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import LeadFileError

DEFAULT_DIALABLES_PHONE_COLUMN = "phone_numbers"


# --- Derived enums ---

class FileRole(str, Enum):
    """Role of an uploaded file inside an ingestion batch."""

    MAIN = "main"
    DIALABLES = "dialables"
    UNPROCESSED = "unprocessed"
    UNKNOWN = "unknown"


class DelimiterKind(str, Enum):
    """Cell delimiters recognised by the tabular text sniffer."""

    COMMA = ","
    SEMICOLON = ";"
    TAB = "\t"

    @property
    def char(self) -> str:
        return self.value


# --- Input files ---

@dataclass(slots=True)
class RawFile:
    """A named blob handed over by the caller before classification."""

    filename: str
    content: bytes
    size: Optional[int] = None

    def __post_init__(self) -> None:
        if self.size is None:
            self.size = len(self.content)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "RawFile":
        file_path = Path(path)
        return cls(filename=file_path.name, content=file_path.read_bytes())

    def text(self) -> str:
        """Decode the blob as UTF-8, tolerating a byte order mark."""

        return self.content.decode("utf-8-sig", errors="replace")


# --- Parser outputs ---

@dataclass(frozen=True)
class DialablesSummary:
    """Campaign metadata read from the first data row of a dialables file."""

    entry_date: str
    list_id: str
    affiliate_id: str
    click_id: str
    row_count: int


@dataclass(frozen=True)
class FilterResult:
    """Main file text with already dialed rows removed."""

    text: str
    kept: int
    removed: int

    @property
    def total(self) -> int:
        return self.kept + self.removed


@dataclass(frozen=True)
class FilteredExport:
    """Downloadable artifact produced for a stored lead record."""

    filename: str
    content: bytes
    kept: int
    removed: int


@dataclass(frozen=True)
class IngestionProgress:
    stage: str
    percent: int


# --- Persisted record ---

@dataclass
class LeadRecord:
    """A catalogued upload batch as stored in the record store."""

    entry_date: str
    list_id: str
    affiliate_id: str
    click_id: str
    filename: str
    file_size: str
    leads: int
    uploaded: int
    main_file_path: str
    dialables_file_path: str
    unprocessed: int = 0
    unprocessed_file_path: Optional[str] = None
    main_phone_column: Optional[str] = None
    dialables_phone_column: str = DEFAULT_DIALABLES_PHONE_COLUMN
    user_id: Optional[str] = None
    id: Optional[Union[int, str]] = None
    created_at: Optional[str] = None

    @property
    def failed_percentage(self) -> float:
        """Share of leads that never reached the dialer, derived on every read."""

        if self.leads <= 0:
            return 0.0
        return (self.leads - self.uploaded) / self.leads

    @property
    def blob_paths(self) -> List[str]:
        paths = [self.main_file_path, self.dialables_file_path, self.unprocessed_file_path]
        return [path for path in paths if path]

    def as_row(self) -> Dict[str, Any]:
        """Return the record-store representation, without store-assigned fields."""

        row: Dict[str, Any] = {
            "entry_date": self.entry_date,
            "list_id": self.list_id,
            "affiliate_id": self.affiliate_id,
            "click_id": self.click_id,
            "filename": self.filename,
            "file_size": self.file_size,
            "leads": self.leads,
            "uploaded": self.uploaded,
            "unprocessed": self.unprocessed,
            "main_file_path": self.main_file_path,
            "dialables_file_path": self.dialables_file_path,
            "unprocessed_file_path": self.unprocessed_file_path,
            "main_phone_column": self.main_phone_column,
            "dialables_phone_column": self.dialables_phone_column,
            "user_id": self.user_id,
        }
        if self.created_at:
            row["created_at"] = self.created_at
        return row

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "LeadRecord":
        return cls(
            id=row.get("id"),
            entry_date=str(row.get("entry_date") or ""),
            list_id=str(row.get("list_id") or ""),
            affiliate_id=str(row.get("affiliate_id") or ""),
            click_id=str(row.get("click_id") or ""),
            filename=str(row.get("filename") or ""),
            file_size=str(row.get("file_size") or ""),
            leads=int(row.get("leads") or 0),
            uploaded=int(row.get("uploaded") or 0),
            unprocessed=int(row.get("unprocessed") or 0),
            main_file_path=str(row.get("main_file_path") or ""),
            dialables_file_path=str(row.get("dialables_file_path") or ""),
            unprocessed_file_path=row.get("unprocessed_file_path") or None,
            main_phone_column=row.get("main_phone_column") or None,
            dialables_phone_column=row.get("dialables_phone_column") or DEFAULT_DIALABLES_PHONE_COLUMN,
            user_id=row.get("user_id") or None,
            created_at=row.get("created_at") or None,
        )


@dataclass(frozen=True)
class CatalogueStats:
    """Totals shown above the lead table."""

    total_files: int = 0
    total_size_mb: float = 0.0
    total_leads: int = 0
    total_uploaded: int = 0


# --- Tagged results ---

@dataclass(frozen=True)
class Outcome:
    """Success value or error description returned by service operations."""

    ok: bool
    value: Any = None
    error_kind: Optional[str] = None
    message: str = ""
    error: Optional[LeadFileError] = field(default=None, compare=False, repr=False)
    # non-fatal notices, one per skipped file
    warnings: Tuple[str, ...] = ()

    @classmethod
    def success(cls, value: Any = None, message: str = "", warnings: Sequence[str] = ()) -> "Outcome":
        return cls(ok=True, value=value, message=message, warnings=tuple(warnings))

    @classmethod
    def failure(cls, error: LeadFileError) -> "Outcome":
        return cls(ok=False, error_kind=error.kind, message=str(error), error=error)

    def unwrap(self) -> Any:
        """Return the value or re-raise the captured error."""

        if not self.ok:
            if self.error is not None:
                raise self.error
            raise LeadFileError(self.message)
        return self.value


__all__ = [
    "DEFAULT_DIALABLES_PHONE_COLUMN",
    "FileRole",
    "DelimiterKind",
    "RawFile",
    "DialablesSummary",
    "FilterResult",
    "FilteredExport",
    "IngestionProgress",
    "LeadRecord",
    "CatalogueStats",
    "Outcome",
]
