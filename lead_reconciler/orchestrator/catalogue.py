"""Read, filter, export, and delete catalogued lead records."""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from ..errors import LeadFileError, PersistenceError
from ..models import CatalogueStats, FilteredExport, LeadRecord, Outcome
from ..reconcile import filtered_filename, reconcile
from ..storage.base import BlobStore, RecordId, RecordStore

LOGGER = logging.getLogger(__name__)

_SIZE_LABEL = re.compile(r"^\s*([0-9]+(?:\.[0-9]+)?)\s*MB\s*$", re.IGNORECASE)


def format_failed_percentage(record: LeadRecord) -> str:
    return f"{record.failed_percentage * 100:.2f}%"


def parse_size_label(label: Optional[str]) -> float:
    """Return the megabytes in a ``"16.67 MB"`` label, or 0 for anything else."""

    match = _SIZE_LABEL.match(label or "")
    return float(match.group(1)) if match else 0.0


def summarise(records: List[LeadRecord]) -> CatalogueStats:
    return CatalogueStats(
        total_files=len(records),
        total_size_mb=round(sum(parse_size_label(record.file_size) for record in records), 2),
        total_leads=sum(record.leads for record in records),
        total_uploaded=sum(record.uploaded for record in records),
    )


def matches(record: LeadRecord, query: str) -> bool:
    """Case-insensitive match on filename, list id, or affiliate id."""

    needle = query.strip().lower()
    if not needle:
        return True
    haystack = (record.filename, record.list_id, record.affiliate_id)
    return any(needle in str(value).lower() for value in haystack)


class LeadCatalogue:
    """Operations available on records that are already stored."""

    def __init__(self, blob_store: BlobStore, record_store: RecordStore) -> None:
        self._blob_store = blob_store
        self._record_store = record_store

    def list_records(self) -> List[LeadRecord]:
        """Newest first."""

        return [LeadRecord.from_row(row) for row in self._record_store.list(order_by="created_at", descending=True)]

    def get(self, record_id: RecordId) -> LeadRecord:
        for record in self.list_records():
            if str(record.id) == str(record_id):
                return record
        raise PersistenceError(f"Lead record {record_id} does not exist")

    def search(self, query: str) -> List[LeadRecord]:
        return [record for record in self.list_records() if matches(record, query)]

    def stats(self, records: Optional[List[LeadRecord]] = None) -> CatalogueStats:
        return summarise(self.list_records() if records is None else records)

    def update_phone_columns(
        self,
        record_id: RecordId,
        *,
        main_phone_column: Optional[str] = None,
        dialables_phone_column: Optional[str] = None,
    ) -> Outcome:
        """Override the stored phone column choices. Last write wins."""

        fields: Dict[str, Any] = {}
        if main_phone_column is not None:
            fields["main_phone_column"] = main_phone_column
        if dialables_phone_column is not None:
            fields["dialables_phone_column"] = dialables_phone_column
        if not fields:
            return Outcome.success(message="Nothing to update")

        try:
            row = self._record_store.update(record_id, fields)
        except LeadFileError as exc:
            LOGGER.exception("Updating phone columns of record %s failed", record_id)
            return Outcome.failure(exc)
        LOGGER.info("Updated phone columns of record %s: %s", record_id, fields)
        return Outcome.success(LeadRecord.from_row(row), message="Phone columns updated")

    def export_filtered(self, record: LeadRecord) -> Outcome:
        """Build the ``filtered_`` copy of the main file for ``record``.

        Both files are downloaded again and the set of dialed numbers is rebuilt
        on every call.
        """

        try:
            main_text = _decode(self._blob_store.download(record.main_file_path))
            dialables_text = _decode(self._blob_store.download(record.dialables_file_path))
            result = reconcile(
                main_text,
                dialables_text,
                record.main_phone_column,
                record.dialables_phone_column,
            )
        except LeadFileError as exc:
            LOGGER.error("Export of %s failed: %s", record.filename, exc)
            return Outcome.failure(exc)

        export = FilteredExport(
            filename=filtered_filename(record.filename),
            content=result.text.encode("utf-8"),
            kept=result.kept,
            removed=result.removed,
        )
        return Outcome.success(
            export,
            message=f"Downloaded {result.kept} unuploaded leads ({result.removed} already uploaded were removed)",
        )

    def delete_record(self, record: LeadRecord) -> Outcome:
        """Remove the stored files, then the record.

        When the files cannot be removed the record is left untouched so it can
        be retried.
        """

        try:
            self._blob_store.remove(record.blob_paths)
        except LeadFileError as exc:
            LOGGER.exception("Removing files of record %s failed, keeping the record", record.id)
            return Outcome.failure(exc)

        try:
            self._record_store.delete(record.id)
        except LeadFileError as exc:
            LOGGER.exception("Deleting record %s failed after its files were removed", record.id)
            return Outcome.failure(exc)

        LOGGER.info("Deleted record %s (%s)", record.id, record.filename)
        return Outcome.success(record, message="Lead record and files deleted")


def _decode(content: bytes) -> str:
    return content.decode("utf-8-sig", errors="replace")


__all__ = [
    "LeadCatalogue",
    "format_failed_percentage",
    "matches",
    "parse_size_label",
    "summarise",
]
