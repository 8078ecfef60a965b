"""Export helpers for catalogued records and filtered lead files."""
from __future__ import annotations

from pathlib import Path
from typing import List, MutableMapping, Optional, Sequence, Union

import pandas as pd

from .models import FilteredExport, LeadRecord
from .orchestrator.catalogue import format_failed_percentage

PathLike = Union[str, Path]

_CSV_SUFFIXES = {".csv", ".tsv"}
_EXCEL_SUFFIXES = {".xls", ".xlsx", ".xlsm", ".xlsb"}

RECORD_COLUMNS = [
    "id",
    "entry_date",
    "list_id",
    "affiliate_id",
    "click_id",
    "filename",
    "file_size",
    "leads",
    "uploaded",
    "failed",
    "unprocessed",
    "main_phone_column",
    "dialables_phone_column",
    "created_at",
]


def records_to_dataframe(records: Sequence[LeadRecord]) -> pd.DataFrame:
    """Convert records into the column layout of the lead table."""

    rows: List[MutableMapping[str, object]] = []
    for record in records:
        row: MutableMapping[str, object] = dict(record.as_row())
        row["id"] = record.id
        row["created_at"] = record.created_at
        row["failed"] = format_failed_percentage(record)
        rows.append(row)
    return pd.DataFrame(rows, columns=RECORD_COLUMNS)


def export_records(
    records: Sequence[LeadRecord],
    path: PathLike,
    *,
    sheet_name: str = "Leads",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write the catalogue to a CSV or Excel file."""

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    dataframe = records_to_dataframe(records)

    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = output_path.suffix.lower()
    if suffix in _CSV_SUFFIXES:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(output_path, index=False, **exporter_kwargs)
        return output_path

    if suffix in _EXCEL_SUFFIXES:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(output_path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return output_path

    raise ValueError(f"Unsupported export file extension: {suffix}")


def write_filtered_export(export: FilteredExport, directory: PathLike) -> Path:
    destination = Path(directory) / export.filename
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(export.content)
    return destination


__all__ = ["export_records", "records_to_dataframe", "write_filtered_export"]
