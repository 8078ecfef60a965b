import pandas as pd
import pytest

from lead_reconciler.io import RECORD_COLUMNS, export_records, records_to_dataframe, write_filtered_export
from lead_reconciler.models import FilteredExport, LeadRecord


def _records():
    return [
        LeadRecord(
            entry_date="2025-10-17",
            list_id="9321",
            affiliate_id="16",
            click_id="468ed406a837e21.06053311",
            filename="leads.csv",
            file_size="16.67 MB",
            leads=362346,
            uploaded=95617,
            main_file_path="lead16/leads.csv",
            dialables_file_path="lead16/LIST_9321.txt",
            main_phone_column="phone",
            id=1,
            created_at="2025-11-24T00:38:31",
        )
    ]


def test_records_to_dataframe_adds_failed_column():
    frame = records_to_dataframe(_records())

    assert list(frame.columns) == RECORD_COLUMNS
    assert frame.loc[0, "failed"] == "73.61%"
    assert frame.loc[0, "id"] == 1


def test_export_records_csv(tmp_path):
    path = export_records(_records(), tmp_path / "out" / "records.csv")

    frame = pd.read_csv(path, dtype=str)
    assert frame.loc[0, "filename"] == "leads.csv"
    assert frame.loc[0, "list_id"] == "9321"


def test_export_records_excel(tmp_path):
    path = export_records(_records(), tmp_path / "records.xlsx")

    frame = pd.read_excel(path, sheet_name="Leads", engine="openpyxl")
    assert frame.loc[0, "leads"] == 362346


def test_export_records_rejects_unknown_suffix(tmp_path):
    with pytest.raises(ValueError):
        export_records(_records(), tmp_path / "records.parquet")


def test_write_filtered_export(tmp_path):
    export = FilteredExport("filtered_leads.csv", b"name,phone\nA,1\n", kept=1, removed=0)

    destination = write_filtered_export(export, tmp_path / "exports")

    assert destination.name == "filtered_leads.csv"
    assert destination.read_bytes() == b"name,phone\nA,1\n"
