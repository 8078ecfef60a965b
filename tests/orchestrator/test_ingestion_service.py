import pytest

from lead_reconciler.errors import UploadError
from lead_reconciler.models import IngestionProgress, LeadRecord, RawFile
from lead_reconciler.orchestrator.service import IngestionOrchestrator, format_file_size
from lead_reconciler.storage.memory import InMemoryBlobStore


class FailingBlobStore(InMemoryBlobStore):
    """Blob store that rejects uploads whose path contains ``fail_on``."""

    def __init__(self, fail_on: str) -> None:
        super().__init__()
        self.fail_on = fail_on
        self.attempts = []

    def upload(self, path: str, data: bytes) -> str:
        self.attempts.append(path)
        if self.fail_on in path:
            raise UploadError(f"Dialables file upload failed: bucket rejected {path}", path=path)
        return super().upload(path, data)


@pytest.mark.parametrize("concurrent", [True, False])
def test_ingest_creates_record_and_uploads_files(lead_files, blob_store, record_store, concurrent):
    orchestrator = IngestionOrchestrator(blob_store, record_store, concurrent=concurrent)

    outcome = orchestrator.ingest(lead_files)

    assert outcome.ok, outcome.message
    record = outcome.value
    assert isinstance(record, LeadRecord)
    assert record.id == 1
    assert record.entry_date == "2025-10-17"
    assert record.list_id == "9321"
    assert record.affiliate_id == "16"
    assert record.click_id == "468ed406a837e21.06053311"
    assert record.filename == "leads.csv"
    assert record.leads == 6
    assert record.uploaded == 2
    assert record.unprocessed == 0
    assert record.main_phone_column == "phone"
    assert record.dialables_phone_column == "phone_numbers"
    assert record.main_file_path == "lead16/leads.csv"
    assert record.dialables_file_path == "lead16/LIST_9321.txt"
    assert record.unprocessed_file_path is None
    assert record.failed_percentage == pytest.approx(4 / 6)
    assert set(blob_store.blobs) == {"lead16/leads.csv", "lead16/LIST_9321.txt"}
    assert blob_store.blobs["lead16/leads.csv"] == lead_files[0].content
    assert len(record_store.rows) == 1
    assert "lead16" in outcome.message


def test_ingest_namespaces_paths_by_user_and_reports_progress(lead_files, blob_store, record_store):
    orchestrator = IngestionOrchestrator(blob_store, record_store, user_id="user-1")
    events = []

    outcome = orchestrator.ingest(lead_files, progress_callback=events.append)

    assert outcome.value.main_file_path == "user-1/lead16/leads.csv"
    assert outcome.value.user_id == "user-1"
    assert all(isinstance(event, IngestionProgress) for event in events)
    percents = [event.percent for event in events]
    assert percents == sorted(percents)
    assert percents[-1] == 100
    assert events[-1].stage == "Complete"


def test_ingest_with_unprocessed_file_and_size_label(blob_store, record_store, main_text, dialables_text):
    files = [
        RawFile("leads.csv", main_text.encode(), size=3 * 1024 * 1024),
        RawFile("LIST_9321.txt", dialables_text.encode(), size=512 * 1024),
        RawFile("leads_unprocessed.csv", b"phone\n5550100000\n5550100001\n", size=0),
    ]

    outcome = IngestionOrchestrator(blob_store, record_store).ingest(files)

    record = outcome.value
    assert record.file_size == "3.50 MB"
    assert record.unprocessed == 3
    assert record.unprocessed_file_path == "lead16/leads_unprocessed.csv"
    assert "lead16/leads_unprocessed.csv" in blob_store.blobs


def test_header_only_dialables_aborts_before_upload(blob_store, record_store, main_text):
    files = [
        RawFile("leads.csv", main_text.encode()),
        RawFile("LIST_1.txt", b"entry_date\tlist_id\tphone_numbers\n"),
    ]

    outcome = IngestionOrchestrator(blob_store, record_store).ingest(files)

    assert not outcome.ok
    assert outcome.error_kind == "parse"
    assert blob_store.blobs == {}
    assert record_store.rows == []


def test_missing_dialables_file_is_reported(blob_store, record_store, main_text):
    outcome = IngestionOrchestrator(blob_store, record_store).ingest([RawFile("leads.csv", main_text.encode())])

    assert not outcome.ok
    assert outcome.error_kind == "classification"
    assert "dialables" in outcome.message


def test_upload_failure_aborts_without_rollback(lead_files, record_store):
    blob_store = FailingBlobStore(fail_on="LIST_")

    outcome = IngestionOrchestrator(blob_store, record_store, concurrent=False).ingest(lead_files)

    assert not outcome.ok
    assert outcome.error_kind == "upload"
    assert "LIST_9321.txt" in outcome.message
    assert list(blob_store.blobs) == ["lead16/leads.csv"]
    assert record_store.rows == []


def test_undetected_phone_column_is_not_an_error(blob_store, record_store, dialables_text):
    files = [
        RawFile("leads.csv", b"name,email\nA,a@example.com\n"),
        RawFile("LIST_9321.txt", dialables_text.encode()),
    ]

    outcome = IngestionOrchestrator(blob_store, record_store).ingest(files)

    assert outcome.ok
    assert outcome.value.main_phone_column is None
    assert outcome.value.leads == 2


def test_format_file_size():
    assert format_file_size(0) == "0.00 MB"
    assert format_file_size(17_479_843) == "16.67 MB"


def test_lead_count_includes_header_and_blank_lines(blob_store, record_store, dialables_text):
    files = [
        RawFile("leads.csv", b"name,phone\nA,5550100000\n\nB,5550100001\n"),
        RawFile("LIST_9321.txt", dialables_text.encode()),
        RawFile("leads_unprocessed.csv", b"phone\n5550100002\n"),
    ]

    record = IngestionOrchestrator(blob_store, record_store).ingest(files).unwrap()

    assert record.leads == 4
    assert record.unprocessed == 2
    assert record.uploaded == 2


def test_skipped_files_are_reported_on_success(lead_files, blob_store, record_store):
    files = lead_files + [
        RawFile("extra.csv", b"name,phone\nZ,5550100009\n"),
        RawFile("notes.json", b"{}"),
    ]

    outcome = IngestionOrchestrator(blob_store, record_store).ingest(files)

    assert outcome.ok
    assert len(outcome.warnings) == 2
    assert "extra.csv" in outcome.warnings[0]
    assert "notes.json" in outcome.warnings[1]
    assert outcome.value.filename == "leads.csv"
    assert "lead16/extra.csv" not in blob_store.blobs


def test_complete_batch_has_no_warnings(lead_files, blob_store, record_store):
    assert IngestionOrchestrator(blob_store, record_store).ingest(lead_files).warnings == ()
