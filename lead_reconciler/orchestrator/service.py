"""Ingestion orchestrator that turns an upload batch into a catalogued lead record."""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..errors import LeadFileError
from ..ingestion.classifier import FileSelection, select_files
from ..ingestion.dialables import extract_dialables_summary
from ..ingestion.phone_column import detect_phone_column
from ..ingestion.tabular import count_lines
from ..models import (
    DEFAULT_DIALABLES_PHONE_COLUMN,
    DialablesSummary,
    FileRole,
    IngestionProgress,
    LeadRecord,
    Outcome,
    RawFile,
)
from ..storage.base import BlobStore, RecordStore, lead_folder

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[IngestionProgress], None]

_UPLOAD_ORDER = (FileRole.MAIN, FileRole.DIALABLES, FileRole.UNPROCESSED)


def format_file_size(size_bytes: int) -> str:
    """Render a byte count the way the lead table shows it, e.g. ``16.67 MB``."""

    return f"{size_bytes / (1024 * 1024):.2f} MB"


@dataclass(frozen=True)
class _Analysis:
    leads: int
    summary: DialablesSummary
    main_phone_column: Optional[str]
    unprocessed: int


class _ProgressReporter:
    """Forwards progress while refusing to move backwards."""

    def __init__(self, callback: Optional[ProgressCallback]) -> None:
        self._callback = callback
        self._percent = 0

    def __call__(self, stage: str, percent: int) -> None:
        self._percent = max(self._percent, min(percent, 100))
        LOGGER.debug("%s (%s%%)", stage, self._percent)
        if self._callback is not None:
            self._callback(IngestionProgress(stage=stage, percent=self._percent))


class IngestionOrchestrator:
    """Classifies, analyses, uploads, and records a batch of lead files."""

    def __init__(
        self,
        blob_store: BlobStore,
        record_store: RecordStore,
        *,
        user_id: Optional[str] = None,
        concurrent: bool = True,
        max_workers: Optional[int] = None,
    ) -> None:
        self._blob_store = blob_store
        self._record_store = record_store
        self._user_id = user_id
        self._concurrent = concurrent
        self._max_workers = max_workers

    def ingest(self, files: Iterable[RawFile], progress_callback: Optional[ProgressCallback] = None) -> Outcome:
        """Run the whole ingestion and return the stored :class:`LeadRecord` or the failure.

        Files skipped during classification are listed in ``Outcome.warnings``.
        """

        report = _ProgressReporter(progress_callback)
        try:
            report("Classifying files", 5)
            selection = select_files(files)
            record = self._ingest(selection, report)
        except LeadFileError as exc:
            LOGGER.error("Ingestion failed: %s", exc)
            return Outcome.failure(exc)
        report("Complete", 100)
        return Outcome.success(
            record,
            message=(
                f"Uploaded files to lead{record.affiliate_id} folder and processed {record.leads} leads"
            ),
            warnings=[str(error) for error in selection.errors],
        )

    def _ingest(self, selection: FileSelection, report: _ProgressReporter) -> LeadRecord:
        selection.require_complete()

        report("Reading files", 15)
        texts = self._read_texts(selection)

        report("Analysing files", 30)
        analysis = self._analyse(texts)
        if analysis.main_phone_column is None:
            LOGGER.warning(
                "No phone column detected in %s; select one manually before exporting",
                selection.main.filename,
            )

        paths = self._upload(selection, analysis.summary.affiliate_id, report)

        report("Saving record", 90)
        record = self._build_record(selection, analysis, paths)
        stored = self._record_store.insert(record.as_row())
        LOGGER.info("Catalogued %s with %s leads", record.filename, record.leads)
        return LeadRecord.from_row(stored)

    def _read_texts(self, selection: FileSelection) -> Dict[FileRole, str]:
        tasks = {role: (raw_file.text,) for role, raw_file in _present_files(selection)}
        return self._run_all(tasks)

    def _analyse(self, texts: Dict[FileRole, str]) -> _Analysis:
        main_text = texts[FileRole.MAIN]
        tasks: Dict[str, Tuple] = {
            "leads": (count_lines, main_text),
            "summary": (extract_dialables_summary, texts[FileRole.DIALABLES]),
            "phone_column": (detect_phone_column, main_text),
        }
        if FileRole.UNPROCESSED in texts:
            tasks["unprocessed"] = (count_lines, texts[FileRole.UNPROCESSED])
        results = self._run_all(tasks)
        return _Analysis(
            leads=results["leads"],
            summary=results["summary"],
            main_phone_column=results["phone_column"],
            unprocessed=results.get("unprocessed", 0),
        )

    def _upload(self, selection: FileSelection, affiliate_id: str, report: _ProgressReporter) -> Dict[FileRole, str]:
        folder = lead_folder(affiliate_id, self._user_id)
        uploads = {
            role: (self._blob_store.upload, f"{folder}/{raw_file.filename}", raw_file.content)
            for role, raw_file in _present_files(selection)
        }
        report(f"Uploading {len(uploads)} files to {folder}", 45)
        paths = self._run_all(uploads)
        report("Upload finished", 80)
        return paths

    def _build_record(
        self, selection: FileSelection, analysis: _Analysis, paths: Dict[FileRole, str]
    ) -> LeadRecord:
        summary = analysis.summary
        total_bytes = sum(raw_file.size or 0 for _, raw_file in _present_files(selection))
        return LeadRecord(
            entry_date=summary.entry_date,
            list_id=summary.list_id,
            affiliate_id=summary.affiliate_id,
            click_id=summary.click_id,
            filename=selection.main.filename,
            file_size=format_file_size(total_bytes),
            leads=analysis.leads,
            uploaded=summary.row_count,
            unprocessed=analysis.unprocessed,
            main_file_path=paths[FileRole.MAIN],
            dialables_file_path=paths[FileRole.DIALABLES],
            unprocessed_file_path=paths.get(FileRole.UNPROCESSED),
            main_phone_column=analysis.main_phone_column,
            dialables_phone_column=DEFAULT_DIALABLES_PHONE_COLUMN,
            user_id=self._user_id,
        )

    def _run_all(self, tasks: Dict):
        """Run independent ``(callable, *args)`` tasks and return results by key.

        In concurrent mode every task finishes before the first failure, in
        task order, is re-raised.
        """

        if not self._concurrent or len(tasks) <= 1:
            return {key: func(*args) for key, (func, *args) in tasks.items()}

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures: Dict[object, Future] = {
                key: executor.submit(func, *args) for key, (func, *args) in tasks.items()
            }
        return {key: future.result() for key, future in futures.items()}


def _present_files(selection: FileSelection) -> List[Tuple[FileRole, RawFile]]:
    return [(role, selection.get(role)) for role in _UPLOAD_ORDER if selection.get(role) is not None]


__all__ = ["IngestionOrchestrator", "ProgressCallback", "format_file_size"]
