"""Command line interface for ingesting, listing, and exporting lead files."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import ConfigurationError, load_configuration
from .errors import LeadFileError
from .factory import build_catalogue, build_orchestrator, build_stores
from .ingestion.phone_column import detect_phone_column
from .io import export_records, records_to_dataframe, write_filtered_export
from .models import IngestionProgress, LeadRecord, Outcome, RawFile

LOGGER = logging.getLogger(__name__)


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Upload, catalogue, and re-filter lead contact files",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a configuration file (YAML or JSON); defaults to local stores under ./lead-store",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    ingest = commands.add_parser("ingest", help="Upload a main file, a dialables file, and an optional unprocessed file")
    ingest.add_argument("files", nargs="+", help="Files to upload (classified by filename)")

    listing = commands.add_parser("list", help="Show catalogued lead records, newest first")
    listing.add_argument("--search", default="", help="Filter by filename, list ID, or affiliate ID")
    listing.add_argument("--output", help="Also write the listing to a CSV or Excel file")

    commands.add_parser("stats", help="Show catalogue totals")

    export = commands.add_parser("export", help="Write the main file without already uploaded phone numbers")
    export.add_argument("record_id", help="Identifier of the lead record")
    export.add_argument("output_dir", help="Directory receiving the filtered_ file")

    columns = commands.add_parser("set-columns", help="Override the phone columns of a record")
    columns.add_argument("record_id", help="Identifier of the lead record")
    columns.add_argument("--main", dest="main_column", help="Phone column of the main file")
    columns.add_argument("--dialables", dest="dialables_column", help="Phone column of the dialables file")

    delete = commands.add_parser("delete", help="Delete a record and its stored files")
    delete.add_argument("record_id", help="Identifier of the lead record")

    detect = commands.add_parser("detect", help="Print the detected phone column of a file")
    detect.add_argument("file", help="Path to a delimited text file")

    return parser


def parse_args(argv: list[str] | None = None, prog: Optional[str] = None) -> argparse.Namespace:
    return build_parser(prog=prog).parse_args(argv)


def _report(outcome: Outcome) -> int:
    for warning in outcome.warnings:
        LOGGER.warning(warning)
    if outcome.ok:
        if outcome.message:
            LOGGER.info(outcome.message)
        return 0
    LOGGER.error("%s failed: %s", outcome.error_kind, outcome.message)
    return 1


def _log_progress(progress: IngestionProgress) -> None:
    LOGGER.info("[%3d%%] %s", progress.percent, progress.stage)


def _print_record(record: LeadRecord) -> None:
    print(records_to_dataframe([record]).T.to_string(header=False))


def main(argv: list[str] | None = None, prog: Optional[str] = None) -> int:
    args = parse_args(argv, prog=prog)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        return _dispatch(args)
    except (ConfigurationError, LeadFileError, OSError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 1


def _dispatch(args: argparse.Namespace) -> int:
    if args.command == "detect":
        column = detect_phone_column(RawFile.from_path(args.file).text())
        print(column if column is not None else "none found")
        return 0 if column is not None else 1

    config = load_configuration(args.config)
    stores = build_stores(config)

    if args.command == "ingest":
        orchestrator = build_orchestrator(config, stores)
        outcome = orchestrator.ingest(
            [RawFile.from_path(path) for path in args.files],
            progress_callback=_log_progress,
        )
        if outcome.ok:
            _print_record(outcome.value)
        return _report(outcome)

    catalogue = build_catalogue(config, stores)

    if args.command == "list":
        records = catalogue.search(args.search)
        print(records_to_dataframe(records).to_string(index=False))
        if args.output:
            destination = export_records(records, args.output)
            LOGGER.info("Listing written to %s", destination.resolve())
        return 0

    if args.command == "stats":
        stats = catalogue.stats()
        print(f"Total Files: {stats.total_files}")
        print(f"Total Size: {stats.total_size_mb:.2f} MB")
        print(f"Total Leads: {stats.total_leads:,}")
        print(f"Leads Uploaded: {stats.total_uploaded:,}")
        return 0

    record = catalogue.get(args.record_id)

    if args.command == "export":
        outcome = catalogue.export_filtered(record)
        if outcome.ok:
            destination = write_filtered_export(outcome.value, args.output_dir)
            LOGGER.info("Filtered file written to %s", Path(destination).resolve())
        elif outcome.error_kind == "column_not_found":
            LOGGER.error("Choose a phone column with 'set-columns %s --main COLUMN'", record.id)
        return _report(outcome)

    if args.command == "set-columns":
        return _report(
            catalogue.update_phone_columns(
                record.id,
                main_phone_column=args.main_column,
                dialables_phone_column=args.dialables_column,
            )
        )

    if args.command == "delete":
        return _report(catalogue.delete_record(record))

    return 2  # pragma: no cover - argparse rejects unknown commands


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
