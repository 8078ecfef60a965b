"""Cross-reference main files with dialables extracts by normalized phone number."""
from __future__ import annotations

import logging
from typing import List, Optional, Set

from .ingestion.dialables import DIALABLES_DELIMITER
from .ingestion.tabular import (
    MAIN_FILE_DELIMITERS,
    HeaderIndex,
    cell_at,
    detect_delimiter,
    digits_only,
    split_row,
    split_rows,
)
from .models import FilterResult

LOGGER = logging.getLogger(__name__)

FILTERED_PREFIX = "filtered_"


def normalise_phone(value: Optional[str]) -> str:
    """Reduce a phone value to its digits.

    Two values refer to the same contact only when their digit strings match
    exactly. A leading country code is kept, so ``+1 555 123 4567`` and
    ``5551234567`` stay distinct.
    """

    return digits_only(value)


def build_uploaded_phone_set(dialables_text: str, phone_column: str) -> Set[str]:
    """Collect the normalized phone numbers already present in a dialables file."""

    rows = split_rows(dialables_text)
    if not rows:
        return set()
    header = HeaderIndex.from_row(rows[0], DIALABLES_DELIMITER)
    position = header.require(phone_column)

    uploaded: Set[str] = set()
    for row in rows[1:]:
        phone = normalise_phone(cell_at(split_row(row, DIALABLES_DELIMITER), position))
        if phone:
            uploaded.add(phone)
    LOGGER.debug("Built uploaded set of %s numbers from column %r", len(uploaded), phone_column)
    return uploaded


def filter_unuploaded(main_text: str, main_phone_column: Optional[str], uploaded: Set[str]) -> FilterResult:
    """Drop main-file rows whose phone number already appears in ``uploaded``.

    The header line is always kept and the original delimiter is preserved.
    """

    delimiter = detect_delimiter(main_text, MAIN_FILE_DELIMITERS)
    rows = split_rows(main_text)
    if not rows:
        return FilterResult(text="", kept=0, removed=0)

    header = HeaderIndex.from_row(rows[0], delimiter)
    position = header.require(main_phone_column)

    kept_rows: List[str] = [rows[0]]
    removed = 0
    for row in rows[1:]:
        phone = normalise_phone(cell_at(split_row(row, delimiter), position))
        if phone in uploaded:
            removed += 1
            continue
        kept_rows.append(row)

    kept = len(kept_rows) - 1
    LOGGER.info("Filtered main file: kept %s rows, removed %s already uploaded", kept, removed)
    return FilterResult(text="\n".join(kept_rows), kept=kept, removed=removed)


def reconcile(
    main_text: str,
    dialables_text: str,
    main_phone_column: Optional[str],
    dialables_phone_column: str,
) -> FilterResult:
    uploaded = build_uploaded_phone_set(dialables_text, dialables_phone_column)
    return filter_unuploaded(main_text, main_phone_column, uploaded)


def filtered_filename(filename: str) -> str:
    return f"{FILTERED_PREFIX}{filename}"


__all__ = [
    "build_uploaded_phone_set",
    "filter_unuploaded",
    "filtered_filename",
    "normalise_phone",
    "reconcile",
]
