"""Statistical detection of the phone number column in unlabeled tabular text."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .tabular import HeaderIndex, cell_at, detect_delimiter, digits_only, split_row, split_rows

LOGGER = logging.getLogger(__name__)

SAMPLE_ROWS = 10
VALID_SHARE = 0.6
MIN_VALID_FLOOR = 3
PHONE_DIGIT_COUNTS = (10, 11)


@dataclass
class _Candidate:
    index: int
    valid: int = 0


def is_phone_like(value: str) -> bool:
    """Return ``True`` when the cell holds 10 or 11 digits once punctuation is removed."""

    return len(digits_only(value)) in PHONE_DIGIT_COUNTS


def minimum_valid_phones(rows_to_check: int) -> int:
    return max(MIN_VALID_FLOOR, math.ceil(rows_to_check * VALID_SHARE))


def detect_phone_column(text: str) -> Optional[str]:
    """Return the header name of the first column that looks like phone numbers.

    Up to the first ten data rows are sampled. A column qualifies when at least
    60% of the sampled rows (and never fewer than three) hold a 10 or 11 digit
    value. ``None`` means no column qualified and the caller should ask for a
    manual choice.
    """

    delimiter = detect_delimiter(text)
    rows = [row for row in split_rows(text) if row.strip()]
    if len(rows) < 2:
        LOGGER.debug("Phone detection needs a header and at least one data row, got %s rows", len(rows))
        return None

    header = HeaderIndex.from_row(rows[0], delimiter)
    sample = [split_row(row, delimiter) for row in rows[1 : 1 + SAMPLE_ROWS]]
    threshold = minimum_valid_phones(len(sample))

    for candidate in _candidates(header):
        candidate.valid = _count_valid(sample, candidate.index)
        if candidate.valid >= threshold:
            name = header.names[candidate.index]
            LOGGER.debug(
                "Detected phone column %r (%s/%s valid, threshold %s)",
                name,
                candidate.valid,
                len(sample),
                threshold,
            )
            return name

    LOGGER.debug("No column reached %s valid phone values in %s sampled rows", threshold, len(sample))
    return None


def _candidates(header: HeaderIndex) -> List[_Candidate]:
    return [_Candidate(index=index) for index in range(len(header))]


def _count_valid(sample: Sequence[Sequence[str]], index: int) -> int:
    valid = 0
    for cells in sample:
        value = cell_at(cells, index).strip()
        if not value:
            continue
        if is_phone_like(value):
            valid += 1
    return valid


__all__ = ["detect_phone_column", "is_phone_like", "minimum_valid_phones"]
