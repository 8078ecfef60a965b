"""Summary extraction for tab-delimited dialables extracts."""
from __future__ import annotations

from ..errors import ParseError
from ..models import DelimiterKind, DialablesSummary
from .tabular import HeaderIndex, split_row, split_rows

# Dialables exports are always tab-delimited, so no sniffing happens here.
DIALABLES_DELIMITER = DelimiterKind.TAB

ENTRY_DATE_COLUMN = "entry_date"
LIST_ID_COLUMN = "list_id"
AFFILIATE_ID_COLUMN = "vendor_lead_code"
CLICK_ID_COLUMN = "source_id"


def extract_dialables_summary(text: str) -> DialablesSummary:
    """Read campaign identifiers from the header and the first data row.

    Identifiers are not aggregated across rows. Absent columns produce empty
    strings. ``row_count`` is every line after the header.
    """

    rows = split_rows(text)
    if len(rows) < 2:
        raise ParseError("Dialables file is empty or invalid")

    header = HeaderIndex.from_row(rows[0], DIALABLES_DELIMITER)
    first = split_row(rows[1], DIALABLES_DELIMITER)

    entry_date = header.cell(first, ENTRY_DATE_COLUMN).split(" ")[0]
    return DialablesSummary(
        entry_date=entry_date,
        list_id=header.cell(first, LIST_ID_COLUMN),
        affiliate_id=header.cell(first, AFFILIATE_ID_COLUMN),
        click_id=header.cell(first, CLICK_ID_COLUMN),
        row_count=len(rows) - 1,
    )


__all__ = ["DIALABLES_DELIMITER", "extract_dialables_summary"]
