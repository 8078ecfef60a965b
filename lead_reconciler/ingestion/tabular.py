"""Delimiter sniffing and naive row/column splitting over raw text."""
from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence

from ..errors import ColumnNotFoundError
from ..models import DelimiterKind

_NON_DIGITS = re.compile(r"\D")

# Earlier entries win ties.
_PRECEDENCE = (DelimiterKind.TAB, DelimiterKind.SEMICOLON, DelimiterKind.COMMA)
MAIN_FILE_DELIMITERS = (DelimiterKind.SEMICOLON, DelimiterKind.COMMA)


def detect_delimiter(
    text: str,
    candidates: Iterable[DelimiterKind] = _PRECEDENCE,
) -> DelimiterKind:
    """Pick the delimiter that occurs most often in the first line.

    Only the header line is inspected; data rows may carry stray punctuation.
    Ties resolve tab first, then semicolon, then comma.
    """

    allowed = set(candidates)
    first_line = first_row(text)
    best: Optional[DelimiterKind] = None
    best_count = -1
    for kind in _PRECEDENCE:
        if kind not in allowed:
            continue
        count = first_line.count(kind.char)
        if count > best_count:
            best, best_count = kind, count
    if best is None:
        raise ValueError("At least one candidate delimiter is required")
    return best


def split_rows(text: str) -> List[str]:
    """Split text into lines after trimming surrounding whitespace."""

    stripped = text.strip()
    if not stripped:
        return []
    return stripped.split("\n")


def split_row(row: str, delimiter: DelimiterKind) -> List[str]:
    # Quoted cells containing the delimiter are not supported.
    return row.split(delimiter.char)


def count_lines(text: str) -> int:
    """Number of lines after trimming the text, header and blank lines included."""

    return len(split_rows(text))


def first_row(text: str) -> str:
    rows = split_rows(text)
    return rows[0] if rows else ""


def digits_only(value: Optional[str]) -> str:
    if not value:
        return ""
    return _NON_DIGITS.sub("", value)


class HeaderIndex:
    """Column name to position mapping built once per file."""

    def __init__(self, cells: Sequence[str]) -> None:
        self.names: List[str] = [cell.strip() for cell in cells]
        self._positions: Dict[str, int] = {}
        for position, name in enumerate(self.names):
            self._positions.setdefault(name, position)

    @classmethod
    def from_row(cls, row: str, delimiter: DelimiterKind) -> "HeaderIndex":
        return cls(split_row(row, delimiter))

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self._positions

    def position(self, name: Optional[str]) -> Optional[int]:
        if name is None:
            return None
        return self._positions.get(name.strip())

    def require(self, name: Optional[str]) -> int:
        position = self.position(name)
        if position is None:
            raise ColumnNotFoundError(name, self.names)
        return position

    def cell(self, cells: Sequence[str], name: str, default: str = "") -> str:
        """Return the trimmed cell for ``name`` or ``default`` when absent."""

        position = self.position(name)
        if position is None or position >= len(cells):
            return default
        return cells[position].strip()


def cell_at(cells: Sequence[str], position: int) -> str:
    if position >= len(cells):
        return ""
    return cells[position]


__all__ = [
    "MAIN_FILE_DELIMITERS",
    "HeaderIndex",
    "cell_at",
    "count_lines",
    "detect_delimiter",
    "digits_only",
    "first_row",
    "split_row",
    "split_rows",
]
