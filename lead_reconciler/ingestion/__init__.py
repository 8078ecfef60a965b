"""Parsing helpers that turn uploaded lead files into structured metadata."""

from .classifier import FileSelection, classify, select_files
from .dialables import extract_dialables_summary
from .phone_column import detect_phone_column, is_phone_like
from .tabular import (
    HeaderIndex,
    count_lines,
    detect_delimiter,
    digits_only,
    split_row,
    split_rows,
)

__all__ = [
    "FileSelection",
    "HeaderIndex",
    "classify",
    "count_lines",
    "detect_delimiter",
    "detect_phone_column",
    "digits_only",
    "extract_dialables_summary",
    "is_phone_like",
    "select_files",
    "split_row",
    "split_rows",
]
