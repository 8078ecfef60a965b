"""Assign upload roles to files based on their naming convention."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..errors import ClassificationError, MissingFilesError
from ..models import FileRole, RawFile

LOGGER = logging.getLogger(__name__)


def classify(filename: str) -> FileRole:
    """Return the role implied by ``filename``.

    Rules are checked in order and the first match wins, so an
    ``_unprocessed`` CSV is never mistaken for a main file.
    """

    if "_unprocessed" in filename:
        return FileRole.UNPROCESSED
    if "LIST_" in filename or (not filename.endswith(".csv") and filename.endswith(".txt")):
        return FileRole.DIALABLES
    if filename.endswith(".csv"):
        return FileRole.MAIN
    return FileRole.UNKNOWN


@dataclass
class FileSelection:
    """Files accepted from a batch, at most one per role."""

    main: Optional[RawFile] = None
    dialables: Optional[RawFile] = None
    unprocessed: Optional[RawFile] = None
    errors: List[ClassificationError] = field(default_factory=list)

    def get(self, role: FileRole) -> Optional[RawFile]:
        return self._slots().get(role)

    def _slots(self) -> Dict[FileRole, Optional[RawFile]]:
        return {
            FileRole.MAIN: self.main,
            FileRole.DIALABLES: self.dialables,
            FileRole.UNPROCESSED: self.unprocessed,
        }

    @property
    def is_complete(self) -> bool:
        return self.main is not None and self.dialables is not None

    def require_complete(self) -> None:
        missing = []
        if self.main is None:
            missing.append("main file (.csv)")
        if self.dialables is None:
            missing.append("dialables file (LIST_ or .txt)")
        if missing:
            raise MissingFilesError(missing)


def select_files(files: Iterable[RawFile]) -> FileSelection:
    """Classify a batch, keeping the first file seen for each role.

    Unrecognised or surplus files are recorded on the selection and do not
    stop the rest of the batch from being accepted.
    """

    selection = FileSelection()
    for raw_file in files:
        role = classify(raw_file.filename)
        if role is FileRole.UNKNOWN:
            _reject(
                selection,
                raw_file,
                f"Could not detect type for {raw_file.filename}. "
                "Please ensure filenames match the expected pattern.",
            )
            continue
        if selection.get(role) is not None:
            _reject(selection, raw_file, f"A {role.value} file was already selected; ignoring {raw_file.filename}")
            continue
        setattr(selection, role.value, raw_file)
        LOGGER.debug("Classified %s as %s", raw_file.filename, role.value)
    return selection


def _reject(selection: FileSelection, raw_file: RawFile, message: str) -> None:
    LOGGER.warning(message)
    selection.errors.append(ClassificationError(message, filename=raw_file.filename))


__all__ = ["FileSelection", "classify", "select_files"]
