"""Ingestion and reconciliation engine for main and dialables lead files."""

from . import ingestion, models, orchestrator, storage  # noqa: F401
from .errors import (
    ClassificationError,
    ColumnNotFoundError,
    LeadFileError,
    MissingFilesError,
    ParseError,
    PersistenceError,
    StorageError,
    UploadError,
)
from .models import (
    CatalogueStats,
    DelimiterKind,
    DialablesSummary,
    FileRole,
    FilteredExport,
    FilterResult,
    IngestionProgress,
    LeadRecord,
    Outcome,
    RawFile,
)
from .orchestrator import IngestionOrchestrator, LeadCatalogue
from .reconcile import build_uploaded_phone_set, filter_unuploaded, reconcile

__version__ = "0.1.0"

__all__ = [
    "CatalogueStats",
    "ClassificationError",
    "ColumnNotFoundError",
    "DelimiterKind",
    "DialablesSummary",
    "FileRole",
    "FilteredExport",
    "FilterResult",
    "IngestionOrchestrator",
    "IngestionProgress",
    "LeadCatalogue",
    "LeadFileError",
    "LeadRecord",
    "MissingFilesError",
    "Outcome",
    "ParseError",
    "PersistenceError",
    "RawFile",
    "StorageError",
    "UploadError",
    "build_uploaded_phone_set",
    "filter_unuploaded",
    "reconcile",
    "ingestion",
    "models",
    "orchestrator",
    "storage",
]
