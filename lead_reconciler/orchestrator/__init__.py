"""Workflow orchestration for ingesting, cataloguing, and exporting lead files."""

from .catalogue import LeadCatalogue
from .service import IngestionOrchestrator

__all__ = ["IngestionOrchestrator", "LeadCatalogue"]
