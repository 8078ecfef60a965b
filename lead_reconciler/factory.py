"""Factory helpers for constructing stores and services from configuration."""
from __future__ import annotations

import importlib
from typing import Any, Dict, Tuple

from .config import ConfigurationError, store_section
from .orchestrator import IngestionOrchestrator, LeadCatalogue
from .storage.base import BlobStore, RecordStore


def _load_class(path: str):
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ConfigurationError(f"Invalid store class path '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Could not import store module '{module_name}': {exc}") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(f"Module '{module_name}' does not define '{attr}'") from exc


def _build_store(config: Dict[str, Any], name: str):
    section = store_section(config, name)
    store_cls = _load_class(section["class"])
    return store_cls(**section["options"])


def build_stores(config: Dict[str, Any]) -> Tuple[BlobStore, RecordStore]:
    """Instantiate the blob and record store classes named in the configuration."""

    return _build_store(config, "blob_store"), _build_store(config, "record_store")


def build_orchestrator(config: Dict[str, Any], stores: Tuple[BlobStore, RecordStore] | None = None) -> IngestionOrchestrator:
    blob_store, record_store = stores or build_stores(config)
    return IngestionOrchestrator(
        blob_store,
        record_store,
        user_id=config.get("user_id"),
        concurrent=bool(config.get("concurrent", True)),
        max_workers=config.get("max_workers"),
    )


def build_catalogue(config: Dict[str, Any], stores: Tuple[BlobStore, RecordStore] | None = None) -> LeadCatalogue:
    blob_store, record_store = stores or build_stores(config)
    return LeadCatalogue(blob_store, record_store)


__all__ = ["build_catalogue", "build_orchestrator", "build_stores"]
