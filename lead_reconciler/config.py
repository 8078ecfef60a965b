"""Configuration helpers for the lead reconciliation toolkit."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

LOGGER = logging.getLogger(__name__)

DEFAULT_STORE_ROOT = Path("lead-store")

DEFAULT_CONFIGURATION: Dict[str, Any] = {
    "user_id": None,
    "concurrent": True,
    "max_workers": None,
    "blob_store": {
        "class": "lead_reconciler.storage.local.LocalBlobStore",
        "options": {"root": str(DEFAULT_STORE_ROOT / "files")},
    },
    "record_store": {
        "class": "lead_reconciler.storage.local.LocalRecordStore",
        "options": {"path": str(DEFAULT_STORE_ROOT / "records.json")},
    },
}


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}


def load_configuration(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """Load configuration from a JSON or YAML file merged over the defaults.

    Without a path the local filesystem stores under ``./lead-store`` are used.
    """

    if path is None:
        return merge_configuration({})

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Could not parse configuration file '{file_path}': {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping")
    LOGGER.debug("Loaded configuration from %s", file_path)
    return merge_configuration(data)


def merge_configuration(overrides: Mapping[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = {key: (dict(value) if isinstance(value, dict) else value) for key, value in DEFAULT_CONFIGURATION.items()}
    for key, value in overrides.items():
        if key in ("blob_store", "record_store") and isinstance(value, Mapping):
            section = dict(value)
            section.setdefault("options", {})
            merged[key] = section
        else:
            merged[key] = value
    return merged


def store_section(config: Mapping[str, Any], name: str) -> Dict[str, Any]:
    section = config.get(name)
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"Configuration section '{name}' is missing")
    if not section.get("class"):
        raise ConfigurationError(f"Configuration section '{name}' missing required 'class' field")
    options = section.get("options") or {}
    if not isinstance(options, Mapping):
        raise ConfigurationError(f"Options of '{name}' must be a mapping")
    return {"class": section["class"], "options": dict(options)}


__all__ = [
    "ConfigurationError",
    "DEFAULT_CONFIGURATION",
    "load_configuration",
    "merge_configuration",
    "store_section",
]
