from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.column_mapping import DEFAULT_COLUMN_MAPPING, ColumnMapping, FileUnderstanding
from ..models.config_models import CatalogConfig, DatabaseConfig, ImporterConfig
from ..models.question import Catalog

"""Configuration, catalog and understanding loaders.

Responsibilities:
- Load YAML ``config/import.yml`` and the YAML tag/section catalog
- Load the JSON understanding document produced by the chat step
- Validate each document against its bundled JSON schema
- Apply defaults (default column mapping, 5 MB limit, file catalog)

Every failure is raised as ConfigError with a message fit for the CLI.
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "load_catalog",
    "load_understanding",
    "parse_understanding",
]

SCHEMA_DIR = Path(__file__).parent
CONFIG_SCHEMA_PATH = SCHEMA_DIR / "config_schema.json"
CATALOG_SCHEMA_PATH = SCHEMA_DIR / "catalog_schema.json"
UNDERSTANDING_SCHEMA_PATH = SCHEMA_DIR / "understanding_schema.json"

DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


def _validate(data: Any, schema_path: Path, what: str) -> None:
    """Validate data against a bundled JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or ``data`` fails
            validation (missing required keys, wrong types, extra keys)
    """
    if not schema_path.exists():
        raise ConfigError(f"{what} schema not found: {schema_path}")
    try:
        schema = json.loads(schema_path.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"{what} validation failed: {e.message}") from e


def _load_yaml(path: Path, what: str) -> Any:
    if not path.exists():
        raise ConfigError(f"{what} file not found: {path}")
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e


def load_config(path: Path) -> ImporterConfig:
    data = _load_yaml(path, "config")
    _validate(data, CONFIG_SCHEMA_PATH, "config")

    mappings_raw = data.get("column_mappings")
    mapping = ColumnMapping.from_dict(mappings_raw) if mappings_raw else DEFAULT_COLUMN_MAPPING

    catalog_raw = data.get("catalog", {})
    catalog = CatalogConfig(
        source=catalog_raw.get("source", "file"),
        path=catalog_raw.get("path", CatalogConfig.path),
    )

    db_raw = data.get("database", {})
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return ImporterConfig(
        column_mappings=mapping,
        max_file_size_mb=data.get("max_file_size_mb", ImporterConfig.max_file_size_mb),
        catalog=catalog,
        database=db,
        questions_table=data.get("questions_table", ImporterConfig.questions_table),
    )


def load_catalog(path: Path) -> Catalog:
    """Load known tags and sections from a YAML catalog file."""
    data = _load_yaml(path, "catalog")
    _validate(data, CATALOG_SCHEMA_PATH, "catalog")
    return Catalog.from_dict(data)


def parse_understanding(data: Any) -> FileUnderstanding:
    _validate(data, UNDERSTANDING_SCHEMA_PATH, "understanding")
    return FileUnderstanding.from_dict(data)


def load_understanding(path: Path) -> FileUnderstanding:
    """Load a JSON understanding document (``columnMappings`` + instructions)."""
    if not path.exists():
        raise ConfigError(f"understanding file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid understanding json: {e}") from e
    return parse_understanding(data)
