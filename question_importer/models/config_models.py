from __future__ import annotations

from dataclasses import dataclass, field

from .column_mapping import DEFAULT_COLUMN_MAPPING, ColumnMapping

"""Config dataclasses for the question importer.

Built by question_importer.config.loader from ``config/import.yml`` after
JSON Schema validation.
"""

__all__ = [
    "DatabaseConfig",
    "CatalogConfig",
    "ImporterConfig",
]


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class CatalogConfig:
    """Where the known tags and sections come from."""
    source: str = "file"  # file | database
    path: str | None = "config/catalog.yml"  # only for source=file


@dataclass(frozen=True)
class ImporterConfig:
    """Root configuration object for an import run."""
    column_mappings: ColumnMapping = DEFAULT_COLUMN_MAPPING  # used when no understanding is given
    max_file_size_mb: float = 5
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    questions_table: str = "questions"

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)
