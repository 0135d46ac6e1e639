"""Domain models for the question spreadsheet importer.

This package contains the dataclasses shared by the reader, the import
services, the CLI and the database collaborators.
"""

from .column_mapping import DEFAULT_COLUMN_MAPPING, ColumnMapping, FileUnderstanding
from .config_models import CatalogConfig, DatabaseConfig, ImporterConfig
from .import_result import (
    FailureKind,
    ImportDiagnostics,
    ImportedQuestions,
    ImportFailure,
    IssueKind,
    RowIssue,
)
from .question import Catalog, Question, QuestionType, Section, Tag
from .row_data import RawRow
from .uploaded_file import UploadedFile

__all__ = [
    # Configuration models
    "CatalogConfig",
    "DatabaseConfig",
    "ImporterConfig",
    "ColumnMapping",
    "FileUnderstanding",
    "DEFAULT_COLUMN_MAPPING",
    # Catalog / output models
    "Catalog",
    "Question",
    "QuestionType",
    "Section",
    "Tag",
    # Processing models
    "RawRow",
    "UploadedFile",
    "RowIssue",
    "IssueKind",
    "ImportDiagnostics",
    "ImportedQuestions",
    "ImportFailure",
    "FailureKind",
]
