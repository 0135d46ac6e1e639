from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .question import Question

"""Import result models for the question importer.

An import run ends in exactly one of two shapes:

- ImportedQuestions: every row was accepted and no suggestion was raised;
  the caller may persist ``questions``.
- ImportFailure: nothing may be persisted; ``message`` aggregates every
  problem found, one per line.
"""

__all__ = [
    "IssueKind",
    "RowIssue",
    "ImportDiagnostics",
    "FailureKind",
    "ImportedQuestions",
    "ImportFailure",
    "ImportOutcome",
]


class IssueKind(Enum):
    """Classification of a diagnostics entry (error log ``error_type``)."""
    EMPTY_QUESTION_TEXT = "EMPTY_QUESTION_TEXT"
    OPTIONS_REQUIRED = "OPTIONS_REQUIRED"
    ROW_ERROR = "ROW_ERROR"
    NEW_TAGS = "NEW_TAGS"
    NEW_SECTIONS = "NEW_SECTIONS"


@dataclass(frozen=True)
class RowIssue:
    row: int  # data row number, -1 for file-level notes
    kind: IssueKind
    message: str  # full user-facing line, e.g. "Row 3: Empty question text"


@dataclass(frozen=True)
class ImportDiagnostics:
    """Everything the coordinator learned about a file, accepted or not."""
    issues: tuple[RowIssue, ...] = ()
    suggested_tags: tuple[str, ...] = ()  # first-seen order, as typed
    suggested_sections: tuple[str, ...] = ()
    total_rows: int = 0
    accepted_rows: int = 0

    @property
    def errors(self) -> list[str]:
        return [issue.message for issue in self.issues]

    @property
    def rejected_rows(self) -> int:
        return len({i.row for i in self.issues if i.row > 0})

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)


class FailureKind(Enum):
    STRUCTURAL = "structural"  # file could not be read as a question sheet
    ROW_ERRORS = "row_errors"  # row issues and/or suggestion notes
    NO_QUESTIONS = "no_questions"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ImportedQuestions:
    questions: list[Question]
    diagnostics: ImportDiagnostics
    sheet_name: str | None = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ImportFailure:
    kind: FailureKind
    message: str
    diagnostics: ImportDiagnostics | None = None  # None for structural failures

    @property
    def ok(self) -> bool:
        return False


ImportOutcome = ImportedQuestions | ImportFailure
