from __future__ import annotations

import logging
from collections.abc import Sequence

from ..excel.reader import SheetData, WorkbookError, read_first_sheet
from ..models.column_mapping import DEFAULT_COLUMN_MAPPING, ColumnMapping, FileUnderstanding
from ..models.import_result import (
    FailureKind,
    ImportDiagnostics,
    ImportedQuestions,
    ImportFailure,
    ImportOutcome,
    IssueKind,
    RowIssue,
)
from ..models.question import Question, Section, Tag
from ..models.uploaded_file import SUPPORTED_EXTENSIONS, UploadedFile
from .columns import find_column
from .progress import ProgressSink
from .references import ReferenceResolver
from .row_pipeline import RowPipeline

"""Import coordination for question spreadsheets.

import_questions() drives one import run end to end:

1. file checks (present, supported extension, non-empty, size limit)
2. workbook parsing (first sheet only)
3. question column resolution against the first data row
4. row pipeline over every row, reporting progress after each row
5. consolidated new-tag / new-section notes
6. all-or-nothing decision: any issue, including a mere suggestion note,
   rejects the whole file

Structural problems (steps 1-3) stop the run before any row is processed.
Nothing is persisted here; on success the caller receives the questions in
row order and decides what to do with them.
"""

__all__ = [
    "QuestionImportError",
    "CancellationToken",
    "import_questions",
    "resolve_mapping",
    "format_failure_message",
]

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


class QuestionImportError(Exception):
    """Structural import failure; the message is shown to the user as is."""


class CancellationToken:
    """Cooperative cancellation flag, checked between rows."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def resolve_mapping(understanding: FileUnderstanding | None) -> ColumnMapping:
    """Column mapping in effect: the understanding's mapping replaces the default whole."""
    if understanding is None:
        return DEFAULT_COLUMN_MAPPING
    if understanding.special_instructions:
        logger.debug("special instructions ignored: %s", list(understanding.special_instructions))
    return understanding.column_mappings


def format_failure_message(messages: Sequence[str]) -> str:
    return f"Found {len(messages)} issues:\n" + "\n".join(messages)


def _check_file(file: UploadedFile | None, max_bytes: int | None) -> UploadedFile:
    if file is None:
        raise QuestionImportError("No file provided")
    if file.extension not in SUPPORTED_EXTENSIONS:
        raise QuestionImportError(
            "Invalid file type. Please upload an Excel file (.xlsx, .xls) or CSV file"
        )
    if file.size == 0:
        raise QuestionImportError("File is empty")
    if max_bytes is not None and file.size > max_bytes:
        raise QuestionImportError(
            f"File exceeds the maximum size of {max_bytes / BYTES_PER_MB:g} MB"
        )
    return file


def _read_sheet(file: UploadedFile) -> SheetData:
    try:
        return read_first_sheet(file)
    except WorkbookError as e:
        raise QuestionImportError(str(e)) from e


def _report_progress(progress: ProgressSink | None, percent: float) -> None:
    if progress is None:
        return
    try:
        progress(percent)
    except Exception:
        # progress sinks are fire-and-forget
        logger.debug("progress sink failed at %.1f%%", percent, exc_info=True)


def _suggestion_notes(resolver: ReferenceResolver) -> list[RowIssue]:
    notes: list[RowIssue] = []
    if resolver.suggested_tags:
        tag_list = ", ".join(resolver.suggested_tags)
        notes.append(RowIssue(
            row=-1,
            kind=IssueKind.NEW_TAGS,
            message=f"Note: Found potential new tags: {tag_list}. Consider creating these tags first.",
        ))
    if resolver.suggested_sections:
        section_list = ", ".join(resolver.suggested_sections)
        notes.append(RowIssue(
            row=-1,
            kind=IssueKind.NEW_SECTIONS,
            message=(
                f"Note: Found potential new sections: {section_list}. "
                "Consider creating these sections first."
            ),
        ))
    return notes


def import_questions(
    file: UploadedFile | None,
    known_tags: Sequence[Tag],
    known_sections: Sequence[Section],
    progress: ProgressSink | None = None,
    understanding: FileUnderstanding | None = None,
    *,
    cancel_token: CancellationToken | None = None,
    max_bytes: int | None = None,
) -> ImportOutcome:
    """Import questions from a spreadsheet or CSV file.

    Args:
        file: Uploaded file (name + bytes)
        known_tags: Catalog snapshot used to resolve tag names (read only)
        known_sections: Catalog snapshot used to resolve section names (read only)
        progress: Optional sink receiving 0..100 after every row
        understanding: Optional externally derived column mapping
        cancel_token: Optional token checked before every row
        max_bytes: Optional upload size limit

    Returns:
        ImportedQuestions when every row was accepted and no suggestion was
        raised; ImportFailure otherwise (nothing should be persisted).
    """
    try:
        checked = _check_file(file, max_bytes)
        mapping = resolve_mapping(understanding)
        sheet = _read_sheet(checked)
        question_column = find_column(sheet.rows[0].values, mapping.question)
        if question_column is None:
            raise QuestionImportError(
                f'Required column "{mapping.question}" not found in the file'
            )
        logger.info(
            "importing file=%s sheet=%s rows=%d question_column=%s",
            checked.name, sheet.sheet_name, len(sheet.rows), question_column,
        )
        return _run_rows(
            checked, sheet, question_column, mapping,
            known_tags, known_sections, progress, cancel_token,
        )
    except QuestionImportError as e:
        logger.warning("import rejected: %s", e)
        return ImportFailure(kind=FailureKind.STRUCTURAL, message=str(e))
    except Exception as e:
        logger.exception("unexpected import failure")
        return ImportFailure(kind=FailureKind.STRUCTURAL, message=f"Error processing file: {e}")


def _run_rows(
    file: UploadedFile,
    sheet: SheetData,
    question_column: str,
    mapping: ColumnMapping,
    known_tags: Sequence[Tag],
    known_sections: Sequence[Section],
    progress: ProgressSink | None,
    cancel_token: CancellationToken | None,
) -> ImportOutcome:
    resolver = ReferenceResolver(known_tags, known_sections)
    pipeline = RowPipeline(question_column, mapping, resolver)

    questions: list[Question] = []
    issues: list[RowIssue] = []
    total = len(sheet.rows)

    for i, row in enumerate(sheet.rows):
        if cancel_token is not None and cancel_token.cancelled:
            logger.info("import cancelled file=%s processed=%d/%d", file.name, i, total)
            return ImportFailure(
                kind=FailureKind.CANCELLED,
                message=f"Import cancelled after {i} of {total} rows",
            )
        try:
            outcome = pipeline.process(row)
        except Exception as e:
            logger.debug("row=%d unexpected error", row.row_number, exc_info=True)
            issues.append(RowIssue(
                row=row.row_number,
                kind=IssueKind.ROW_ERROR,
                message=f"Row {row.row_number}: {str(e) or 'Invalid question data'}",
            ))
        else:
            if outcome.question is not None:
                questions.append(outcome.question)
            elif outcome.issue is not None:
                issues.append(outcome.issue)
        _report_progress(progress, (i + 1) / total * 100)

    issues.extend(_suggestion_notes(resolver))
    diagnostics = ImportDiagnostics(
        issues=tuple(issues),
        suggested_tags=resolver.suggested_tags,
        suggested_sections=resolver.suggested_sections,
        total_rows=total,
        accepted_rows=len(questions),
    )

    if issues:
        logger.info("import rejected file=%s issues=%d", file.name, len(issues))
        return ImportFailure(
            kind=FailureKind.ROW_ERRORS,
            message=format_failure_message(diagnostics.errors),
            diagnostics=diagnostics,
        )
    if not questions:
        return ImportFailure(
            kind=FailureKind.NO_QUESTIONS,
            message="No valid questions found in the file",
            diagnostics=diagnostics,
        )
    logger.info("import accepted file=%s questions=%d", file.name, len(questions))
    return ImportedQuestions(questions=questions, diagnostics=diagnostics, sheet_name=sheet.sheet_name)
