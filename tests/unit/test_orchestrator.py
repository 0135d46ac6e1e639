from __future__ import annotations

from unittest.mock import patch

import pytest

from question_importer.models.column_mapping import ColumnMapping, FileUnderstanding
from question_importer.models.import_result import FailureKind, ImportedQuestions, ImportFailure, IssueKind
from question_importer.models.question import QuestionType
from question_importer.models.uploaded_file import UploadedFile
from question_importer.services.orchestrator import (
    CancellationToken,
    format_failure_message,
    import_questions,
    resolve_mapping,
)
from question_importer.services.row_pipeline import RowPipeline

HEADER = ["Question", "Type", "Required", "Options", "Tags", "Section"]


def test_missing_file(known_tags, known_sections):
    out = import_questions(None, known_tags, known_sections)
    assert isinstance(out, ImportFailure)
    assert out.kind is FailureKind.STRUCTURAL
    assert out.message == "No file provided"
    assert out.diagnostics is None


@pytest.mark.parametrize("name", ["questions.txt", "questions", "questions.xlsx.pdf"])
def test_unsupported_extension(known_tags, known_sections, name):
    out = import_questions(UploadedFile(name=name, content=b"x"), known_tags, known_sections)
    assert out.message == "Invalid file type. Please upload an Excel file (.xlsx, .xls) or CSV file"


def test_extension_is_case_insensitive(known_tags, known_sections, make_csv):
    out = import_questions(make_csv("Question\nIs X?\n", name="Q.CSV"), known_tags, known_sections)
    assert isinstance(out, ImportedQuestions)


def test_empty_file(known_tags, known_sections):
    out = import_questions(UploadedFile(name="q.csv", content=b""), known_tags, known_sections)
    assert out.message == "File is empty"


def test_size_limit(known_tags, known_sections, make_csv):
    file = make_csv("Question\nIs X?\n")
    out = import_questions(file, known_tags, known_sections, max_bytes=4)
    assert out.kind is FailureKind.STRUCTURAL
    assert out.message.startswith("File exceeds the maximum size of")
    assert isinstance(import_questions(file, known_tags, known_sections, max_bytes=file.size), ImportedQuestions)


def test_unreadable_workbook(known_tags, known_sections):
    out = import_questions(UploadedFile(name="q.xlsx", content=b"\x00garbage"), known_tags, known_sections)
    assert out.kind is FailureKind.STRUCTURAL
    assert out.message == "Unable to read file. Please ensure it is a valid Excel or CSV file"


def test_no_data_rows(known_tags, known_sections, make_xlsx):
    out = import_questions(make_xlsx([HEADER]), known_tags, known_sections)
    assert out.message == "No data found in the file"


def test_missing_question_column(known_tags, known_sections, make_csv):
    out = import_questions(make_csv("Prompt,Type\nIs X?,text\n"), known_tags, known_sections)
    assert out.kind is FailureKind.STRUCTURAL
    assert out.message == 'Required column "Question" not found in the file'


def test_structural_failure_reports_no_progress(known_tags, known_sections, make_csv):
    seen: list[float] = []
    import_questions(make_csv("Prompt\nx\n"), known_tags, known_sections, seen.append)
    assert seen == []


def test_accepts_clean_file(known_tags, known_sections, make_xlsx):
    file = make_xlsx([
        HEADER,
        ["Do you have ISO 9001?", "yes/no", "yes", None, "Quality", "Intro"],
        ["Pick a tier", "Multiple Choice", "no", "Gold; Silver", "Tier 1", None],
        ["Describe your process", None, None, None, None, None],
    ])
    out = import_questions(file, known_tags, known_sections)
    assert isinstance(out, ImportedQuestions)
    assert out.sheet_name == "Questions"
    q1, q2, q3 = out.questions
    assert (q1.type, q1.required, q1.tags, q1.section_id, q1.order) == (
        QuestionType.YES_NO, True, ("t-quality",), "s-intro", 0,
    )
    assert (q2.type, q2.required, q2.options, q2.section_id, q2.order) == (
        QuestionType.MULTIPLE_CHOICE, False, ("Gold", "Silver"), "s-intro", 1,
    )
    assert (q3.type, q3.required, q3.order) == (QuestionType.TEXT, True, 2)
    assert out.diagnostics.total_rows == 3
    assert out.diagnostics.accepted_rows == 3
    assert not out.diagnostics.has_issues


def test_row_errors_reject_whole_file(known_tags, known_sections, make_xlsx):
    file = make_xlsx([
        HEADER,
        ["Fine", None, None, None, None, None],
        ["   ", "text", None, None, None, None],
        ["Pick", "choice", None, None, None, None],
    ])
    out = import_questions(file, known_tags, known_sections)
    assert isinstance(out, ImportFailure)
    assert out.kind is FailureKind.ROW_ERRORS
    assert out.message == (
        "Found 2 issues:\n"
        "Row 2: Empty question text\n"
        "Row 3: Multiple choice question requires options"
    )
    assert out.diagnostics.accepted_rows == 1
    assert out.diagnostics.rejected_rows == 2


def test_suggestions_alone_reject_file(known_tags, known_sections, make_xlsx):
    file = make_xlsx([
        HEADER,
        ["Q1", None, None, None, "Existing, BrandNew", "Logistics"],
        ["Q2", None, None, None, "BrandNew", None],
    ])
    out = import_questions(file, known_tags, known_sections)
    assert out.kind is FailureKind.ROW_ERRORS
    assert out.message == (
        "Found 2 issues:\n"
        "Note: Found potential new tags: BrandNew. Consider creating these tags first.\n"
        "Note: Found potential new sections: Logistics. Consider creating these sections first."
    )
    assert out.diagnostics.suggested_tags == ("BrandNew",)
    assert out.diagnostics.suggested_sections == ("Logistics",)
    assert [i.kind for i in out.diagnostics.issues] == [IssueKind.NEW_TAGS, IssueKind.NEW_SECTIONS]
    assert all(i.row == -1 for i in out.diagnostics.issues)


def test_row_errors_come_before_notes(known_tags, known_sections, make_csv):
    out = import_questions(make_csv("Question,Tags\n,Ghost\nQ,Ghost\n"), known_tags, known_sections)
    assert out.diagnostics.errors == [
        "Row 1: Empty question text",
        "Note: Found potential new tags: Ghost. Consider creating these tags first.",
    ]


def test_progress_is_monotonic_and_ends_at_100(known_tags, known_sections, make_csv):
    seen: list[float] = []
    file = make_csv("Question\nA\nB\nC\nD\n")
    import_questions(file, known_tags, known_sections, seen.append)
    assert seen == [25.0, 50.0, 75.0, 100.0]


def test_progress_reported_for_rejected_rows(known_tags, known_sections, make_csv):
    seen: list[float] = []
    import_questions(make_csv("Question,Type\n,text\nQ,text\n"), known_tags, known_sections, seen.append)
    assert seen == [50.0, 100.0]


def test_failing_progress_sink_is_ignored(known_tags, known_sections, make_csv):
    def sink(_percent: float) -> None:
        raise RuntimeError("display gone")

    out = import_questions(make_csv("Question\nA\n"), known_tags, known_sections, sink)
    assert isinstance(out, ImportedQuestions)


def test_cancellation_between_rows(known_tags, known_sections, make_csv):
    token = CancellationToken()
    out = import_questions(
        make_csv("Question\nA\nB\nC\n"),
        known_tags,
        known_sections,
        lambda _p: token.cancel(),
        cancel_token=token,
    )
    assert isinstance(out, ImportFailure)
    assert out.kind is FailureKind.CANCELLED
    assert out.message == "Import cancelled after 1 of 3 rows"


def test_unexpected_row_exception_becomes_row_issue(known_tags, known_sections, make_csv):
    real_process = RowPipeline.process

    def flaky(self, row):
        if row.row_number == 2:
            raise RuntimeError("boom")
        return real_process(self, row)

    with patch.object(RowPipeline, "process", flaky):
        out = import_questions(make_csv("Question\nA\nB\nC\n"), known_tags, known_sections)
    assert out.kind is FailureKind.ROW_ERRORS
    assert out.diagnostics.errors == ["Row 2: boom"]
    assert out.diagnostics.issues[0].kind is IssueKind.ROW_ERROR
    assert out.diagnostics.accepted_rows == 2


def test_blank_exception_message_gets_default_text(known_tags, known_sections, make_csv):
    with patch.object(RowPipeline, "process", side_effect=ValueError()):
        out = import_questions(make_csv("Question\nA\n"), known_tags, known_sections)
    assert out.diagnostics.errors == ["Row 1: Invalid question data"]


def test_unexpected_failure_outside_rows(known_tags, known_sections, make_csv):
    with patch("question_importer.services.orchestrator.read_first_sheet", side_effect=MemoryError("oom")):
        out = import_questions(make_csv("Question\nA\n"), known_tags, known_sections)
    assert out.kind is FailureKind.STRUCTURAL
    assert out.message == "Error processing file: oom"


def test_understanding_mapping_replaces_default(known_tags, known_sections, make_csv):
    understanding = FileUnderstanding(column_mappings=ColumnMapping(question="Prompt", tags="Labels"))
    file = make_csv("Prompt,Labels,Type\nIs X?,quality,scale\n")
    out = import_questions(file, known_tags, known_sections, understanding=understanding)
    assert isinstance(out, ImportedQuestions)
    q = out.questions[0]
    assert q.tags == ("t-quality",)
    assert q.type is QuestionType.TEXT


def test_question_column_matched_case_insensitively(known_tags, known_sections, make_csv):
    out = import_questions(make_csv("QUESTION,type\nRate us,Scale\n"), known_tags, known_sections)
    assert out.questions[0].type is QuestionType.SCALE


def test_resolve_mapping_logs_special_instructions(caplog):
    understanding = FileUnderstanding(
        column_mappings=ColumnMapping(question="Q"),
        special_instructions=("use sheet 2",),
    )
    with caplog.at_level("DEBUG", logger="question_importer.services.orchestrator"):
        assert resolve_mapping(understanding).question == "Q"
    assert "use sheet 2" in caplog.text


def test_format_failure_message():
    assert format_failure_message(["a", "b"]) == "Found 2 issues:\na\nb"
