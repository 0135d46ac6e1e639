from __future__ import annotations

from ..models.import_result import ImportedQuestions, ImportOutcome

"""SUMMARY line rendering for the question importer CLI.

Format:
SUMMARY file={name} status={accepted|rejected} rows={total} accepted={n}
issues={n} new_tags={n} new_sections={n} elapsed_sec={elapsed}

Structural failures have no diagnostics; their counters render as 0.
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
]


def format_seconds(value: float) -> str:
    """Render seconds without scientific notation or a trailing '.0'."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(file_name: str, outcome: ImportOutcome, elapsed_seconds: float) -> str:
    """Render a SUMMARY line for one import run.

    Examples:
        >>> from question_importer.models.import_result import FailureKind, ImportFailure
        >>> render_summary_line("q.csv", ImportFailure(FailureKind.STRUCTURAL, "File is empty"), 0.0)
        'SUMMARY file=q.csv status=rejected rows=0 accepted=0 issues=0 new_tags=0 new_sections=0 elapsed_sec=0'
    """
    diagnostics = outcome.diagnostics
    status = "accepted" if isinstance(outcome, ImportedQuestions) else "rejected"
    rows = diagnostics.total_rows if diagnostics else 0
    accepted = len(outcome.questions) if isinstance(outcome, ImportedQuestions) else 0
    issues = len(diagnostics.issues) if diagnostics else 0
    new_tags = len(diagnostics.suggested_tags) if diagnostics else 0
    new_sections = len(diagnostics.suggested_sections) if diagnostics else 0
    return (
        f"SUMMARY file={file_name} "
        f"status={status} "
        f"rows={rows} "
        f"accepted={accepted} "
        f"issues={issues} "
        f"new_tags={new_tags} "
        f"new_sections={new_sections} "
        f"elapsed_sec={format_seconds(elapsed_seconds)}"
    )
