from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from ..models.column_mapping import ColumnMapping
from ..models.import_result import IssueKind, RowIssue
from ..models.question import Question, QuestionType
from ..models.row_data import RawRow, cell_text
from .classifiers import (
    classify_required,
    classify_type,
    extract_options,
    extract_section_name,
    extract_tag_names,
)
from .references import ReferenceResolver

"""Per-row pipeline: RawRow -> accepted Question or RowIssue.

Steps per row:
1. question text (trimmed); blank -> rejected
2. tag names -> resolved ids (unknown names become suggestions)
3. section name -> section id with carry-forward (unknown names become suggestions)
4. type / required / options classification
5. multiple choice without options -> rejected
6. Question assembled with the next order value

Steps 2 and 3 run before the step 5 check, so a rejected multiple choice row
still reports its unknown tags and still moves the current section.
"""

__all__ = [
    "RowOutcome",
    "RowPipeline",
]


@dataclass(frozen=True)
class RowOutcome:
    row_number: int
    question: Question | None = None
    issue: RowIssue | None = None

    @property
    def accepted(self) -> bool:
        return self.question is not None


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RowPipeline:
    """Runs the row steps for one file, carrying the order counter.

    Parameters:
        question_column: Header resolved for the question text on the first row
        mapping: Column mapping in effect for this run
        resolver: Reference resolver owning suggestions and the current section
        clock: Timestamp source for created_at / updated_at
    """

    def __init__(
        self,
        question_column: str,
        mapping: ColumnMapping,
        resolver: ReferenceResolver,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.question_column = question_column
        self.mapping = mapping
        self.resolver = resolver
        self.clock = clock
        self.next_order = 0
        self._id_prefix = str(int(time.time() * 1000))

    def process(self, row: RawRow) -> RowOutcome:
        n = row.row_number
        values = row.values

        text = cell_text(values.get(self.question_column))
        if text is None:
            return self._reject(n, IssueKind.EMPTY_QUESTION_TEXT, "Empty question text")

        tag_ids = self.resolver.resolve_tags(extract_tag_names(values, self.mapping.tags))
        section_id = self.resolver.resolve_section(
            extract_section_name(values, self.mapping.section)
        )

        qtype = classify_type(values, self.mapping.type)
        required = classify_required(values, self.mapping.required)
        options = extract_options(values, self.mapping.options)

        if qtype is QuestionType.MULTIPLE_CHOICE and not options:
            return self._reject(
                n, IssueKind.OPTIONS_REQUIRED, "Multiple choice question requires options"
            )

        now = self.clock()
        question = Question(
            id=f"{self._id_prefix}-{n - 1}",
            text=text,
            type=qtype,
            required=required,
            order=self.next_order,
            created_at=now,
            updated_at=now,
            tags=tuple(tag_ids),
            options=tuple(options),
            section_id=section_id,
        )
        self.next_order += 1
        return RowOutcome(row_number=n, question=question)

    @staticmethod
    def _reject(row_number: int, kind: IssueKind, reason: str) -> RowOutcome:
        issue = RowIssue(row=row_number, kind=kind, message=f"Row {row_number}: {reason}")
        return RowOutcome(row_number=row_number, issue=issue)
