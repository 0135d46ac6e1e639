from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

from ..models.question import Question

"""Question persistence over a psycopg2 cursor.

Accepted questions from a successful import are written with one batched
INSERT (psycopg2.extras.execute_values). Transaction boundaries belong to the
caller: the CLI commits on success and rolls back on failure.
The placeholder question ids are not stored; the table assigns its own.
"""

__all__ = [
    "BatchInsertError",
    "BatchMetrics",
    "InsertResult",
    "QUESTION_COLUMNS",
    "batch_insert",
    "question_row",
    "insert_questions",
]


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of a single execute_values call."""
    batch_size: int
    elapsed_seconds: float
    start_time: float
    end_time: float


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    returned_values: list[tuple[Any, ...]] | None = None


QUESTION_COLUMNS = (
    "text",
    "type",
    "tags",
    "options",
    "required",
    "section_id",
    "order",
    "created_at",
    "updated_at",
)


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    returning: bool = False,
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> InsertResult:
    """Perform a batched INSERT using psycopg2.extras.execute_values.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table name
    columns: insert columns; each is double-quoted ("order" is reserved)
    rows: row sequences in ``columns`` order
    returning: append ``RETURNING id`` and fetch the generated ids
    page_size: execute_values page size
    metrics_callback: receives BatchMetrics; not called for empty ``rows``
    """
    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0, returned_values=[] if returning else None)

    cols_sql = ",".join(f'"{c}"' for c in columns)
    sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s"
    if returning:
        sql += " RETURNING id"

    start_time = time.time()
    try:
        returned = execute_values(cursor, sql, rows_list, page_size=page_size, fetch=returning)
    except Exception as e:
        raise BatchInsertError(str(e)) from e
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(BatchMetrics(
                batch_size=len(rows_list),
                elapsed_seconds=end_time - start_time,
                start_time=start_time,
                end_time=end_time,
            ))

    return InsertResult(
        inserted_rows=len(rows_list),
        returned_values=list(returned) if returning and returned is not None else None,
    )


def question_row(question: Question) -> tuple[Any, ...]:
    """Map a Question onto QUESTION_COLUMNS.

    Tags and options both go out as Python lists, which psycopg2 adapts to
    PostgreSQL text arrays; a question without either gets an empty array.
    """
    return (
        question.text,
        question.type.value,
        list(question.tags),
        list(question.options),
        question.required,
        question.section_id,
        question.order,
        question.created_at,
        question.updated_at,
    )


def insert_questions(
    cursor: Any,
    questions: Sequence[Question],
    *,
    table: str = "questions",
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> InsertResult:
    """Insert accepted questions and return their database ids."""
    return batch_insert(
        cursor=cursor,
        table=table,
        columns=QUESTION_COLUMNS,
        rows=[question_row(q) for q in questions],
        returning=True,
        page_size=page_size,
        metrics_callback=metrics_callback,
    )
