from __future__ import annotations

import argparse
import os
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from question_importer.config.loader import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    load_catalog,
    load_config,
    load_understanding,
)
from question_importer.db.batch_insert import BatchInsertError, BatchMetrics, insert_questions
from question_importer.db.catalog import CatalogFetchError, fetch_catalog
from question_importer.excel.template import write_template
from question_importer.logging.error_log import ErrorLogBuffer
from question_importer.logging.init import get_logger, log_summary, set_debug, setup_logging
from question_importer.models.column_mapping import FileUnderstanding
from question_importer.models.config_models import ImporterConfig
from question_importer.models.import_result import FailureKind, ImportedQuestions, ImportFailure
from question_importer.models.question import Catalog, Question
from question_importer.models.uploaded_file import UploadedFile
from question_importer.services.orchestrator import import_questions
from question_importer.services.progress import ProgressTracker
from question_importer.services.summary import render_summary_line

"""CLI entrypoint.

    python -m question_importer.cli QUESTIONS.xlsx [--understanding U.json]
        [--config config/import.yml] [--commit] [--debug]
    python -m question_importer.cli --template OUT.xlsx

Flow: load .env and config -> load catalog (YAML file or database) -> run the
import with a progress bar -> log every issue and write the JSON Lines error
log -> SUMMARY line -> optionally insert accepted questions (--commit).
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_REJECTED = 2

CONFIG_ENV_VAR = "QUESTION_IMPORT_CONFIG"


@contextmanager
def _db_connection(cfg: ImporterConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Provide a psycopg2 connection (autocommit off).

    Connection settings, highest priority first:
        1. DATABASE_URL / PGDSN (full DSN), including values loaded from .env
        2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
        3. the ``database`` section of the config file
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if not dsn:
        host = os.getenv("PGHOST", db_cfg.host or "localhost")
        port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
        user = os.getenv("PGUSER", db_cfg.user or "postgres")
        password = os.getenv("PGPASSWORD", db_cfg.password or "")
        database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
        dsn = f"host={host} port={port} user={user} dbname={database}"
        if password:
            dsn += f" password={password}"

    conn = psycopg2.connect(dsn)
    conn.autocommit = False
    try:
        yield conn
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env via python-dotenv; .env values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Import questionnaire questions from a spreadsheet")
    p.add_argument("file", nargs="?", type=Path, help="Spreadsheet to import (.xlsx, .xls, .csv)")
    p.add_argument("--understanding", type=Path, help="JSON column mapping produced by the chat step")
    p.add_argument("--config", type=Path, help=f"Config file (default: ${CONFIG_ENV_VAR} or {DEFAULT_CONFIG_PATH})")
    p.add_argument("--commit", action="store_true", help="Insert accepted questions into the database")
    p.add_argument("--template", type=Path, metavar="OUT", help="Write a template workbook and exit")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _resolve_config(explicit: Path | None, logger: Any) -> ImporterConfig:
    """Load the config; a missing default config falls back to built-in defaults."""
    if explicit is not None:
        return load_config(explicit)
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return load_config(Path(env_path))
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    logger.info(f"config: {DEFAULT_CONFIG_PATH} not found, using defaults")
    return ImporterConfig()


def _load_known_entities(cfg: ImporterConfig) -> Catalog:
    if cfg.catalog.source == "database":
        with _db_connection(cfg) as conn, conn.cursor() as cur:
            return fetch_catalog(cur)
    if cfg.catalog.path is None:
        return Catalog()
    return load_catalog(Path(cfg.catalog.path))


def _log_batch(metrics: BatchMetrics) -> None:
    get_logger().info(f"insert batch_size={metrics.batch_size} elapsed_sec={metrics.elapsed_seconds:.3f}")


def _persist(cfg: ImporterConfig, questions: list[Question]) -> int:
    """Insert questions in one transaction. Returns the inserted row count."""
    with _db_connection(cfg) as conn:
        try:
            with conn.cursor() as cur:
                result = insert_questions(
                    cur, questions, table=cfg.questions_table, metrics_callback=_log_batch
                )
            conn.commit()
        except (BatchInsertError, psycopg2.Error):
            conn.rollback()
            raise
    return result.inserted_rows


def _report_failure(logger: Any, file_name: str, failure: ImportFailure) -> None:
    lines = failure.message.splitlines()
    logger.error(lines[0])
    for line in lines[1:]:
        logger.error(f"  {line}")
    if failure.diagnostics is None:
        return
    error_log = ErrorLogBuffer()
    error_log.add_diagnostics(file_name, failure.diagnostics)
    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error log written: {log_path}")


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] from tests must not fall back to pytest's argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.template is not None:
        out = write_template(args.template)
        logger.info(f"template written: {out}")
        return EXIT_SUCCESS

    if args.file is None:
        logger.error("no input file given")
        return EXIT_FATAL

    try:
        cfg = _resolve_config(args.config, logger)
        understanding = load_understanding(args.understanding) if args.understanding else None
        catalog = _load_known_entities(cfg)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    except (CatalogFetchError, psycopg2.Error) as e:
        logger.error(f"catalog: {e}")
        return EXIT_FATAL

    if understanding is None:
        understanding = FileUnderstanding(column_mappings=cfg.column_mappings)

    if not args.file.is_file():
        logger.error(f"file not found: {args.file}")
        return EXIT_FATAL

    uploaded = UploadedFile.from_path(args.file)
    logger.info(
        f"Importing {uploaded.name} (tags={len(catalog.tags)} sections={len(catalog.sections)})"
    )

    start = time.perf_counter()
    with ProgressTracker(description=f"Importing {uploaded.name}") as progress:
        outcome = import_questions(
            uploaded,
            catalog.tags,
            catalog.sections,
            progress,
            understanding,
            max_bytes=cfg.max_file_size_bytes,
        )
        diagnostics = outcome.diagnostics
        if diagnostics is not None:
            progress.set_postfix(accepted=diagnostics.accepted_rows, issues=len(diagnostics.issues))
    elapsed = time.perf_counter() - start

    if isinstance(outcome, ImportFailure):
        _report_failure(logger, uploaded.name, outcome)
        log_summary(render_summary_line(uploaded.name, outcome, elapsed)[len("SUMMARY "):])
        return EXIT_FATAL if outcome.kind is FailureKind.STRUCTURAL else EXIT_REJECTED

    assert isinstance(outcome, ImportedQuestions)
    if args.commit:
        try:
            inserted = _persist(cfg, outcome.questions)
        except (BatchInsertError, psycopg2.Error) as e:
            logger.error(f"persist: {e}")
            return EXIT_FATAL
        logger.info(f"inserted {inserted} questions into {cfg.questions_table}")
    else:
        logger.info(f"validated {len(outcome.questions)} questions (dry run, use --commit to persist)")

    log_summary(render_summary_line(uploaded.name, outcome, elapsed)[len("SUMMARY "):])
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
