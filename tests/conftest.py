# Shared pytest fixtures
from __future__ import annotations
import io
import tempfile
from pathlib import Path
from typing import Callable

import pandas as pd
import pytest

from question_importer.logging.init import reset_logging
from question_importer.models.question import Section, Tag
from question_importer.models.uploaded_file import UploadedFile


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("QUESTION_IMPORT_CONFIG", raising=False)
        yield p


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def known_tags() -> list[Tag]:
    return [
        Tag(id="t-quality", name="Quality", color="#1F77B4"),
        Tag(id="t-existing", name="Existing", color="#FF7F0E"),
        Tag(id="t-tier1", name="Tier 1", color="#2CA02C"),
    ]


@pytest.fixture()
def known_sections() -> list[Section]:
    return [
        Section(id="s-intro", name="Intro", order=0),
        Section(id="s-compliance", name="Compliance", order=1),
    ]


@pytest.fixture()
def sample_config_yaml() -> str:
    return """column_mappings:
  question: Question
  type: Type
  required: Required
  options: Options
  tags: Tags
  section: Section
max_file_size_mb: 5
catalog:
  source: file
  path: config/catalog.yml
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def sample_catalog_yaml() -> str:
    return """tags:
  - id: t-quality
    name: Quality
    color: "#1F77B4"
  - id: t-existing
    name: Existing
    color: "#FF7F0E"
sections:
  - id: s-intro
    name: Intro
    order: 0
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str, sample_catalog_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    (temp_workdir / "config" / "catalog.yml").write_text(sample_catalog_yaml, encoding="utf-8")
    return cfg


def xlsx_bytes(rows: list[list[object]], sheet_name: str = "Questions") -> bytes:
    """Build an .xlsx workbook whose first sheet holds ``rows`` (first row = header)."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return buffer.getvalue()


@pytest.fixture()
def make_xlsx() -> Callable[..., UploadedFile]:
    def _make(rows: list[list[object]], name: str = "questions.xlsx", sheet_name: str = "Questions") -> UploadedFile:
        return UploadedFile(name=name, content=xlsx_bytes(rows, sheet_name))
    return _make


@pytest.fixture()
def make_csv() -> Callable[..., UploadedFile]:
    def _make(text: str, name: str = "questions.csv", encoding: str = "utf-8") -> UploadedFile:
        return UploadedFile(name=name, content=text.encode(encoding))
    return _make
