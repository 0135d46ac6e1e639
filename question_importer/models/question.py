from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

"""Question, Tag and Section domain models.

Tags and sections are owned by the catalog (file or database) and only read
during an import. Questions are produced fresh by every import run and are
handed to the caller only when the whole run is accepted.
"""

__all__ = [
    "QuestionType",
    "Tag",
    "Section",
    "Question",
    "Catalog",
]


class QuestionType(Enum):
    """Answer type of a questionnaire question.

    Values match the document store's wire format.
    """
    TEXT = "text"
    YES_NO = "yesNo"
    MULTIPLE_CHOICE = "multipleChoice"
    SCALE = "scale"


@dataclass(frozen=True)
class Tag:
    id: str
    name: str  # natural key for import resolution (case-insensitive)
    color: str = "#000000"
    description: str | None = None

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Tag:
        return Tag(
            id=str(data["id"]),
            name=str(data["name"]),
            color=str(data.get("color") or "#000000"),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class Section:
    id: str
    name: str  # natural key for import resolution (case-insensitive)
    order: int = 0
    description: str | None = None

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Section:
        return Section(
            id=str(data["id"]),
            name=str(data["name"]),
            order=int(data.get("order") or 0),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class Question:
    """Candidate question record built from one accepted spreadsheet row.

    ``id`` is a placeholder; the persistence layer assigns the real one.
    ``tags`` only ever holds ids of tags that already exist in the catalog.
    """
    id: str
    text: str
    type: QuestionType
    required: bool
    order: int  # shared across the whole file, accepted rows only
    created_at: datetime
    updated_at: datetime
    tags: tuple[str, ...] = ()
    options: tuple[str, ...] = ()
    section_id: str | None = None

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("question text must not be empty")
        if self.type is QuestionType.MULTIPLE_CHOICE and not self.options:
            raise ValueError("multiple choice question requires options")

    def to_record(self) -> dict[str, Any]:
        """Render the document shape stored by the questionnaire backend.

        ``options`` and ``sectionId`` are omitted when empty, matching how the
        store treats optional fields.
        """
        record: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "type": self.type.value,
            "tags": list(self.tags),
            "required": self.required,
            "order": self.order,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.options:
            record["options"] = list(self.options)
        if self.section_id is not None:
            record["sectionId"] = self.section_id
        return record


@dataclass(frozen=True)
class Catalog:
    """Read-only snapshot of the known tags and sections for one import."""
    tags: list[Tag] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Catalog:
        return Catalog(
            tags=[Tag.from_dict(t) for t in data.get("tags") or []],
            sections=[Section.from_dict(s) for s in data.get("sections") or []],
        )
