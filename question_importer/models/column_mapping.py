from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

"""Column mapping and file understanding models.

A ColumnMapping tells the importer which spreadsheet header carries each
semantic field. Only ``question`` is mandatory; any other field left as None
falls back to the classifier default for every row.

A FileUnderstanding is produced outside the importer (from a conversation
with the user) and is consumed here as an opaque hint.
"""

__all__ = [
    "ColumnMapping",
    "FileUnderstanding",
    "DEFAULT_COLUMN_MAPPING",
]


@dataclass(frozen=True)
class ColumnMapping:
    question: str
    type: str | None = None
    required: str | None = None
    options: str | None = None
    tags: str | None = None
    section: str | None = None

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ColumnMapping:
        """Build a mapping from a plain dict, ignoring unknown keys.

        Blank header names are treated as unmapped.
        """
        known = {f.name for f in fields(ColumnMapping)}
        values: dict[str, str | None] = {}
        for key, value in data.items():
            if key not in known:
                continue
            if value is None or not str(value).strip():
                values[key] = None
            else:
                values[key] = str(value)
        if not values.get("question"):
            raise ValueError("column mapping requires a 'question' header")
        return ColumnMapping(**values)  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, str | None]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_COLUMN_MAPPING = ColumnMapping(
    question="Question",
    type="Type",
    required="Required",
    options="Options",
    tags="Tags",
    section="Section",
)


@dataclass(frozen=True)
class FileUnderstanding:
    """Externally derived column mapping plus free-form instructions.

    ``special_instructions`` is reserved for sheet selection hints; the
    importer always reads the first sheet and only logs them.
    """
    column_mappings: ColumnMapping
    special_instructions: tuple[str, ...] = ()

    @staticmethod
    def from_dict(data: dict[str, Any]) -> FileUnderstanding:
        """Build from the camelCase JSON document used by the chat step."""
        return FileUnderstanding(
            column_mappings=ColumnMapping.from_dict(data.get("columnMappings") or {}),
            special_instructions=tuple(str(s) for s in data.get("specialInstructions") or ()),
        )
