from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Protocol, TypeVar

from ..models.question import Section, Tag

"""Tag and section reference resolution.

Names read from the spreadsheet are matched case-insensitively against the
catalog snapshot. Names with no match are collected as suggestions (unique,
case-sensitive as typed, in first-seen order) so the user can create them
before re-running the import.

Sections are sticky: spreadsheets usually write a section name once and
leave the cell blank for the rows below it, so a row without a resolvable
section inherits the last section resolved earlier in the file.
"""

__all__ = [
    "ReferenceResolver",
    "build_name_index",
]

logger = logging.getLogger(__name__)


class _Named(Protocol):
    id: str
    name: str


E = TypeVar("E", bound=_Named)


def build_name_index(entities: Iterable[E]) -> dict[str, E]:
    """Lower-cased name -> entity. The first entity wins on duplicate names."""
    index: dict[str, E] = {}
    for entity in entities:
        index.setdefault(entity.name.lower(), entity)
    return index


class ReferenceResolver:
    """Resolves names for one import run.

    Holds the per-run accumulators: the two suggestion sets and the current
    section. The catalog lists passed in are only read.
    """

    def __init__(self, known_tags: Sequence[Tag], known_sections: Sequence[Section]) -> None:
        self._tags = build_name_index(known_tags)
        self._sections = build_name_index(known_sections)
        # dicts as insertion-ordered sets
        self._suggested_tags: dict[str, None] = {}
        self._suggested_sections: dict[str, None] = {}
        self.current_section_id: str | None = None

    @property
    def suggested_tags(self) -> tuple[str, ...]:
        return tuple(self._suggested_tags)

    @property
    def suggested_sections(self) -> tuple[str, ...]:
        return tuple(self._suggested_sections)

    def resolve_tags(self, names: Iterable[str]) -> list[str]:
        """Return ids of the known tags among ``names``.

        Unknown names are recorded as suggestions; they never appear in the
        returned list. Ids are unique and keep the order of first mention.
        """
        resolved: dict[str, None] = {}
        for name in names:
            tag = self._tags.get(name.lower())
            if tag is None:
                if name not in self._suggested_tags:
                    logger.debug("new tag suggested: %s", name)
                self._suggested_tags.setdefault(name, None)
                continue
            resolved.setdefault(tag.id, None)
        return list(resolved)

    def resolve_section(self, name: str | None) -> str | None:
        """Return the section id for the current row.

        A known name moves the current section; an unknown name is recorded
        as a suggestion and, like a blank cell, keeps the current section.
        """
        if name:
            section = self._sections.get(name.lower())
            if section is None:
                if name not in self._suggested_sections:
                    logger.debug("new section suggested: %s", name)
                self._suggested_sections.setdefault(name, None)
            else:
                self.current_section_id = section.id
        return self.current_section_id
