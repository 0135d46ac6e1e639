from __future__ import annotations

from typing import Any

from ..models.question import Catalog, Section, Tag

"""Tag / section catalog lookup from PostgreSQL.

Reads the ``tags`` and ``sections`` tables into a Catalog snapshot. The
snapshot is taken once per import; rows created afterwards are only seen by
the next run.
"""

__all__ = [
    "CatalogFetchError",
    "fetch_catalog",
]

TAGS_SQL = "SELECT id, name, color, description FROM tags ORDER BY name"
SECTIONS_SQL = 'SELECT id, name, description, "order" FROM sections ORDER BY "order", name'


class CatalogFetchError(Exception):
    pass


def fetch_catalog(cursor: Any) -> Catalog:
    try:
        cursor.execute(TAGS_SQL)
        tags = [
            Tag(id=str(r[0]), name=r[1], color=r[2] or "#000000", description=r[3])
            for r in cursor.fetchall()
        ]
        cursor.execute(SECTIONS_SQL)
        sections = [
            Section(id=str(r[0]), name=r[1], description=r[2], order=r[3] or 0)
            for r in cursor.fetchall()
        ]
    except Exception as e:
        raise CatalogFetchError(f"failed to read tag/section catalog: {e}") from e
    return Catalog(tags=tags, sections=sections)
