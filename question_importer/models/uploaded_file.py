from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

"""UploadedFile domain model.

The importer core never touches the filesystem; callers (the CLI, or a web
handler) read the bytes and hand over an UploadedFile.
"""

__all__ = [
    "UploadedFile",
    "SUPPORTED_EXTENSIONS",
]

SUPPORTED_EXTENSIONS = frozenset({"xlsx", "xls", "csv"})


@dataclass(frozen=True)
class UploadedFile:
    name: str  # original file name, used for type detection and logging
    content: bytes

    @property
    def extension(self) -> str:
        """Lower-cased extension without the dot, '' when there is none."""
        if "." not in self.name:
            return ""
        return self.name.rsplit(".", 1)[-1].lower()

    @property
    def size(self) -> int:
        return len(self.content)

    @staticmethod
    def from_path(path: Path) -> UploadedFile:
        return UploadedFile(name=path.name, content=path.read_bytes())
