"""Unified diff data models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class LineChangeKind(str, Enum):
    """Kind of a line inside a hunk."""

    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"


class LineChange(BaseModel):
    """Single line of a hunk with its old/new file line numbers."""

    model_config = ConfigDict(frozen=True)

    kind: LineChangeKind
    text: str
    old_line_number: Optional[int] = None
    new_line_number: Optional[int] = None

    @property
    def canonical_line_number(self) -> Optional[int]:
        """New-file number when present, otherwise the old-file number."""
        if self.new_line_number is not None:
            return self.new_line_number
        return self.old_line_number


class Hunk(BaseModel):
    """Contiguous region of changed lines within a file."""

    model_config = ConfigDict(frozen=True)

    raw_header: str
    old_start: int = 0
    old_lines: int = 0
    new_start: int = 0
    new_lines: int = 0
    changes: List[LineChange] = []


class FileChange(BaseModel):
    """One file touched by a diff."""

    model_config = ConfigDict(frozen=True)

    # None when the target is /dev/null (file deleted)
    path: Optional[str]
    old_path: Optional[str] = None
    hunks: List[Hunk] = []

    @property
    def is_deleted(self) -> bool:
        return self.path is None
