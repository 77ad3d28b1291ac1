"""
Unified diff parser.

Turns the text of a unified diff (as served by GitHub for a pull request or
a commit comparison) into FileChange / Hunk / LineChange models, and renders
those models back into unified diff text.

Parsing is best-effort: lines that cannot be placed in a file or hunk are
skipped and a hunk cut short by the end of input keeps the lines read so far.
"""

import re
from typing import Iterable, List, Optional

from pr_reviewer.models.diff import FileChange, Hunk, LineChange, LineChangeKind
from pr_reviewer.utils.logging import get_logger

logger = get_logger(__name__)

DEV_NULL = "/dev/null"

_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_GIT_HEADER_RE = re.compile(r"^diff --git (?:\"?a/)?(.+?)\"? (?:\"?b/)?(.+?)\"?$")

_MARKERS = {
    LineChangeKind.CONTEXT: " ",
    LineChangeKind.ADDED: "+",
    LineChangeKind.REMOVED: "-",
}


class _HunkBuilder:
    """Mutable hunk under construction; frozen into a Hunk when complete."""

    def __init__(self, header: str, old_start: int, old_lines: int, new_start: int, new_lines: int):
        self.header = header
        self.old_start = old_start
        self.old_lines = old_lines
        self.new_start = new_start
        self.new_lines = new_lines
        self.changes: List[LineChange] = []
        self.old_ln = old_start
        self.new_ln = new_start
        self.old_remaining = old_lines
        self.new_remaining = new_lines

    @property
    def exhausted(self) -> bool:
        return self.old_remaining <= 0 and self.new_remaining <= 0

    def add(self, kind: LineChangeKind, text: str) -> None:
        if kind is LineChangeKind.ADDED:
            self.changes.append(LineChange(kind=kind, text=text, new_line_number=self.new_ln))
            self.new_ln += 1
            self.new_remaining -= 1
        elif kind is LineChangeKind.REMOVED:
            self.changes.append(LineChange(kind=kind, text=text, old_line_number=self.old_ln))
            self.old_ln += 1
            self.old_remaining -= 1
        else:
            self.changes.append(LineChange(
                kind=kind,
                text=text,
                old_line_number=self.old_ln,
                new_line_number=self.new_ln,
            ))
            self.old_ln += 1
            self.new_ln += 1
            self.old_remaining -= 1
            self.new_remaining -= 1

    def build(self) -> Hunk:
        return Hunk(
            raw_header=self.header,
            old_start=self.old_start,
            old_lines=self.old_lines,
            new_start=self.new_start,
            new_lines=self.new_lines,
            changes=self.changes,
        )


class _FileBuilder:
    """Mutable file record under construction."""

    def __init__(self, old_path: Optional[str] = None, new_path: Optional[str] = None):
        self.old_path = old_path
        self.new_path = new_path
        self.deleted = False
        self.saw_headers = False
        self.hunks: List[Hunk] = []

    def build(self) -> FileChange:
        path = None if self.deleted else self.new_path
        return FileChange(path=path, old_path=self.old_path, hunks=self.hunks)


class DiffParser:
    """
    Single-pass unified diff parser.

    Handles both ``git diff`` output (``diff --git`` headers, mode lines,
    renames) and plain ``diff -u`` output where files start at ``---``.
    """

    def __init__(self):
        self._files: List[_FileBuilder] = []
        self._file: Optional[_FileBuilder] = None
        self._hunk: Optional[_HunkBuilder] = None

    def parse(self, diff_text: str) -> List[FileChange]:
        """
        Parse a unified diff.

        Args:
            diff_text: Raw diff text, possibly empty or covering many files

        Returns:
            FileChange records in diff order, deleted files included
        """
        self._files = []
        self._file = None
        self._hunk = None

        if not diff_text:
            return []

        lines = diff_text.split("\n")
        if lines[-1] == "":
            lines.pop()

        for line in lines:
            if line.endswith("\r"):
                line = line[:-1]
            if self._hunk is not None:
                if self._consume_hunk_line(line):
                    continue
                self._close_hunk()
            self._consume_header_line(line)

        self._close_hunk()
        files = [builder.build() for builder in self._files]
        logger.debug(f"Parsed diff into {len(files)} files")
        return files

    def _consume_hunk_line(self, line: str) -> bool:
        """Feed a line to the open hunk; False when the line belongs elsewhere."""
        hunk = self._hunk
        if line.startswith("\\"):
            # "\ No newline at end of file"
            return True
        if hunk.exhausted:
            return False
        if line.startswith("+") and hunk.new_remaining > 0:
            hunk.add(LineChangeKind.ADDED, line[1:])
        elif line.startswith("-") and hunk.old_remaining > 0:
            hunk.add(LineChangeKind.REMOVED, line[1:])
        elif line.startswith(" ") and hunk.old_remaining > 0 and hunk.new_remaining > 0:
            hunk.add(LineChangeKind.CONTEXT, line[1:])
        elif line == "" and hunk.old_remaining > 0 and hunk.new_remaining > 0:
            # Context line whose leading space was stripped in transit
            hunk.add(LineChangeKind.CONTEXT, "")
        else:
            logger.debug(f"Hunk ended early at line: {line[:80]!r}")
            return False
        return True

    def _consume_header_line(self, line: str) -> None:
        if line.startswith("diff "):
            self._start_file()
            match = _GIT_HEADER_RE.match(line)
            if match:
                self._file.old_path, self._file.new_path = match.group(1), match.group(2)
        elif line.startswith("--- "):
            if self._file is None or self._file.saw_headers or self._file.hunks:
                self._start_file()
            self._file.old_path = self._clean_path(line[4:], "a/")
            self._file.saw_headers = True
        elif line.startswith("+++ "):
            if self._file is None:
                self._start_file()
            new_path = self._clean_path(line[4:], "b/")
            self._file.new_path = new_path
            if new_path is None:
                self._file.deleted = True
            self._file.saw_headers = True
        elif line.startswith("@@"):
            self._open_hunk(line)
        elif self._file is not None:
            self._consume_extended_header(line)

    def _consume_extended_header(self, line: str) -> None:
        if line.startswith("deleted file mode"):
            self._file.deleted = True
        elif line.startswith("rename from "):
            self._file.old_path = line[len("rename from "):]
        elif line.startswith("rename to "):
            self._file.new_path = line[len("rename to "):]

    def _open_hunk(self, line: str) -> None:
        match = _HUNK_HEADER_RE.match(line)
        if match is None:
            logger.warning(f"Skipping malformed hunk header: {line[:80]!r}")
            return
        if self._file is None:
            logger.warning("Skipping hunk that precedes any file header")
            return
        old_start, old_lines, new_start, new_lines = match.groups()
        self._hunk = _HunkBuilder(
            header=line,
            old_start=int(old_start),
            old_lines=int(old_lines) if old_lines is not None else 1,
            new_start=int(new_start),
            new_lines=int(new_lines) if new_lines is not None else 1,
        )

    def _close_hunk(self) -> None:
        if self._hunk is not None:
            self._file.hunks.append(self._hunk.build())
            self._hunk = None

    def _start_file(self) -> None:
        self._close_hunk()
        self._file = _FileBuilder()
        self._files.append(self._file)

    @staticmethod
    def _clean_path(raw: str, prefix: str) -> Optional[str]:
        path = raw.split("\t", 1)[0].strip()
        if path.startswith('"') and path.endswith('"') and len(path) > 1:
            path = path[1:-1]
        if path == DEV_NULL:
            return None
        if path.startswith(prefix):
            path = path[len(prefix):]
        return path


def parse_diff(diff_text: str) -> List[FileChange]:
    """
    Parse unified diff text into FileChange records.

    Args:
        diff_text: Raw diff text

    Returns:
        FileChange records in diff order
    """
    return DiffParser().parse(diff_text)


def format_change(change: LineChange) -> str:
    """Render a LineChange as the diff line it was parsed from."""
    return f"{_MARKERS[change.kind]}{change.text}"


def to_unified_diff(files: Iterable[FileChange]) -> str:
    """
    Render FileChange records back into unified diff text.

    Args:
        files: Parsed file changes

    Returns:
        Diff text that parse_diff() reads back into the same changes
    """
    lines: List[str] = []
    for file_change in files:
        old_path = file_change.old_path
        new_path = file_change.path
        lines.append(f"diff --git a/{old_path or new_path} b/{new_path or old_path}")
        if file_change.is_deleted:
            lines.append("deleted file mode 100644")
        lines.append(f"--- a/{old_path}" if old_path else f"--- {DEV_NULL}")
        lines.append(f"+++ b/{new_path}" if new_path else f"+++ {DEV_NULL}")
        for hunk in file_change.hunks:
            lines.append(hunk.raw_header)
            lines.extend(format_change(change) for change in hunk.changes)
    return "\n".join(lines) + ("\n" if lines else "")
