"""
Path exclusion filter.

Patterns use minimatch semantics through wcmatch: ``*`` and ``?`` stay within
one path segment, ``**`` spans segments, braces expand, and dotfiles only
match patterns that spell out the dot. A pattern without a slash only matches
top-level paths.
"""

import re
from typing import Iterable, List, Sequence

from wcmatch import glob

from pr_reviewer.models import FileChange
from pr_reviewer.utils.logging import get_logger

logger = get_logger(__name__)

GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE


class PathFilter:
    """Decides whether a changed file is reviewed, given exclusion globs."""

    def __init__(self, exclude_patterns: Iterable[str] = ()):
        self.exclude_patterns: List[str] = []
        self._matchers = []
        for pattern in exclude_patterns:
            pattern = (pattern or "").strip()
            if not pattern:
                continue
            try:
                matcher = glob.compile(pattern, flags=GLOB_FLAGS)
            except (ValueError, re.error) as e:
                logger.warning(f"Ignoring invalid exclusion pattern {pattern!r}: {e}")
                continue
            self.exclude_patterns.append(pattern)
            self._matchers.append(matcher)

    def is_excluded(self, path: str) -> bool:
        return any(matcher.match(path) for matcher in self._matchers)

    def filter(self, files: Sequence[FileChange]) -> List[FileChange]:
        """
        Drop files whose target path matches an exclusion pattern.

        Deleted files are judged by an empty path and normally pass through;
        the aggregator skips them.
        """
        kept = []
        for file in files:
            if self.is_excluded(file.path or ""):
                logger.info(f"Excluding file from review: {file.path}", extra={"file_path": file.path})
                continue
            kept.append(file)
        return kept
