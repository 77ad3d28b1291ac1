"""Unified diff parsing."""

from pr_reviewer.diff.parser import (
    DEV_NULL,
    DiffParser,
    format_change,
    parse_diff,
    to_unified_diff,
)

__all__ = [
    "DEV_NULL",
    "DiffParser",
    "format_change",
    "parse_diff",
    "to_unified_diff",
]
