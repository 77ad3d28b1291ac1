"""Data models for the PR review bot."""

from .api_response import PublishResult
from .diff import FileChange, Hunk, LineChange, LineChangeKind
from .pr_event import PREvent, PullRequestContext
from .review import (
    Annotation,
    ExtractionResult,
    ReviewEntry,
    ReviewReply,
    ReviewResult,
)

__all__ = [
    # Diff models
    "LineChangeKind",
    "LineChange",
    "Hunk",
    "FileChange",
    # PR event models
    "PREvent",
    "PullRequestContext",
    # Review models
    "ReviewEntry",
    "ReviewReply",
    "ExtractionResult",
    "Annotation",
    "ReviewResult",
    # API response models
    "PublishResult",
]
