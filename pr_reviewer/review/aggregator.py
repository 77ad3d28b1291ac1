"""
Annotation Aggregator.

Walks every hunk of every reviewable file, asks the extractor for feedback
and collects the annotations and summary fragments in discovery order.
"""

import asyncio
from typing import List, Optional, Sequence, Tuple

from pr_reviewer.models import (
    Annotation,
    FileChange,
    Hunk,
    PullRequestContext,
    ReviewReply,
    ReviewResult,
)
from pr_reviewer.review.extractor import AnnotationExtractor, parse_line_number
from pr_reviewer.review.prompt_builder import PromptBuilder
from pr_reviewer.utils.logging import get_logger
from pr_reviewer.utils.metrics import MetricsCollector

logger = get_logger(__name__)

HunkOutcome = Tuple[List[Annotation], str]


def build_annotations(
    file: FileChange,
    hunk: Hunk,
    reply: ReviewReply,
    metrics: Optional[MetricsCollector] = None,
) -> List[Annotation]:
    """
    Map review entries of one reply onto annotations, in reply order.

    Entries whose line number cannot be read as a positive integer are
    dropped with a warning.
    """
    annotations = []
    dropped = 0
    for entry in reply.reviews:
        line_number = parse_line_number(entry.line_number)
        if line_number is None:
            dropped += 1
            logger.warning(
                f"Dropping review entry with unusable line number {entry.line_number!r}",
                extra={"file_path": file.path},
            )
            continue
        annotations.append(Annotation(
            file_path=file.path,
            line_number=line_number,
            comment=entry.review_comment,
            short_summary=entry.quick_summary,
            source_hunk=hunk,
        ))
    if metrics is not None and dropped:
        metrics.record_dropped_entries(dropped)
    return annotations


class AnnotationAggregator:
    """
    Drives prompt building and extraction over a parsed diff.

    With ``max_workers`` of 1 hunks are reviewed strictly one after another.
    Higher values run up to that many LLM requests at once; results are still
    merged in file, hunk and reply order.
    """

    def __init__(
        self,
        prompt_builder: PromptBuilder,
        extractor: AnnotationExtractor,
        max_workers: int = 1,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.prompt_builder = prompt_builder
        self.extractor = extractor
        self.max_workers = max(1, max_workers)
        self.metrics = metrics

    async def aggregate(self, files: Sequence[FileChange], pr: PullRequestContext) -> ReviewResult:
        """
        Review every hunk of every non-deleted file.

        Args:
            files: Parsed (and already path-filtered) file changes
            pr: Pull request context for the prompts

        Returns:
            ReviewResult with annotations and concatenated summary fragments
        """
        pairs: List[Tuple[FileChange, Hunk]] = []
        for file in files:
            if file.is_deleted:
                logger.info(f"Skipping deleted file: {file.old_path}", extra={"file_path": file.old_path})
                continue
            if self.metrics is not None:
                self.metrics.record_file()
            pairs.extend((file, hunk) for hunk in file.hunks)

        logger.info(f"Reviewing {len(pairs)} hunks", extra={"pr_number": pr.number})

        if self.max_workers == 1:
            outcomes = [await self._review_hunk(file, hunk, pr) for file, hunk in pairs]
        else:
            semaphore = asyncio.Semaphore(self.max_workers)

            async def _bounded(file: FileChange, hunk: Hunk) -> HunkOutcome:
                async with semaphore:
                    return await self._review_hunk(file, hunk, pr)

            # gather keeps input order regardless of completion order
            outcomes = await asyncio.gather(*(_bounded(file, hunk) for file, hunk in pairs))

        annotations: List[Annotation] = []
        summary = ""
        for hunk_annotations, fragment in outcomes:
            annotations.extend(hunk_annotations)
            summary += fragment

        if self.metrics is not None:
            self.metrics.record_annotations(len(annotations))
        logger.info(f"Collected {len(annotations)} annotations", extra={"pr_number": pr.number})
        return ReviewResult(annotations=annotations, summary=summary)

    async def _review_hunk(self, file: FileChange, hunk: Hunk, pr: PullRequestContext) -> HunkOutcome:
        hunk_logger = logger.with_context(pr_number=pr.number, file_path=file.path)
        prompt = self.prompt_builder.build(file, hunk, pr)
        result = await self.extractor.extract(prompt)
        if not result.ok:
            hunk_logger.warning(f"No review for hunk {hunk.raw_header!r}: {result.reason}")
            return [], ""
        annotations = build_annotations(file, hunk, result.reply, self.metrics)
        hunk_logger.debug(f"Hunk {hunk.raw_header!r} gave {len(annotations)} annotations")
        return annotations, result.reply.summary
