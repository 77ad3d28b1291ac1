"""
Per-run metrics for a review.

Tracks:
- Run duration
- Files and hunks reviewed
- LLM calls, failures and their latency
- Review entries dropped for unusable line numbers
- Annotations produced

The collector has no backend; ``complete`` emits everything as one log line.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any

from pr_reviewer.utils.logging import get_logger

logger = get_logger(__name__)


class MetricsCollector:
    """Collects counters and timings during one review run."""

    def __init__(self, pr_number: Optional[int] = None, repository: Optional[str] = None):
        self.pr_number = pr_number
        self.repository = repository

        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.duration_ms: Optional[int] = None

        self.files_reviewed: int = 0
        self.hunks_reviewed: int = 0
        self.llm_calls: int = 0
        self.llm_failures: int = 0
        self.dropped_entries: int = 0
        self.annotations_count: int = 0
        self.llm_latencies: list[float] = []

        self.status: str = "running"
        self.error_message: Optional[str] = None

    def start(self) -> None:
        """Mark run start."""
        self.start_time = datetime.now(timezone.utc)
        self.status = "running"

    def complete(self, status: str = "completed", error_message: Optional[str] = None) -> None:
        """
        Mark run completion and emit the collected metrics.

        Args:
            status: Final status ('completed', 'skipped', 'failed')
            error_message: Error message if failed
        """
        self.end_time = datetime.now(timezone.utc)
        self.status = status
        self.error_message = error_message

        if self.start_time:
            duration = (self.end_time - self.start_time).total_seconds()
            self.duration_ms = int(duration * 1000)

        logger.info("Review metrics", extra=self.get_metrics_summary())

    def record_file(self) -> None:
        self.files_reviewed += 1

    def record_llm_call(self, duration_ms: float, success: bool) -> None:
        """
        Record one LLM round trip for a hunk.

        Args:
            duration_ms: Call duration in milliseconds
            success: Whether a usable reply came back
        """
        self.hunks_reviewed += 1
        self.llm_calls += 1
        self.llm_latencies.append(duration_ms)
        if not success:
            self.llm_failures += 1

    def record_dropped_entries(self, count: int) -> None:
        self.dropped_entries += count

    def record_annotations(self, count: int) -> None:
        self.annotations_count += count

    def get_metrics_summary(self) -> Dict[str, Any]:
        """
        Get summary of collected metrics.

        Returns:
            Dictionary of metrics
        """
        summary = {
            "pr_number": self.pr_number,
            "repository": self.repository,
            "status": self.status,
            "duration_ms": self.duration_ms,
            "files_reviewed": self.files_reviewed,
            "hunks_reviewed": self.hunks_reviewed,
            "llm_calls": self.llm_calls,
            "llm_failures": self.llm_failures,
            "dropped_entries": self.dropped_entries,
            "annotations_count": self.annotations_count,
        }

        if self.llm_latencies:
            summary["llm_latency"] = {
                "min_ms": round(min(self.llm_latencies), 2),
                "max_ms": round(max(self.llm_latencies), 2),
                "avg_ms": round(sum(self.llm_latencies) / len(self.llm_latencies), 2),
            }

        if self.error_message:
            summary["error_message"] = self.error_message

        return summary
