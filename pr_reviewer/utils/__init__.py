"""
Utility modules for the PR review bot.
"""

from pr_reviewer.utils.logging import (
    get_logger,
    setup_logging,
    log_phase_transition,
    log_api_call,
    log_error_with_context,
)
from pr_reviewer.utils.metrics import MetricsCollector

__all__ = [
    "get_logger",
    "setup_logging",
    "log_phase_transition",
    "log_api_call",
    "log_error_with_context",
    "MetricsCollector",
]
