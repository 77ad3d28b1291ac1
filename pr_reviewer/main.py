"""
Process entry point.

Exit status is 0 when the run finished (including runs that had nothing to
review) and 1 when it could not complete.
"""

import asyncio
import sys

from pydantic import ValidationError

from pr_reviewer.agents.review_agent import ReviewAgent
from pr_reviewer.config import Settings
from pr_reviewer.utils.logging import get_logger, log_error_with_context, setup_logging

logger = get_logger(__name__)


def main() -> int:
    """Load settings, run one review and map the outcome to an exit code."""
    try:
        settings = Settings()
    except ValidationError as e:
        setup_logging()
        log_error_with_context(logger, "Invalid configuration", e)
        return 1

    setup_logging(settings.log_level)

    try:
        state = asyncio.run(ReviewAgent(settings).execute())
    except Exception as e:
        log_error_with_context(logger, "Review run failed", e)
        return 1

    logger.info(
        "Review run finished",
        extra={"phase": state["phase"], "skip_reason": state.get("skip_reason")},
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
