"""
Review Agent component.

LangGraph-orchestrated driver for one review run: read the triggering event,
fetch the diff, parse and filter it, collect annotations from the LLM and
publish the rendered report.
"""

from typing import List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from pr_reviewer.config import Settings
from pr_reviewer.diff.parser import parse_diff
from pr_reviewer.models import (
    FileChange,
    PREvent,
    PublishResult,
    PullRequestContext,
    ReviewResult,
)
from pr_reviewer.review.aggregator import AnnotationAggregator
from pr_reviewer.review.extractor import AnnotationExtractor, LLMClient
from pr_reviewer.review.prompt_builder import PromptBuilder
from pr_reviewer.review.renderer import render_report
from pr_reviewer.services.github_client import GitHubClient, load_pr_event
from pr_reviewer.services.path_filter import PathFilter
from pr_reviewer.utils.logging import get_logger, log_phase_transition
from pr_reviewer.utils.metrics import MetricsCollector

logger = get_logger(__name__)


class ReviewAgentState(TypedDict):
    """State schema for Review Agent."""
    event: Optional[PREvent]
    pr_context: Optional[PullRequestContext]
    diff_text: Optional[str]
    files: List[FileChange]
    result: Optional[ReviewResult]
    publish_result: Optional[PublishResult]
    skip_reason: Optional[str]
    errors: List[str]
    phase: str


class ReviewAgent:
    """Runs the review workflow for the pull request in the workflow event."""

    def __init__(
        self,
        settings: Settings,
        github_client: Optional[GitHubClient] = None,
        llm_client: Optional[LLMClient] = None,
    ):
        """
        Initialize Review Agent.

        Args:
            settings: Application settings
            github_client: GitHub client (built from settings if omitted)
            llm_client: LLM client (built from settings if omitted)
        """
        self.settings = settings
        self.github = github_client or GitHubClient(
            token=settings.github_token,
            base_url=settings.github_api_url,
            timeout=settings.http_timeout_seconds,
        )
        self.metrics = MetricsCollector()
        self.path_filter = PathFilter(settings.exclude_patterns)
        self.aggregator = AnnotationAggregator(
            prompt_builder=PromptBuilder(settings.prompt),
            extractor=AnnotationExtractor(llm_client or LLMClient(settings), self.metrics),
            max_workers=settings.max_workers,
            metrics=self.metrics,
        )

        self.graph = self._build_state_graph()

    def _build_state_graph(self):
        """
        Build the LangGraph state graph for the review workflow.

        Returns:
            Compiled graph
        """
        workflow = StateGraph(ReviewAgentState)

        workflow.add_node("load_event", self._load_event_node)
        workflow.add_node("retrieve_diff", self._retrieve_diff_node)
        workflow.add_node("parse_diff", self._parse_diff_node)
        workflow.add_node("analyze", self._analyze_node)
        workflow.add_node("publish", self._publish_node)

        workflow.set_entry_point("load_event")
        workflow.add_edge("load_event", "retrieve_diff")
        workflow.add_conditional_edges(
            "retrieve_diff",
            self._route_after_diff,
            {"continue": "parse_diff", "end": END},
        )
        workflow.add_edge("parse_diff", "analyze")
        workflow.add_edge("analyze", "publish")
        workflow.add_edge("publish", END)

        return workflow.compile()

    async def execute(self) -> ReviewAgentState:
        """
        Execute the review workflow.

        Returns:
            Final state

        Raises:
            Exception: Anything that breaks the run outside the per-hunk
                review loop (event payload, PR metadata, diff retrieval)
        """
        self.metrics.start()

        initial_state: ReviewAgentState = {
            "event": None,
            "pr_context": None,
            "diff_text": None,
            "files": [],
            "result": None,
            "publish_result": None,
            "skip_reason": None,
            "errors": [],
            "phase": "load_event",
        }

        async with self.github:
            try:
                final_state = await self.graph.ainvoke(initial_state)
            except Exception as e:
                self.metrics.complete(status="failed", error_message=str(e))
                raise

        if final_state.get("skip_reason"):
            self.metrics.complete(status="skipped")
        elif final_state["errors"]:
            self.metrics.complete(status="failed", error_message="; ".join(final_state["errors"]))
        else:
            self.metrics.complete(status="completed")
        return final_state

    async def _load_event_node(self, state: ReviewAgentState) -> ReviewAgentState:
        """
        Load event node: read the event payload and fetch PR metadata.
        """
        log_phase_transition(logger, None, "load_event", "started")
        state["phase"] = "load_event"

        event = load_pr_event(self.settings.github_event_path)
        state["event"] = event
        state["pr_context"] = await self.github.get_pr_context(event)

        self.metrics.pr_number = event.number
        self.metrics.repository = f"{event.owner}/{event.repo}"

        log_phase_transition(logger, event.number, "load_event", "completed")
        return state

    async def _retrieve_diff_node(self, state: ReviewAgentState) -> ReviewAgentState:
        """
        Retrieve diff node: fetch the diff that matches the event action.

        'opened' reviews the whole pull request, 'synchronize' only the
        commits pushed since the previous head.
        """
        event = state["event"]
        log_phase_transition(logger, event.number, "retrieve_diff", "started")
        state["phase"] = "retrieve_diff"

        if event.action == "opened":
            diff_text = await self.github.get_pr_diff(event.owner, event.repo, event.number)
        elif event.action == "synchronize" and event.before and event.after:
            diff_text = await self.github.compare_diff(event.owner, event.repo, event.before, event.after)
        else:
            logger.info(
                f"Unsupported event: {self.settings.github_event_name or 'unknown'} "
                f"(action {event.action!r})",
                extra={"pr_number": event.number},
            )
            state["skip_reason"] = "unsupported_event"
            return state

        if not diff_text:
            logger.info("No diff found", extra={"pr_number": event.number})
            state["skip_reason"] = "no_diff"
            return state

        state["diff_text"] = diff_text
        log_phase_transition(logger, event.number, "retrieve_diff", "completed")
        return state

    def _route_after_diff(self, state: ReviewAgentState) -> str:
        return "end" if state.get("skip_reason") else "continue"

    async def _parse_diff_node(self, state: ReviewAgentState) -> ReviewAgentState:
        """
        Parse diff node: parse the diff and apply exclusion patterns.
        """
        event = state["event"]
        log_phase_transition(logger, event.number, "parse_diff", "started")
        state["phase"] = "parse_diff"

        files = parse_diff(state["diff_text"])
        state["files"] = self.path_filter.filter(files)
        logger.info(
            f"Parsed {len(files)} files, {len(state['files'])} left after exclusions",
            extra={"pr_number": event.number},
        )

        log_phase_transition(logger, event.number, "parse_diff", "completed")
        return state

    async def _analyze_node(self, state: ReviewAgentState) -> ReviewAgentState:
        """
        Analyze node: collect annotations for every hunk.
        """
        event = state["event"]
        log_phase_transition(logger, event.number, "analyze", "started")
        state["phase"] = "analyze"

        result = await self.aggregator.aggregate(state["files"], state["pr_context"])
        state["result"] = result
        if result.summary:
            logger.info("Review summary", extra={"pr_number": event.number, "summary": result.summary})

        log_phase_transition(logger, event.number, "analyze", "completed")
        return state

    async def _publish_node(self, state: ReviewAgentState) -> ReviewAgentState:
        """
        Publish node: post the rendered report when there is anything to say.
        """
        event = state["event"]
        log_phase_transition(logger, event.number, "publish", "started")
        state["phase"] = "publish"

        annotations = state["result"].annotations
        if annotations:
            body = render_report(annotations)
            publish_result = await self.github.create_issue_comment(
                event.owner, event.repo, event.number, body
            )
            state["publish_result"] = publish_result
            if not publish_result.success:
                state["errors"].extend(publish_result.errors)
            else:
                logger.info(
                    f"Published review with {len(annotations)} annotations",
                    extra={"pr_number": event.number, "comment_url": publish_result.comment_url},
                )
        else:
            logger.info("No comments to publish", extra={"pr_number": event.number})

        state["phase"] = "complete"
        log_phase_transition(logger, event.number, "publish", "completed")
        return state
