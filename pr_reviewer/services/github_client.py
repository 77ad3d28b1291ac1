"""
GitHub integration.

Reads the workflow event payload, fetches pull request metadata and diffs,
and posts the review as a single issue comment. Calls are made once; there
is no retry layer.
"""

import json
import time
from pathlib import Path
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from pr_reviewer.models import PREvent, PublishResult, PullRequestContext
from pr_reviewer.utils.logging import get_logger, log_api_call

logger = get_logger(__name__)

DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"
JSON_MEDIA_TYPE = "application/vnd.github+json"


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""
    pass


class TransientError(GitHubClientError):
    """Server-side or network failure that may not recur."""
    pass


class PermanentError(GitHubClientError):
    """Request GitHub rejected (auth, permissions, not found, validation)."""
    pass


class EventPayloadError(GitHubClientError):
    """The workflow event payload is missing or lacks pull request fields."""
    pass


def load_pr_event(event_path: Optional[str]) -> PREvent:
    """
    Read the pull request event payload GitHub Actions writes to disk.

    Args:
        event_path: Value of GITHUB_EVENT_PATH

    Returns:
        PREvent with action, repository coordinates and PR number

    Raises:
        EventPayloadError: If the file is missing, unreadable or incomplete
    """
    if not event_path:
        raise EventPayloadError("GITHUB_EVENT_PATH is not set")

    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise EventPayloadError(f"Could not read event payload {event_path}: {e}") from e

    try:
        repository = payload["repository"]
        number = payload.get("number") or payload["pull_request"]["number"]
        return PREvent(
            action=payload.get("action", ""),
            owner=repository["owner"]["login"],
            repo=repository["name"],
            number=number,
            before=payload.get("before"),
            after=payload.get("after"),
        )
    except (KeyError, TypeError, ValidationError) as e:
        raise EventPayloadError(f"Event payload has no pull request data: missing {e}") from e


class GitHubClient:
    """
    Thin async client over the GitHub REST API.

    Covers the calls a review run needs:
    - Pull request title and description
    - Unified diff of a whole pull request
    - Unified diff between two commits
    - Posting an issue comment on the pull request
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            token: GitHub token with pull request read and issue write access
            base_url: API root, overridable for GitHub Enterprise
            timeout: Per-request timeout in seconds
            transport: Custom httpx transport (tests pass httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": JSON_MEDIA_TYPE,
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        """
        Perform one request and classify failures.

        Raises:
            PermanentError: On 4xx responses
            TransientError: On 5xx responses and network errors
        """
        start_time = time.time()
        try:
            response = await self._client.request(method, endpoint, **kwargs)
        except httpx.HTTPError as e:
            log_api_call(
                logger,
                service="github",
                endpoint=endpoint,
                method=method,
                duration_ms=(time.time() - start_time) * 1000,
                error=str(e) or type(e).__name__,
            )
            raise TransientError(f"{method} {endpoint} failed: {e}") from e

        duration_ms = (time.time() - start_time) * 1000
        if response.is_error:
            message = f"{method} {endpoint} returned {response.status_code}: {response.text[:200]}"
            log_api_call(
                logger,
                service="github",
                endpoint=endpoint,
                method=method,
                status_code=response.status_code,
                duration_ms=duration_ms,
                error=message,
            )
            if response.status_code >= 500:
                raise TransientError(message)
            raise PermanentError(message)

        log_api_call(
            logger,
            service="github",
            endpoint=endpoint,
            method=method,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        return response

    async def get_pr_context(self, event: PREvent) -> PullRequestContext:
        """
        Fetch title and description for the pull request in the event.

        Args:
            event: Parsed workflow event

        Returns:
            PullRequestContext; a null title or body becomes ""
        """
        response = await self._request("GET", f"/repos/{event.owner}/{event.repo}/pulls/{event.number}")
        data = response.json()
        context = PullRequestContext(
            owner=event.owner,
            repo=event.repo,
            number=event.number,
            title=data.get("title") or "",
            description=data.get("body") or "",
        )
        logger.info(f"Retrieved PR metadata: {context.title}", extra={"pr_number": event.number})
        return context

    async def get_pr_diff(self, owner: str, repo: str, number: int) -> Optional[str]:
        """
        Fetch the unified diff of a whole pull request.

        Returns:
            Diff text, or None when GitHub returns an empty body
        """
        response = await self._request(
            "GET",
            f"/repos/{owner}/{repo}/pulls/{number}",
            headers={"Accept": DIFF_MEDIA_TYPE},
        )
        return response.text or None

    async def compare_diff(self, owner: str, repo: str, base: str, head: str) -> Optional[str]:
        """
        Fetch the unified diff between two commits.

        Returns:
            Diff text, or None when the commits do not differ
        """
        response = await self._request(
            "GET",
            f"/repos/{owner}/{repo}/compare/{base}...{head}",
            headers={"Accept": DIFF_MEDIA_TYPE},
        )
        return response.text or None

    async def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> PublishResult:
        """
        Post ``body`` as one comment on the pull request conversation.

        Failures are reported in the PublishResult rather than raised.
        """
        logger.info(f"Publishing review comment to PR {issue_number}", extra={"pr_number": issue_number})
        try:
            response = await self._request(
                "POST",
                f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
                json={"body": body},
            )
        except GitHubClientError as e:
            logger.error(f"Failed to publish review comment: {e}", extra={"pr_number": issue_number})
            return PublishResult(success=False, published_count=0, failed_count=1, errors=[str(e)])

        return PublishResult(
            success=True,
            published_count=1,
            failed_count=0,
            comment_url=response.json().get("html_url"),
        )
