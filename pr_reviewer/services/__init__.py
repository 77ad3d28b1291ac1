"""External collaborators: GitHub access and path filtering."""

from pr_reviewer.services.github_client import (
    EventPayloadError,
    GitHubClient,
    GitHubClientError,
    PermanentError,
    TransientError,
    load_pr_event,
)
from pr_reviewer.services.path_filter import PathFilter

__all__ = [
    'EventPayloadError',
    'GitHubClient',
    'GitHubClientError',
    'PermanentError',
    'TransientError',
    'load_pr_event',
    'PathFilter',
]
