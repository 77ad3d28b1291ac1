"""Pull request event data models."""

from typing import Optional

from pydantic import BaseModel


class PREvent(BaseModel):
    """Subset of the workflow event payload the bot acts on."""

    action: str
    owner: str
    repo: str
    number: int
    # Only present on 'synchronize' events
    before: Optional[str] = None
    after: Optional[str] = None


class PullRequestContext(BaseModel):
    """Pull request metadata embedded in every prompt."""

    owner: str
    repo: str
    number: int
    title: str = ""
    description: str = ""
