"""API response data models."""

from typing import List, Optional

from pydantic import BaseModel


class PublishResult(BaseModel):
    """Result of comment publishing operation."""

    success: bool
    published_count: int
    failed_count: int
    comment_url: Optional[str] = None
    errors: List[str] = []
