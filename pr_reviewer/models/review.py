"""Review reply and annotation data models."""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .diff import Hunk


class ReviewEntry(BaseModel):
    """One entry of the ``reviews`` array returned by the LLM."""

    model_config = ConfigDict(populate_by_name=True)

    # Left untyped: the model may answer with a number or a string, and
    # coercion happens explicitly in parse_line_number().
    line_number: Any = Field(..., alias="lineNumber")
    review_comment: str = Field(..., alias="reviewComment")
    quick_summary: str = Field("", alias="quickSummary")


class ReviewReply(BaseModel):
    """JSON object the LLM is instructed to answer with."""

    reviews: List[ReviewEntry]
    summary: str = ""


class ExtractionResult(BaseModel):
    """Outcome of one LLM round trip: a parsed reply or the reason it failed."""

    ok: bool
    reply: Optional[ReviewReply] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, reply: ReviewReply) -> "ExtractionResult":
        return cls(ok=True, reply=reply)

    @classmethod
    def failure(cls, reason: str) -> "ExtractionResult":
        return cls(ok=False, reason=reason)


class Annotation(BaseModel):
    """Review feedback anchored to one line of one file."""

    file_path: str
    line_number: int
    comment: str
    short_summary: str
    source_hunk: Hunk


class ReviewResult(BaseModel):
    """Everything a run produced, in discovery order."""

    annotations: List[Annotation] = []
    summary: str = ""
