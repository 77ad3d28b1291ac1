"""Diff-to-annotation review pipeline."""

from pr_reviewer.review.aggregator import AnnotationAggregator, build_annotations
from pr_reviewer.review.extractor import (
    AnnotationExtractor,
    LLMClient,
    parse_line_number,
    parse_reply,
    supports_json_mode,
)
from pr_reviewer.review.prompt_builder import PromptBuilder, build_prompt
from pr_reviewer.review.renderer import render_annotation, render_report

__all__ = [
    "AnnotationAggregator",
    "build_annotations",
    "AnnotationExtractor",
    "LLMClient",
    "parse_line_number",
    "parse_reply",
    "supports_json_mode",
    "PromptBuilder",
    "build_prompt",
    "render_annotation",
    "render_report",
]
