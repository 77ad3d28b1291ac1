"""
Prompt construction for hunk reviews.

The instructions pin the JSON shape the model must answer with; the field
names here are the ones AnnotationExtractor validates against.
"""

from typing import List

from pr_reviewer.diff.parser import format_change
from pr_reviewer.models import FileChange, Hunk, PullRequestContext

RESPONSE_FORMAT = (
    '{"reviews": [{"lineNumber":  <line_number>, "reviewComment": "<review comment>",'
    '"quickSummary": "<quick summary>"}],"summary": "<summary>"}'
)

BASE_INSTRUCTIONS = [
    f"Provide the response in following JSON format:  {RESPONSE_FORMAT}",
    "Do not give positive comments or compliments.",
    'Provide comments and suggestions ONLY if there is something to improve, otherwise "reviews" '
    'should be an empty array and "summary" should be in markdown table with escape properly.',
    "Write the comment in GitHub Markdown format.",
    "Use the given description only for the overall context and only comment the code.",
    "IMPORTANT: NEVER suggest adding comments to the code.",
    "IMPORTANT: add escape characters for all quotes in the review comment.",
]


class PromptBuilder:
    """Builds the review request for one hunk of one file."""

    def __init__(self, extra_instructions: str = ""):
        """
        Args:
            extra_instructions: Free-form text appended to the fixed instructions
        """
        self.extra_instructions = extra_instructions.strip()

    def build(self, file: FileChange, hunk: Hunk, pr: PullRequestContext) -> str:
        """
        Build the prompt for a hunk.

        Every line of the hunk is listed as ``<line number> <diff line>`` where
        the number is the new-file line when the line exists there and the
        old-file line otherwise. Review entries are anchored to these numbers.

        Args:
            file: File the hunk belongs to
            hunk: Hunk to review
            pr: Pull request title and description for context

        Returns:
            Prompt text
        """
        instructions = list(BASE_INSTRUCTIONS)
        if self.extra_instructions:
            instructions.append(self.extra_instructions)

        parts: List[str] = ["Your task is to review pull requests. Instructions:"]
        parts.extend(f"- {instruction}" for instruction in instructions)
        parts.append(
            f'Review the following code diff in the file "{file.path}" and take the pull request '
            "title and description into account when writing the response."
        )
        parts.extend([
            "",
            f"Pull request title: {pr.title}",
            "Pull request description:",
            "",
            "---",
            pr.description,
            "---",
            "",
            "Git diff to review:",
            "",
            "```diff",
            hunk.raw_header,
        ])
        parts.extend(
            f"{change.canonical_line_number} {format_change(change)}" for change in hunk.changes
        )
        parts.append("```")
        return "\n".join(parts) + "\n"


def build_prompt(
    file: FileChange,
    hunk: Hunk,
    pr: PullRequestContext,
    extra_instructions: str = "",
) -> str:
    """Shortcut for PromptBuilder(extra_instructions).build(file, hunk, pr)."""
    return PromptBuilder(extra_instructions).build(file, hunk, pr)
