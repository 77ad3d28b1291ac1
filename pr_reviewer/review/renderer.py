"""
Report Renderer.

Formats annotations as the GitHub Markdown body of the review comment.
"""

from typing import Sequence

from pr_reviewer.models import Annotation, Hunk, LineChange, LineChangeKind


def render_change(change: LineChange) -> str:
    """
    Render one hunk line for the collapsible excerpt.

    Context lines show both line numbers, added lines the new one and
    removed lines the old one.
    """
    if change.kind is LineChangeKind.ADDED:
        return f"+ {change.new_line_number} {change.text}"
    if change.kind is LineChangeKind.REMOVED:
        return f"- {change.old_line_number} {change.text}"
    return f"  {change.old_line_number},{change.new_line_number} {change.text}"


def render_hunk(hunk: Hunk) -> str:
    lines = [hunk.raw_header]
    lines.extend(render_change(change) for change in hunk.changes)
    return "\n".join(lines)


def render_annotation(annotation: Annotation) -> str:
    """Render one annotation as a self-contained Markdown block."""
    return "\n".join([
        f"#### In file `{annotation.file_path}` on `{annotation.line_number}`",
        "",
        f"*Quick summary* : {annotation.short_summary}",
        "",
        annotation.comment,
        "",
        "<details>",
        "     <summary>Expand</summary> <br>",
        "",
        "```diff",
        render_hunk(annotation.source_hunk),
        "```",
        "</details>",
        "",
        "---",
    ])


def render_report(annotations: Sequence[Annotation]) -> str:
    """
    Concatenate annotation blocks in the given order.

    Returns an empty string when there is nothing to report.
    """
    return "\n\n".join(render_annotation(annotation) for annotation in annotations)
