"""
Unit tests for the Report Renderer.
"""

import pytest

from pr_reviewer.diff.parser import parse_diff
from pr_reviewer.models import Annotation
from pr_reviewer.review.renderer import render_annotation, render_change, render_report


@pytest.fixture
def hunk(sample_diff):
    return parse_diff(sample_diff)[0].hunks[0]


def _annotation(hunk, path="src/app.ts", line=3, comment="Remove debug output.", summary="debug leftover"):
    return Annotation(file_path=path, line_number=line, comment=comment, short_summary=summary, source_hunk=hunk)


def test_render_change_markers(hunk):
    """Context shows both numbers, additions the new one, removals the old one."""
    rendered = [render_change(change) for change in hunk.changes]

    assert rendered[:5] == [
        "  1,1 const a = 1;",
        "- 2 const b = 2;",
        "+ 2 const b = 3;",
        "+ 3 console.log('x');",
        "  3,4 const c = 4;",
    ]


def test_render_annotation_block(hunk):
    block = render_annotation(_annotation(hunk))

    assert block.startswith("#### In file `src/app.ts` on `3`\n")
    assert "*Quick summary* : debug leftover" in block
    assert "\nRemove debug output.\n" in block
    assert "<details>" in block and "</details>" in block
    assert "```diff\n@@ -1,5 +1,6 @@ import x\n  1,1 const a = 1;\n" in block
    assert block.endswith("---")


def test_render_report_keeps_order_and_count(hunk):
    """One block per annotation, in input order, duplicates included."""
    annotations = [
        _annotation(hunk, path="b.py", line=9),
        _annotation(hunk, path="a.py", line=1),
        _annotation(hunk, path="b.py", line=9),
    ]

    report = render_report(annotations)

    assert report.count("#### In file") == 3
    headers = [line for line in report.splitlines() if line.startswith("#### In file")]
    assert headers == [
        "#### In file `b.py` on `9`",
        "#### In file `a.py` on `1`",
        "#### In file `b.py` on `9`",
    ]
    assert "---\n\n#### In file `a.py`" in report


def test_render_report_of_nothing():
    assert render_report([]) == ""


def test_debug_statement_scenario_block():
    diff = "--- a/a.ts\n+++ b/a.ts\n@@ -41,1 +41,2 @@\n const y = 1;\n+console.log('x')\n"
    scenario_hunk = parse_diff(diff)[0].hunks[0]

    report = render_report([_annotation(scenario_hunk, path="a.ts", line=42, comment="Remove debug statement")])

    assert "#### In file `a.ts` on `42`" in report
    assert "+ 42 console.log('x')" in report
