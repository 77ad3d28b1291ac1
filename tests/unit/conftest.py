"""
Shared fixtures for unit tests.
"""

import os
from unittest.mock import patch

import pytest

from pr_reviewer.config import Settings
from pr_reviewer.models import PullRequestContext


SAMPLE_DIFF = "\n".join([
    "diff --git a/src/app.ts b/src/app.ts",
    "index 83db48f..bf269f4 100644",
    "--- a/src/app.ts",
    "+++ b/src/app.ts",
    "@@ -1,5 +1,6 @@ import x",
    " const a = 1;",
    "-const b = 2;",
    "+const b = 3;",
    "+console.log('x');",
    " const c = 4;",
    " ",
    " export { a };",
    "@@ -20,2 +21,3 @@ function run() {",
    " run();",
    "+stop();",
    " done();",
    "diff --git a/old.txt b/old.txt",
    "deleted file mode 100644",
    "index e69de29..0000000",
    "--- a/old.txt",
    "+++ /dev/null",
    "@@ -1,2 +0,0 @@",
    "-line one",
    "-line two",
    "diff --git a/new.py b/new.py",
    "new file mode 100644",
    "index 0000000..e69de29",
    "--- /dev/null",
    "+++ b/new.py",
    "@@ -0,0 +1,2 @@",
    "+print('hi')",
    "+x = 1",
    "",
])


@pytest.fixture
def sample_diff():
    """Three-file diff: an edit with two hunks, a deletion and an addition."""
    return SAMPLE_DIFF


@pytest.fixture
def pr_context():
    """Pull request metadata used in prompts."""
    return PullRequestContext(
        owner="octo",
        repo="hello",
        number=7,
        title="Tidy startup",
        description="Removes the second constant.",
    )


@pytest.fixture
def make_settings():
    """Build Settings from explicit values, ignoring the surrounding environment."""
    def _make(**overrides):
        values = {"github_token": "gh-token", "openai_api_key": "sk-test"}
        values.update(overrides)
        with patch.dict(os.environ, {}, clear=True):
            return Settings(_env_file=None, **values)
    return _make
