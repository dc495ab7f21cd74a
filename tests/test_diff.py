#!/usr/bin/env python3

import unittest

from expecttest import TestCase

from commitmcp.diff import DiffChanges, DiffEmpty, DiffFailure, get_diff, render_diff
from commitmcp.testing import RecordingGit

STAGED = """\
diff --git a/a.txt b/a.txt
index 0000000..1111111 100644
--- a/a.txt
+++ b/a.txt
@@ -1 +1 @@
-old
+new
"""


class TestRenderDiff(TestCase):
    def test_all_sections(self):
        text = render_diff(STAGED, "\n  unstaged hunk  \n", ["new.txt", "", "  ", "dir/other.txt"])
        self.assertExpectedInline(
            text,
            """\
=== STAGED CHANGES ===
diff --git a/a.txt b/a.txt
index 0000000..1111111 100644
--- a/a.txt
+++ b/a.txt
@@ -1 +1 @@
-old
+new

=== UNSTAGED CHANGES ===
unstaged hunk

=== UNTRACKED FILES ===
new.txt
dir/other.txt""",
        )

    def test_untracked_names_keep_their_whitespace(self):
        self.assertEqual(
            render_diff("", "", [" lead.txt", "trail.txt "]),
            "=== UNTRACKED FILES ===\n lead.txt\ntrail.txt ",
        )

    def test_blank_sections_are_omitted(self):
        self.assertEqual(render_diff("  \n", "\n", ["", " "]), "")


class TestGetDiff(TestCase, unittest.IsolatedAsyncioTestCase):
    async def test_no_changes(self):
        result = await get_diff(RecordingGit(), "/repo")
        self.assertEqual(result, DiffEmpty())

    async def test_untracked_only_counts_as_changes(self):
        result = await get_diff(RecordingGit(untracked=["notes.md"]), "/repo")
        self.assertEqual(result, DiffChanges("=== UNTRACKED FILES ===\nnotes.md"))

    async def test_unstaged_only(self):
        result = await get_diff(RecordingGit(unstaged="-a\n+b\n"), "/repo")
        self.assertIsInstance(result, DiffChanges)
        self.assertTrue(result.text.startswith("=== UNSTAGED CHANGES ==="))
        self.assertNotIn("=== STAGED CHANGES ===", result.text)

    async def test_all_reads_go_to_the_same_directory(self):
        git = RecordingGit()
        await get_diff(git, "/repo")
        self.assertEqual(
            sorted(git.call_names()), ["staged_diff", "unstaged_diff", "untracked_files"]
        )
        self.assertTrue(all(args == ("/repo",) for _, args in git.calls))

    async def test_failure_is_not_partial(self):
        git = RecordingGit(staged=STAGED, untracked=["x"])
        git.fail_with["unstaged_diff"] = RuntimeError("fatal: bad index")
        with self.assertLogs(level="ERROR"):
            result = await get_diff(git, "/repo")
        self.assertEqual(result, DiffFailure("fatal: bad index"))

    async def test_first_failure_wins(self):
        git = RecordingGit()
        git.fail_with["untracked_files"] = RuntimeError("third")
        git.fail_with["staged_diff"] = RuntimeError("first")
        with self.assertLogs(level="ERROR"):
            result = await get_diff(git, "/repo")
        self.assertEqual(result, DiffFailure("first"))


if __name__ == "__main__":
    unittest.main()
