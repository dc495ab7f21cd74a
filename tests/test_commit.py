#!/usr/bin/env python3

import os
import unittest
from unittest import mock

from expecttest import TestCase

from commitmcp.commit import (
    NO_CHANGES_MESSAGE,
    classify_commit_failure,
    create_commit,
    propose_message,
    split_message,
)
from commitmcp.context import ProjectContext
from commitmcp.result import CommitFailureReason, ErrorKind
from commitmcp.testing import RecordingGit

UNSTAGED_ONLY_OUTPUT = """\
On branch main
Changes not staged for commit:
  (use "git add <file>..." to update what will be committed)
  (use "git restore <file>..." to discard changes in working directory)
	modified:   README.md

no changes added to commit (use "git add" and/or "git commit -a")
"""


class InitializedTestCase(TestCase, unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.git = RecordingGit()
        self.context = ProjectContext(git=self.git)
        self.context.path = "/repo"
        self.context.validated = True


class TestSplitMessage(TestCase):
    def test_subject_only(self):
        self.assertEqual(split_message("feat: x\n"), ("feat: x", ""))

    def test_body_keeps_internal_newlines(self):
        subject, body = split_message("feat: x\n\nfirst paragraph\nsecond line\n\nRefs: #1\n")
        self.assertEqual(subject, "feat: x")
        self.assertEqual(body, "first paragraph\nsecond line\n\nRefs: #1")

    def test_blank_body_is_dropped(self):
        self.assertEqual(split_message("fix: y\n\n   \n"), ("fix: y", ""))


class TestClassifyCommitFailure(TestCase):
    def test_unstaged_changes(self):
        self.assertEqual(
            classify_commit_failure(UNSTAGED_ONLY_OUTPUT, add_all=False),
            CommitFailureReason.UNSTAGED_PRESENT,
        )

    def test_unstaged_changes_with_add_all(self):
        self.assertEqual(
            classify_commit_failure(UNSTAGED_ONLY_OUTPUT, add_all=True),
            CommitFailureReason.NOTHING_STAGED,
        )

    def test_clean_tree(self):
        self.assertEqual(
            classify_commit_failure(
                "On branch main\nnothing to commit, working tree clean\n", add_all=False
            ),
            CommitFailureReason.NOTHING_STAGED,
        )

    def test_only_untracked(self):
        self.assertEqual(
            classify_commit_failure(
                "nothing added to commit but untracked files present", add_all=False
            ),
            CommitFailureReason.NOTHING_STAGED,
        )

    def test_missing_identity(self):
        output = "Author identity unknown\n\n*** Please tell me who you are.\n\nRun\n"
        self.assertEqual(
            classify_commit_failure(output, add_all=True),
            CommitFailureReason.MISSING_IDENTITY,
        )

    def test_other(self):
        self.assertEqual(
            classify_commit_failure("fatal: cannot lock ref 'HEAD'", add_all=False),
            CommitFailureReason.OTHER,
        )


class TestCreateCommit(InitializedTestCase):
    async def test_subject_and_body_are_separate_arguments(self):
        message = 'feat(api): add "quoted" $(thing)\n\nBody with `backticks`\nand lines'
        result = await create_commit(self.context, message)
        self.assertFalse(result.is_error)
        self.assertEqual(
            self.git.calls,
            [
                (
                    "commit",
                    (
                        "/repo",
                        'feat(api): add "quoted" $(thing)',
                        "Body with `backticks`\nand lines",
                    ),
                )
            ],
        )

    async def test_success_text(self):
        self.git.commit_stderr = "warning: something\n"
        result = await create_commit(self.context, "fix: thing")
        self.assertExpectedInline(
            result.text,
            """\
Successfully created commit:
[main abc1234] feat: test
 1 file changed

Git Messages:
warning: something""",
        )

    async def test_add_all_stages_before_commit(self):
        await create_commit(self.context, "chore: stage", add_all=True)
        self.assertEqual(self.git.call_names(), ["stage_all", "commit"])

    async def test_without_add_all_nothing_is_staged(self):
        await create_commit(self.context, "chore: no stage")
        self.assertEqual(self.git.call_names(), ["commit"])

    async def test_invalid_header_is_rejected_before_git(self):
        result = await create_commit(self.context, "Add stuff\n\nbody", add_all=True)
        self.assertEqual(result.kind, ErrorKind.COMMIT_HEADER_INVALID)
        self.assertExpectedInline(
            result.text,
            """\
Error: Commit message validation failed. Invalid header format. Expected '<type>(<scope>): <description>' or '<type>!: <description>' or '<type>(<scope>)!: <description>'. Provided message:
---
Add stuff

body
---
To commit anyway, use 'validate: false'.""",
        )
        self.assertEqual(self.git.calls, [])

    async def test_validation_can_be_skipped(self):
        result = await create_commit(self.context, "Add stuff", validate=False)
        self.assertFalse(result.is_error)
        self.assertEqual(self.git.call_names(), ["commit"])

    async def test_unstaged_changes_are_classified(self):
        self.git.fail_with["commit"] = RecordingGit.command_error(stdout=UNSTAGED_ONLY_OUTPUT)
        result = await create_commit(self.context, "feat: x", add_all=False)
        self.assertTrue(result.is_error)
        self.assertEqual(result.kind, ErrorKind.COMMIT_FAILURE)
        self.assertEqual(result.reason, CommitFailureReason.UNSTAGED_PRESENT)
        self.assertIn("addAll: true", result.text)

    async def test_missing_identity_is_classified(self):
        self.git.fail_with["commit"] = RecordingGit.command_error(
            stderr="*** Please tell me who you are.\n"
        )
        result = await create_commit(self.context, "feat: x")
        self.assertEqual(result.reason, CommitFailureReason.MISSING_IDENTITY)
        self.assertIn("git config --global user.name", result.text)

    async def test_other_failure_is_wrapped(self):
        self.git.fail_with["commit"] = RecordingGit.command_error(
            stderr="fatal: unable to write new index file"
        )
        result = await create_commit(self.context, "feat: x")
        self.assertEqual(result.reason, CommitFailureReason.OTHER)
        self.assertTrue(result.text.startswith("Error creating commit: "))
        self.assertIn("unable to write new index file", result.text)

    async def test_unstartable_commit_is_a_commit_failure(self):
        self.git.fail_with["commit"] = ValueError("embedded null byte")
        result = await create_commit(self.context, "feat: x\n\nbody \x00 here")
        self.assertEqual(result.kind, ErrorKind.COMMIT_FAILURE)
        self.assertEqual(result.reason, CommitFailureReason.OTHER)
        self.assertEqual(result.text, "Error creating commit: embedded null byte")

    async def test_stage_failure_stops_before_commit(self):
        self.git.fail_with["stage_all"] = RecordingGit.command_error(
            stderr="fatal: Unable to create '.git/index.lock': File exists."
        )
        result = await create_commit(self.context, "feat: x", add_all=True)
        self.assertEqual(result.kind, ErrorKind.COMMIT_FAILURE)
        self.assertEqual(self.git.call_names(), ["stage_all"])


class TestProposeMessage(InitializedTestCase):
    def setUp(self):
        super().setUp()
        patcher = mock.patch.dict(os.environ, {"MCP_COMMIT_PROMPT": ""})
        patcher.start()
        self.addCleanup(patcher.stop)

    async def test_no_changes(self):
        result = await propose_message(self.context)
        self.assertFalse(result.is_error)
        self.assertEqual(result.text, NO_CHANGES_MESSAGE)

    async def test_diff_failure(self):
        self.git.fail_with["staged_diff"] = RuntimeError("fatal: not a git repository")
        with self.assertLogs(level="ERROR"):
            result = await propose_message(self.context)
        self.assertEqual(result.kind, ErrorKind.DIFF_FAILURE)
        self.assertExpectedInline(
            result.text, """Error retrieving git diff: fatal: not a git repository"""
        )

    async def test_template_is_filled(self):
        self.git.untracked = ["new.py"]
        os.environ["MCP_COMMIT_PROMPT"] = "Scope: {scope_instruction}\nDiff:\n{diff}"
        result = await propose_message(self.context, scope="cli")
        self.assertExpectedInline(
            result.text,
            """\
Scope: Use the provided scope "cli".
Diff:
=== UNTRACKED FILES ===
new.py""",
        )

    async def test_default_template_without_scope(self):
        self.git.unstaged = "-a\n+b"
        with mock.patch("commitmcp.prompt.get_prompt_template", return_value=None):
            result = await propose_message(self.context)
        self.assertIn("Determine an appropriate scope", result.text)
        self.assertTrue(result.text.endswith("=== UNSTAGED CHANGES ===\n-a\n+b\n"))
        self.assertNotIn("{diff}", result.text)


if __name__ == "__main__":
    unittest.main()
