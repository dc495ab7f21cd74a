#!/usr/bin/env python3

import logging
from typing import Optional, Tuple

from .context import ProjectContext
from .conventional import validate_header
from .diff import DiffEmpty, DiffFailure, get_diff
from .prompt import get_commit_prompt, render_prompt
from .result import CommitFailureReason, ErrorKind, ToolResult
from .shell import GitCommandError

__all__ = [
    "NO_CHANGES_MESSAGE",
    "classify_commit_failure",
    "create_commit",
    "propose_message",
    "split_message",
]

log = logging.getLogger(__name__)

NO_CHANGES_MESSAGE = "No changes detected to generate a commit message prompt for."

FAILURE_MESSAGES = {
    CommitFailureReason.NOTHING_STAGED: (
        "Error: No changes were staged for commit. Use 'addAll: true' or stage "
        "files manually before committing."
    ),
    CommitFailureReason.MISSING_IDENTITY: (
        "Error: Git user identity (name and email) is not configured. Please "
        "configure it using 'git config --global user.name \"Your Name\"' and "
        "'git config --global user.email \"your.email@example.com\"'."
    ),
    CommitFailureReason.UNSTAGED_PRESENT: (
        "Error: There are unstaged changes. Use 'addAll: true' to include them "
        "or stage them manually before committing."
    ),
}


async def propose_message(context: ProjectContext, scope: Optional[str] = None) -> ToolResult:
    """Build a prompt asking a language model for a commit message.

    Args:
        context: The current project
        scope: Optional Conventional Commits scope to request

    Returns:
        The filled prompt, a "no changes" notice, or an error
    """
    path = context.repository_path
    if path is None:
        return context.not_initialized()

    diff = await get_diff(context.git, path)
    if isinstance(diff, DiffEmpty):
        return ToolResult.success(NO_CHANGES_MESSAGE)
    if isinstance(diff, DiffFailure):
        return ToolResult.error(
            ErrorKind.DIFF_FAILURE, f"Error retrieving git diff: {diff.reason}"
        )

    return ToolResult.success(render_prompt(get_commit_prompt(), diff.text, scope))


def split_message(message: str) -> Tuple[str, str]:
    """Split a commit message into its subject line and body.

    The body keeps its internal newlines; blank lines around it are dropped.
    """
    lines = message.strip().split("\n")
    subject = lines[0].strip()
    body = "\n".join(lines[1:]).strip("\n")
    if not body.strip():
        body = ""
    return subject, body


def classify_commit_failure(output: str, add_all: bool) -> CommitFailureReason:
    """Work out why ``git commit`` failed from its output.

    Args:
        output: Combined stdout and stderr of the failed command
        add_all: Whether the caller asked for all changes to be staged

    Returns:
        The failure category
    """
    lowered = output.lower()
    if "please tell me who you are" in lowered:
        return CommitFailureReason.MISSING_IDENTITY
    if "changes not staged for commit" in lowered and not add_all:
        return CommitFailureReason.UNSTAGED_PRESENT
    if (
        "nothing to commit" in lowered
        or "nothing added to commit" in lowered
        or "no changes added to commit" in lowered
    ):
        return CommitFailureReason.NOTHING_STAGED
    return CommitFailureReason.OTHER


async def create_commit(
    context: ProjectContext,
    message: str,
    add_all: bool = False,
    validate: bool = True,
) -> ToolResult:
    """Commit the staged changes (optionally staging everything first).

    Args:
        context: The current project
        message: The full commit message
        add_all: Stage all changes with ``git add -A`` before committing
        validate: Reject messages whose header is not a Conventional Commit

    Returns:
        A confirmation including git's output, or a classified error
    """
    path = context.repository_path
    if path is None:
        return context.not_initialized()

    if validate:
        header = validate_header(message)
        if not header.is_valid:
            return ToolResult.error(
                ErrorKind.COMMIT_HEADER_INVALID,
                f"Error: Commit message validation failed. {header.error} "
                f"Provided message:\n---\n{message}\n---\n"
                "To commit anyway, use 'validate: false'.",
            )

    subject, body = split_message(message)

    try:
        if add_all:
            await context.git.stage_all(path)
        result = await context.git.commit(path, subject, body)
    except GitCommandError as e:
        reason = classify_commit_failure(e.output, add_all)
        log.info(f"Commit failed in {path}: {reason.value}")
        text = FAILURE_MESSAGES.get(reason)
        if text is None:
            text = f"Error creating commit: {e}"
        return ToolResult.error(ErrorKind.COMMIT_FAILURE, text, reason=reason)
    except ValueError as e:
        # Raised before git starts, e.g. for a NUL byte in the message
        log.info(f"Commit could not be started in {path}: {e}")
        return ToolResult.error(
            ErrorKind.COMMIT_FAILURE,
            f"Error creating commit: {e}",
            reason=CommitFailureReason.OTHER,
        )

    text = f"Successfully created commit:\n{result.stdout.strip()}\n"
    if result.stderr:
        text += f"\nGit Messages:\n{result.stderr.strip()}"
    return ToolResult.success(text)
