#!/usr/bin/env python3

from ..command import ToolCommandBuilder
from ..context import ProjectContext
from ..diff import DiffEmpty, DiffFailure, get_diff
from ..result import ErrorKind, ToolResult

__all__ = [
    "COMMAND",
    "NO_CHANGES",
    "execute",
]

NO_CHANGES = "No changes detected"

COMMAND = (
    ToolCommandBuilder()
    .set_name("get-git-diff")
    .set_description("Retrieves the current Git diff for the initialized project.")
    .build()
)


async def execute(context: ProjectContext) -> ToolResult:
    """Return the staged, unstaged and untracked changes of the project.

    Args:
        context: The current project

    Returns:
        The labeled diff text, "No changes detected", or an error
    """
    path = context.repository_path
    if path is None:
        return context.not_initialized()

    diff = await get_diff(context.git, path)
    if isinstance(diff, DiffEmpty):
        return ToolResult.success(NO_CHANGES)
    if isinstance(diff, DiffFailure):
        return ToolResult.error(
            ErrorKind.DIFF_FAILURE, f"Error retrieving git diff: {diff.reason}"
        )
    return ToolResult.success(diff.text)
