#!/usr/bin/env python3

from ..command import ToolCommandBuilder
from ..commit import create_commit
from ..context import ProjectContext
from ..result import ToolResult

__all__ = [
    "COMMAND",
    "execute",
]

COMMAND = (
    ToolCommandBuilder()
    .set_name("create-commit")
    .set_description("Creates a Git commit with the specified message.")
    .add_string_option(
        "message",
        description="Full commit message; the first line is the header",
        min_length=1,
        min_length_message="Commit message cannot be empty",
    )
    .add_boolean_option(
        "addAll",
        default=False,
        description="Stage all changes (git add -A) before committing",
    )
    .add_boolean_option(
        "validate",
        default=True,
        description="Check the header against Conventional Commits first",
    )
    .build()
)


async def execute(
    context: ProjectContext,
    message: str,
    addAll: bool = False,
    validate: bool = True,
) -> ToolResult:
    return await create_commit(context, message, add_all=addAll, validate=validate)
