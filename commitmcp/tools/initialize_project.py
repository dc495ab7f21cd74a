#!/usr/bin/env python3

from ..command import ToolCommandBuilder
from ..context import ProjectContext
from ..result import ToolResult

__all__ = [
    "COMMAND",
    "execute",
]

COMMAND = (
    ToolCommandBuilder()
    .set_name("initialize-project")
    .set_description("Initializes a git project at the given path")
    .add_string_option(
        "path",
        description="Path to a directory inside a git working tree",
        min_length=1,
        min_length_message="Path cannot be empty",
    )
    .build()
)


async def execute(context: ProjectContext, path: str) -> ToolResult:
    """Validate ``path`` and make it the project the other tools work on."""
    result = await context.initialize(path)
    if result.kind is not None:
        return ToolResult.error(result.kind, f"Error: {result.error}")
    return ToolResult.success(f"Successfully initialized git project at: {result.path}")
