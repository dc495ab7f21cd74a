#!/usr/bin/env python3

from typing import Optional

from ..command import ToolCommandBuilder
from ..commit import propose_message
from ..context import ProjectContext
from ..result import ToolResult

__all__ = [
    "COMMAND",
    "execute",
]

COMMAND = (
    ToolCommandBuilder()
    .set_name("generate-commit-prompt")
    .set_description("Generates a commit message prompt based on current Git diff.")
    .add_string_option(
        "scope",
        required=False,
        description="Conventional Commits scope to use instead of inferring one",
    )
    .build()
)


async def execute(context: ProjectContext, scope: Optional[str] = None) -> ToolResult:
    return await propose_message(context, scope)
