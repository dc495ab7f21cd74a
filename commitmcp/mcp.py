#!/usr/bin/env python3

import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .context import ProjectContext
from .prompt import get_conventional_commit_prompt, render_prompt
from .registry import Registry
from .tools import build_registry

__all__ = [
    "SERVER_NAME",
    "ToolCallError",
    "create_server",
    "run_stdio",
]

SERVER_NAME = "mcp-commit-helper"

CONVENTIONAL_COMMIT_PROMPT = types.Prompt(
    name="conventional-commit",
    description="Ask for a Conventional Commits message for a diff.",
    arguments=[
        types.PromptArgument(name="diff", description="The git diff", required=True),
        types.PromptArgument(
            name="scope", description="Scope to use in the header", required=False
        ),
    ],
)


class ToolCallError(Exception):
    """Carries an error result's text to the MCP server, which sets isError."""


def server_version() -> str:
    try:
        return version("commitmcp")
    except PackageNotFoundError:
        return "0.0.0"


def create_server(registry: Optional[Registry] = None) -> Server:
    """Create an MCP server exposing the registry's tools.

    Args:
        registry: The tools to serve; defaults to the commit tools bound to
            a fresh project context

    Returns:
        A low-level MCP server ready to be run on a transport
    """
    if registry is None:
        registry = build_registry(ProjectContext())

    server: Server = Server(SERVER_NAME, version=server_version())

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [
            types.Tool(
                name=command.name,
                description=command.description,
                inputSchema=command.input_schema(),
            )
            for command in registry.commands()
        ]

    # Arguments are checked by the registry so that its error messages reach
    # the caller unchanged
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        result = await registry.dispatch(name, arguments)
        if result.is_error:
            raise ToolCallError(result.text)
        return [types.TextContent(type="text", text=block.text) for block in result.content]

    @server.list_prompts()
    async def list_prompts() -> List[types.Prompt]:
        return [CONVENTIONAL_COMMIT_PROMPT]

    @server.get_prompt()
    async def get_prompt(
        name: str, arguments: Optional[Dict[str, str]]
    ) -> types.GetPromptResult:
        if name != CONVENTIONAL_COMMIT_PROMPT.name:
            raise ValueError(f"Unknown prompt: {name}")
        arguments = arguments or {}
        if "diff" not in arguments:
            raise ValueError("Missing required argument 'diff'")
        text = render_prompt(
            get_conventional_commit_prompt(),
            arguments["diff"],
            arguments.get("scope"),
        )
        return types.GetPromptResult(
            description=CONVENTIONAL_COMMIT_PROMPT.description,
            messages=[
                types.PromptMessage(
                    role="user", content=types.TextContent(type="text", text=text)
                )
            ],
        )

    return server


async def run_stdio(server: Server) -> None:
    """Serve MCP requests on stdin/stdout until the client disconnects."""
    async with stdio_server() as (read_stream, write_stream):
        logging.info("MCP server connected on stdio")
        await server.run(
            read_stream, write_stream, server.create_initialization_options()
        )
