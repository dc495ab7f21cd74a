#!/usr/bin/env python3

from functools import partial

from ..context import ProjectContext
from ..registry import Registry
from . import create_commit, generate_commit_prompt, get_git_diff, initialize_project

__all__ = [
    "TOOL_MODULES",
    "build_registry",
]

# Registration order is the order tools are listed to clients
TOOL_MODULES = [
    initialize_project,
    get_git_diff,
    generate_commit_prompt,
    create_commit,
]


def build_registry(context: ProjectContext) -> Registry:
    """Register every tool against a project context.

    Raises:
        DuplicateToolError: If two tool modules declare the same name
    """
    registry = Registry()
    for module in TOOL_MODULES:
        registry.register(module.COMMAND, partial(module.execute, context))
    return registry
