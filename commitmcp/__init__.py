#!/usr/bin/env python3

from .context import ProjectContext
from .conventional import CommitHeaderMatch, validate_header
from .main import cli, configure_logging, run
from .mcp import create_server
from .registry import Registry
from .result import ToolResult
from .tools import build_registry

__all__ = [
    "CommitHeaderMatch",
    "ProjectContext",
    "Registry",
    "ToolResult",
    "build_registry",
    "cli",
    "configure_logging",
    "create_server",
    "run",
    "validate_header",
]
