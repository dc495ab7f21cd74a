#!/usr/bin/env python3

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .command import ArgumentError, ToolCommand
from .result import ErrorKind, ToolResult

__all__ = [
    "DuplicateToolError",
    "Handler",
    "Registry",
]

Handler = Callable[..., Awaitable[ToolResult]]


class DuplicateToolError(ValueError):
    """Raised at startup when two tools share a name."""


class Registry:
    """Holds the registered tools and dispatches calls to them.

    Handlers receive the validated arguments as keyword arguments and
    return a :class:`ToolResult`.  The registry never rewrites a handler's
    result; it only manufactures errors for argument validation, unknown
    tools and unexpected exceptions.
    """

    def __init__(self) -> None:
        self._commands: Dict[str, ToolCommand] = {}
        self._handlers: Dict[str, Handler] = {}

    def register(self, command: ToolCommand, handler: Handler) -> None:
        if command.name in self._commands:
            raise DuplicateToolError(f"Tool '{command.name}' is already registered")
        self._commands[command.name] = command
        self._handlers[command.name] = handler
        logging.debug(f"Registered tool: {command.name}")

    def commands(self) -> List[ToolCommand]:
        """Registered descriptors, in registration order."""
        return list(self._commands.values())

    def get(self, name: str) -> Optional[ToolCommand]:
        return self._commands.get(name)

    async def dispatch(self, name: str, raw_args: Any = None) -> ToolResult:
        """Validate the arguments for a tool and run its handler.

        Args:
            name: The registered tool name
            raw_args: The arguments as received from the caller

        Returns:
            The handler's result, or an error result if the tool is unknown,
            the arguments are invalid, or the handler raised
        """
        command = self._commands.get(name)
        if command is None:
            return ToolResult.error(ErrorKind.UNKNOWN_TOOL, f"Error: Unknown tool '{name}'")

        try:
            arguments = command.validate(raw_args)
        except ArgumentError as e:
            logging.info(f"Rejected arguments for {name}: {e}")
            return ToolResult.error(ErrorKind.VALIDATION_ERROR, f"Error: {e}")

        logging.info(f"Calling tool {name}")
        try:
            return await self._handlers[name](**arguments)
        except Exception as e:
            logging.exception(f"Unexpected error in tool {name}")
            return ToolResult.error(
                ErrorKind.INTERNAL, f"Unexpected error running {name}: {e}"
            )
