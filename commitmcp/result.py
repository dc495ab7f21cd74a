#!/usr/bin/env python3

"""The uniform result envelope returned by every tool."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

__all__ = [
    "CommitFailureReason",
    "ErrorKind",
    "TextBlock",
    "ToolResult",
]


class ErrorKind(str, Enum):
    NOT_INITIALIZED = "NotInitialized"
    PATH_ERROR = "PathError"
    NOT_A_GIT_REPO = "NotAGitRepo"
    VALIDATION_ERROR = "ValidationError"
    COMMIT_HEADER_INVALID = "CommitHeaderInvalid"
    DIFF_FAILURE = "DiffFailure"
    COMMIT_FAILURE = "CommitFailure"
    UNKNOWN_TOOL = "UnknownTool"
    INTERNAL = "Internal"


class CommitFailureReason(str, Enum):
    NOTHING_STAGED = "nothing-to-commit"
    MISSING_IDENTITY = "missing-identity"
    UNSTAGED_PRESENT = "unstaged-present"
    OTHER = "other"


@dataclass(frozen=True)
class TextBlock:
    text: str
    type: str = "text"


@dataclass(frozen=True)
class ToolResult:
    """A list of text content blocks plus an error flag.

    ``kind`` and ``reason`` classify errors for callers inside the process;
    only ``content`` and ``is_error`` are sent to the client.
    """

    content: Tuple[TextBlock, ...]
    is_error: bool = False
    kind: Optional[ErrorKind] = None
    reason: Optional[CommitFailureReason] = None

    @classmethod
    def success(cls, text: str) -> "ToolResult":
        return cls(content=(TextBlock(text),))

    @classmethod
    def error(
        cls,
        kind: ErrorKind,
        text: str,
        reason: Optional[CommitFailureReason] = None,
    ) -> "ToolResult":
        return cls(content=(TextBlock(text),), is_error=True, kind=kind, reason=reason)

    @property
    def text(self) -> str:
        return "\n".join(block.text for block in self.content)
