#!/usr/bin/env python3

import re
from dataclasses import dataclass
from typing import Optional

__all__ = [
    "COMMIT_TYPES",
    "CommitHeaderMatch",
    "validate_header",
]

# Allowed Conventional Commits types, in the order they are shown to users
COMMIT_TYPES = [
    "feat",
    "fix",
    "build",
    "chore",
    "ci",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
]

# type, optional (scope), optional "!", colon, one space, description
HEADER_RE = re.compile(r"(\w+)(?:\(([\w.-]+)\))?(!)?: (.+)", re.ASCII)


@dataclass(frozen=True)
class CommitHeaderMatch:
    is_valid: bool
    type: Optional[str] = None
    scope: Optional[str] = None
    breaking: bool = False
    description: Optional[str] = None
    error: Optional[str] = None


def validate_header(message: str) -> CommitHeaderMatch:
    """Validate the header of a commit message against Conventional Commits.

    Only the first line is inspected; the body is ignored.  A trailing
    period in the description is accepted.

    Args:
        message: The full commit message

    Returns:
        A CommitHeaderMatch; invalid matches carry a human-readable error
    """
    header = message.split("\n")[0].strip()

    if not header:
        return CommitHeaderMatch(
            is_valid=False, error="Commit message header cannot be empty."
        )

    match = HEADER_RE.fullmatch(header)
    if match is None:
        return CommitHeaderMatch(
            is_valid=False,
            error=(
                "Invalid header format. Expected '<type>(<scope>): <description>' "
                "or '<type>!: <description>' or '<type>(<scope>)!: <description>'."
            ),
        )

    commit_type, scope, bang, description = match.groups()

    if commit_type not in COMMIT_TYPES:
        return CommitHeaderMatch(
            is_valid=False,
            error=f"Invalid type '{commit_type}'. Must be one of: {', '.join(COMMIT_TYPES)}.",
        )

    if not description:
        return CommitHeaderMatch(is_valid=False, error="Description cannot be empty.")

    return CommitHeaderMatch(
        is_valid=True,
        type=commit_type,
        scope=scope,
        breaking=bang is not None,
        description=description,
    )
