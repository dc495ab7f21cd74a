#!/usr/bin/env python3

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Union

from .git import GitClient

__all__ = [
    "DiffChanges",
    "DiffEmpty",
    "DiffFailure",
    "DiffResult",
    "get_diff",
    "STAGED_HEADER",
    "UNSTAGED_HEADER",
    "UNTRACKED_HEADER",
]

STAGED_HEADER = "=== STAGED CHANGES ==="
UNSTAGED_HEADER = "=== UNSTAGED CHANGES ==="
UNTRACKED_HEADER = "=== UNTRACKED FILES ==="


@dataclass(frozen=True)
class DiffEmpty:
    """No staged, unstaged or untracked changes."""


@dataclass(frozen=True)
class DiffChanges:
    text: str


@dataclass(frozen=True)
class DiffFailure:
    reason: str


DiffResult = Union[DiffEmpty, DiffChanges, DiffFailure]


def render_diff(staged: str, unstaged: str, untracked: List[str]) -> str:
    """Join the non-empty change sets into one labeled block.

    Returns:
        The rendered text, or an empty string if there is nothing to show
    """
    blocks: List[str] = []

    if staged.strip():
        blocks.append(f"{STAGED_HEADER}\n{staged.strip()}")

    if unstaged.strip():
        blocks.append(f"{UNSTAGED_HEADER}\n{unstaged.strip()}")

    files = [line for line in untracked if line.strip()]
    if files:
        # Untracked files carry no hunks but still count as changes, so the
        # caller can see new files before they are staged
        blocks.append(f"{UNTRACKED_HEADER}\n" + "\n".join(files))

    return "\n\n".join(blocks)


async def get_diff(git: GitClient, path: str) -> DiffResult:
    """Gather staged, unstaged and untracked changes for a working tree.

    The three reads are issued concurrently.  If any of them fails nothing
    is rendered and the first failure (in staged, unstaged, untracked order)
    is returned.

    Args:
        git: The git collaborator
        path: The repository working directory

    Returns:
        DiffEmpty, DiffChanges or DiffFailure
    """
    results = await asyncio.gather(
        git.staged_diff(path),
        git.unstaged_diff(path),
        git.untracked_files(path),
        return_exceptions=True,
    )

    for outcome in results:
        if isinstance(outcome, Exception):
            logging.error(f"Error getting git diff in {path}: {outcome}")
            return DiffFailure(str(outcome))
        if isinstance(outcome, BaseException):
            raise outcome

    staged, unstaged, untracked = results
    text = render_diff(staged, unstaged, untracked)  # type: ignore[arg-type]
    if not text:
        return DiffEmpty()
    return DiffChanges(text)
