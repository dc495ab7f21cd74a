#!/usr/bin/env python3

import logging
import os
import stat
from dataclasses import dataclass
from typing import Optional

from .git import GitClient
from .result import ErrorKind, ToolResult

__all__ = [
    "InitResult",
    "ProjectContext",
    "NOT_INITIALIZED_MESSAGE",
    "resolve_path",
]

NOT_INITIALIZED_MESSAGE = (
    "Error: Project not initialized or not a valid Git repository. "
    "Please use initialize-project tool first."
)


def resolve_path(raw_path: str) -> str:
    """Turn a user-supplied path into an absolute, normalized path.

    Expands the tilde character (~) if present to the user's home directory.
    Symlinks are left alone and the filesystem is not consulted.
    """
    return os.path.abspath(os.path.expanduser(raw_path))


@dataclass(frozen=True)
class InitResult:
    path: str
    kind: Optional[ErrorKind] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind is None


class ProjectContext:
    """The single project the tools operate on.

    The slot starts empty and is only filled by :meth:`initialize` once
    the path has been confirmed to be a directory inside a git working
    tree.  Re-initializing simply replaces the previous project.
    """

    def __init__(self, git: Optional[GitClient] = None) -> None:
        self.git = git if git is not None else GitClient()
        self.path: Optional[str] = None
        self.validated = False

    @property
    def repository_path(self) -> Optional[str]:
        """The validated project path, or None if the tools must refuse to run."""
        if self.validated and self.path:
            return self.path
        return None

    def not_initialized(self) -> ToolResult:
        return ToolResult.error(ErrorKind.NOT_INITIALIZED, NOT_INITIALIZED_MESSAGE)

    async def initialize(self, raw_path: str) -> InitResult:
        """Validate a path and make it the current project.

        Each check short-circuits; the context is only updated after all of
        them pass.

        Args:
            raw_path: The path as supplied by the caller

        Returns:
            An InitResult with the resolved path, or the reason it was rejected
        """
        resolved_path = resolve_path(raw_path)

        try:
            st = os.stat(resolved_path)
        except FileNotFoundError:
            return InitResult(
                resolved_path,
                ErrorKind.PATH_ERROR,
                f'The path "{resolved_path}" does not exist.',
            )
        except NotADirectoryError:
            return InitResult(
                resolved_path,
                ErrorKind.PATH_ERROR,
                f'The path "{resolved_path}" is not a directory.',
            )
        except (OSError, ValueError) as e:
            # ValueError covers paths os.stat refuses outright, e.g. an embedded NUL
            return InitResult(
                resolved_path,
                ErrorKind.PATH_ERROR,
                f'Error accessing path "{resolved_path}": {e}',
            )

        if not stat.S_ISDIR(st.st_mode):
            return InitResult(
                resolved_path,
                ErrorKind.PATH_ERROR,
                f'The path "{resolved_path}" is not a directory.',
            )

        if not await self.git.is_inside_work_tree(resolved_path):
            return InitResult(
                resolved_path,
                ErrorKind.NOT_A_GIT_REPO,
                f"The path \"{resolved_path}\" is not a git repository. "
                "Initialize with 'git init' if needed.",
            )

        self.path = resolved_path
        self.validated = True
        logging.info(f"Initialized project at {resolved_path}")
        return InitResult(resolved_path)
