#!/usr/bin/env python3

"""Git operations used by the commit tools.

Every operation shells out to ``git`` in the given working directory and
raises :class:`~commitmcp.shell.GitCommandError` when git fails.  The
methods live on a small class so the project context can be handed a stub
in tests.
"""

import logging
import subprocess
from typing import List

from .shell import GitCommandError, run_command

__all__ = [
    "GitClient",
    "GitCommandError",
]

log = logging.getLogger(__name__)


class GitClient:
    """Thin async wrapper around the git command line."""

    async def is_inside_work_tree(self, directory: str) -> bool:
        """Check if the directory is inside a git working tree.

        Args:
            directory: The directory to check

        Returns:
            True if ``git rev-parse --is-inside-work-tree`` answers "true"
        """
        try:
            result = await run_command(
                ["git", "rev-parse", "--is-inside-work-tree"],
                cwd=directory,
                check=False,
            )
        except (subprocess.SubprocessError, OSError) as e:
            log.warning(f"Could not run git in {directory}: {e}")
            return False

        # Inside the .git directory itself git exits 0 but prints "false"
        return result.returncode == 0 and result.stdout.strip() == "true"

    async def staged_diff(self, directory: str) -> str:
        """Diff between HEAD and the index."""
        result = await run_command(["git", "diff", "--staged"], cwd=directory)
        return str(result.stdout)

    async def unstaged_diff(self, directory: str) -> str:
        """Diff between the index and the working tree."""
        result = await run_command(["git", "diff"], cwd=directory)
        return str(result.stdout)

    async def untracked_files(self, directory: str) -> List[str]:
        """List untracked files, honouring the usual exclude files.

        Returns:
            Paths relative to ``directory``, blank lines dropped
        """
        result = await run_command(
            ["git", "ls-files", "--others", "--exclude-standard"],
            cwd=directory,
        )
        return [line for line in result.stdout.split("\n") if line.strip()]

    async def stage_all(self, directory: str) -> None:
        """Stage every change in the working tree, including deletions."""
        await run_command(["git", "add", "-A"], cwd=directory)

    async def commit(
        self, directory: str, subject: str, body: str = ""
    ) -> subprocess.CompletedProcess[str]:
        """Create a commit from the index.

        Subject and body are passed as separate ``-m`` arguments; git joins
        them with a blank line.

        Args:
            directory: The repository working directory
            subject: First line of the commit message
            body: Optional remainder of the message

        Returns:
            The completed ``git commit`` process

        Raises:
            GitCommandError: If git refuses to commit
        """
        cmd = ["git", "commit", "-m", subject]
        if body:
            cmd.extend(["-m", body])
        return await run_command(cmd, cwd=directory)
