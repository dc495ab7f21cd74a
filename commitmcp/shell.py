#!/usr/bin/env python3

import asyncio
import logging
import subprocess
from typing import Dict, List, Optional

__all__ = [
    "GitCommandError",
    "run_command",
    "get_subprocess_env",
]


class GitCommandError(RuntimeError):
    """A subprocess exited with a non-zero status.

    The captured output is kept on the exception so callers can classify
    the failure (e.g. "nothing to commit") without re-running the command.
    """

    def __init__(
        self,
        cmd: List[str],
        returncode: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.cmd = cmd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

        message = f"Command failed with exit code {returncode}: {' '.join(cmd)}"
        if stdout:
            message += f"\nStdout: {stdout}"
        if stderr:
            message += f"\nStderr: {stderr}"
        super().__init__(message)

    @property
    def output(self) -> str:
        """Combined stdout and stderr; git prints some failures on either."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


def get_subprocess_env() -> Optional[Dict[str, str]]:
    """
    Get the environment variables to be used for subprocess execution.
    This function can be mocked in tests to control the environment.

    Returns:
        Optional dictionary of environment variables, or None to use the current environment.
    """
    return None


async def run_command(
    cmd: List[str],
    cwd: Optional[str] = None,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """
    Run a subprocess command with consistent logging asynchronously.

    The command is executed directly (never through a shell), so every
    element of ``cmd`` reaches the program as a single argument.

    Args:
        cmd: Command to run as a list of strings
        cwd: Current working directory for the command
        check: If True, raise GitCommandError if the command returns non-zero exit code

    Returns:
        CompletedProcess instance with attributes args, returncode, stdout, stderr

    Raises:
        GitCommandError: If check=True and process returns non-zero exit code
        OSError: If the executable cannot be started

    Notes:
        Environment variables are obtained from get_subprocess_env() function.
    """
    log_cmd = " ".join(str(c) for c in cmd)
    logging.info(f"Running command: {log_cmd}")

    process = await asyncio.create_subprocess_exec(
        *cmd,
        cwd=cwd,
        env=get_subprocess_env(),
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        stdin=asyncio.subprocess.DEVNULL,
    )

    # No timeout: a hung git process hangs the calling tool
    stdout_data, stderr_data = await process.communicate()

    stdout = stdout_data.decode(errors="replace") if stdout_data else ""
    stderr = stderr_data.decode(errors="replace") if stderr_data else ""
    if stdout:
        logging.debug(f"Command stdout: {stdout}")
    if stderr:
        logging.debug(f"Command stderr: {stderr}")

    returncode = 0 if process.returncode is None else process.returncode
    logging.debug(f"Command return code: {returncode}")

    if check and returncode != 0:
        raise GitCommandError(cmd, returncode, stdout, stderr)

    return subprocess.CompletedProcess[str](
        args=cmd,
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )
